import asyncio
import logging
from typing import Any, Callable, List, Optional
from urllib.parse import quote, urlencode

from pydantic import ValidationError

from catalogcache.context import CatalogContext
from catalogcache.models import (
    App,
    CachedApp,
    CacheProgress,
    Collection,
    Homepage,
    SearchResponse,
    empty_collection,
)
from catalogcache.normalize import (
    normalize_app,
    normalize_collection,
    normalize_search_response,
)
from catalogcache.sources.base import DataSource

logger = logging.getLogger(__name__)


def _to_collection(payload: Any, collection_id: Optional[str] = None) -> Collection:
    """Normalize a collection payload, which may also be a bare list of apps."""
    if isinstance(payload, list):
        payload = {"hits": payload}
    if not isinstance(payload, dict):
        raise ValueError("Collection payload must be a JSON object or array")

    collection = normalize_collection(payload)
    apps = collection.hits if collection.hits is not None else collection.apps
    apps = apps or []
    collection.hits = apps
    collection.apps = apps
    if collection.totalHits is None:
        collection.totalHits = len(apps)
    if collection_id is not None and collection.id is None:
        collection.id = collection_id
    return collection


class RemoteDataSource(DataSource):
    """Serves catalog queries straight from the public catalog API."""

    def __init__(self, context: CatalogContext):
        self.context = context
        self.remote = context.remote

    async def _fetch_app(self, app_id: str) -> App:
        payload = await self.remote.fetch(f"/apps/{quote(app_id, safe='')}")
        if not isinstance(payload, dict):
            raise ValueError(f"App payload for {app_id} must be a JSON object")
        payload = dict(payload)
        payload.setdefault("app_id", payload.get("id") or app_id)
        return normalize_app(payload)

    async def get_app(self, app_id: str) -> App:
        try:
            return await self._fetch_app(app_id)
        except Exception as e:
            logger.error(f"Failed to fetch app {app_id} from API: {e}")
            return App(app_id=app_id)

    async def get_apps(self, app_ids: List[str]) -> List[App]:
        results = await asyncio.gather(
            *(self._fetch_app(app_id) for app_id in app_ids), return_exceptions=True
        )
        apps = []
        for app_id, result in zip(app_ids, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to fetch app {app_id} from API: {result}")
                continue
            apps.append(result)
        return apps

    async def list_apps(self) -> List[App]:
        try:
            payload = await self.remote.fetch("/appstream")
        except Exception as e:
            logger.error(f"Failed to fetch apps from API: {e}")
            return []

        apps = []
        for item in payload if isinstance(payload, list) else []:
            if isinstance(item, str):
                apps.append(App(app_id=item))
            elif isinstance(item, dict):
                try:
                    apps.append(normalize_app(item))
                except ValidationError as e:
                    logger.warning(f"Skipping invalid app entry {item.get('app_id')}: {e}")
        return apps

    async def get_categories(self) -> List[Collection]:
        try:
            payload = await self.remote.fetch("/categories")
            categories = []
            for item in payload:
                if isinstance(item, str):
                    categories.append(Collection(id=item, name=item))
                elif isinstance(item, dict):
                    categories.append(
                        Collection(id=item.get("id"), name=item.get("name") or item.get("id"))
                    )
            return categories
        except Exception as e:
            logger.error(f"Failed to fetch categories from API: {e}")
            return []

    async def get_collection_category(
        self, category_id: str, limit: int, offset: int
    ) -> Collection:
        query = urlencode({"limit": limit, "offset": offset})
        path = f"/apps/collection/category/{quote(category_id, safe='')}?{query}"
        try:
            return _to_collection(await self.remote.fetch(path), category_id)
        except Exception as e:
            logger.error(f"Failed to fetch category collection {category_id} from API: {e}")
            return empty_collection(category_id)

    async def get_collection(self, collection_type: str) -> Collection:
        try:
            payload = await self.remote.fetch(f"/apps/collection/{collection_type}")
            return _to_collection(payload)
        except Exception as e:
            logger.error(f"Failed to get {collection_type} collection apps from API: {e}")
            return empty_collection()

    async def search_apps(self, query: str, limit: int, offset: int) -> SearchResponse:
        try:
            payload = await self.remote.fetch(f"/apps/search?q={quote(query, safe='')}")
            if isinstance(payload, list):
                payload = {"hits": payload}
            response = normalize_search_response(payload)
        except Exception as e:
            logger.error(f"Failed to search apps from API: {e}")
            return SearchResponse(hits=[], totalHits=0, query=query)

        hits = response.hits or []
        if response.totalHits is None:
            response.totalHits = len(hits)
        response.hits = hits[offset : offset + limit]
        response.query = query
        return response

    async def get_homepage(self) -> Homepage:
        try:
            popular, trending, recently_updated = await asyncio.gather(
                self.remote.fetch("/apps/collection/popular"),
                self.remote.fetch("/apps/collection/trending"),
                self.remote.fetch("/apps/collection/recently-updated"),
            )
            return Homepage(
                popular=_to_collection(popular),
                trending=_to_collection(trending),
                recentlyUpdated=_to_collection(recently_updated),
            )
        except Exception as e:
            logger.error(f"Failed to fetch homepage collections from API: {e}")
            return Homepage(
                popular=empty_collection(),
                trending=empty_collection(),
                recentlyUpdated=empty_collection(),
            )

    async def is_cache_ready(self) -> bool:
        # There is no local cache to wait for.
        return True

    async def is_install_reference_present(self, ref_id: str) -> bool:
        return False

    async def cache_apps(self, apps: List[CachedApp]) -> bool:
        return False

    async def initialize_cache(
        self,
        on_progress: Optional[Callable[[CacheProgress], None]],
        clear_cache: bool,
    ) -> Optional[Callable[[], None]]:
        return None
