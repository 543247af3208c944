import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from catalogcache.channel.base import CacheChannel
from catalogcache.models import (
    CachedApp,
    CachedCategory,
    CachedCategoryCollection,
    HomepageCollections,
    SearchResult,
)

logger = logging.getLogger(__name__)


def _apps(rows: Any) -> List[CachedApp]:
    return [CachedApp.model_validate(row) for row in rows or []]


class LocalCacheChannel:
    """Typed operations against the local cache service.

    Every read degrades to an empty or neutral value when the service fails,
    is not ready, or returns something that does not parse. Only the
    ``refresh_*`` commands raise, since their callers run them in the
    background and own the failure.
    """

    def __init__(self, transport: CacheChannel):
        self.transport = transport

    async def _call(
        self,
        command: str,
        description: str,
        default: Any,
        args: Optional[Dict[str, Any]] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        try:
            result = await self.transport.invoke(command, args)
            return parse(result) if parse else result
        except Exception as e:
            logger.error(f"Failed to {description}: {e}")
            return default

    async def get_all_apps(self) -> List[CachedApp]:
        return await self._call(
            "get_cached_apps_sync", "get cached apps", [], parse=_apps
        )

    async def get_apps_batch(
        self,
        app_ids: List[str],
        include_description: bool = True,
        include_icon_data: bool = True,
        include_cached_at: bool = False,
    ) -> List[CachedApp]:
        if not app_ids:
            return []
        return await self._call(
            "get_apps_batch_opt",
            "get cached apps batch",
            [],
            args={
                "app_ids": list(app_ids),
                "include_description": include_description,
                "include_icon_data": include_icon_data,
                "include_cached_at": include_cached_at,
            },
            parse=_apps,
        )

    async def get_app(self, app_id: str) -> Optional[CachedApp]:
        return await self._call(
            "get_cached_app_sync",
            f"get cached app {app_id}",
            None,
            args={"app_id": app_id},
            parse=lambda row: CachedApp.model_validate(row) if row else None,
        )

    async def get_categories(self) -> List[CachedCategory]:
        return await self._call(
            "get_cached_categories_sync",
            "get cached categories",
            [],
            parse=lambda rows: [CachedCategory.model_validate(row) for row in rows or []],
        )

    async def get_category_collection(
        self, category_id: str
    ) -> Optional[CachedCategoryCollection]:
        return await self._call(
            "get_cached_category_collection_sync",
            f"get cached category collection {category_id}",
            None,
            args={"category_id": category_id},
            parse=lambda row: (
                CachedCategoryCollection.model_validate(row) if row else None
            ),
        )

    async def get_category_collection_with_apps(
        self, category_id: str, limit: int
    ) -> Optional[Tuple[CachedCategoryCollection, List[CachedApp]]]:
        def parse(result):
            if not result:
                return None
            collection, apps = result
            return CachedCategoryCollection.model_validate(collection), _apps(apps)

        return await self._call(
            "get_cached_category_collection_with_apps_sync",
            f"get cached category collection with apps {category_id}",
            None,
            args={"category_id": category_id, "limit": limit},
            parse=parse,
        )

    async def get_category_apps_paginated(
        self, category_id: str, limit: int, offset: int
    ) -> Tuple[List[CachedApp], int]:
        def parse(result):
            apps, total = result
            return _apps(apps), int(total)

        return await self._call(
            "get_cached_category_apps_paginated",
            f"get cached category apps paginated for {category_id}",
            ([], 0),
            args={"category_id": category_id, "limit": limit, "offset": offset},
            parse=parse,
        )

    async def get_collection_apps(self, collection_type: str) -> List[CachedApp]:
        return await self._call(
            "get_cached_collection_apps_sync",
            f"get {collection_type} collection apps",
            [],
            args={"collection_type": collection_type},
            parse=_apps,
        )

    async def get_homepage_collections(self) -> HomepageCollections:
        def parse(result):
            popular, trending, recently_updated = result
            return HomepageCollections(
                popular=_apps(popular),
                trending=_apps(trending),
                recentlyUpdated=_apps(recently_updated),
            )

        return await self._call(
            "get_homepage_collections_sync",
            "get homepage collections",
            HomepageCollections(),
            parse=parse,
        )

    async def search_apps(self, query: str) -> List[SearchResult]:
        return await self._call(
            "search_cached_apps_sync",
            "search cached apps",
            [],
            args={"query": query},
            parse=lambda rows: [SearchResult.model_validate(row) for row in rows or []],
        )

    async def get_icon_batch(self, app_ids: List[str]) -> Optional[List[Optional[str]]]:
        """Resolve icon data URLs for ``app_ids``; ``None`` when the call failed."""
        return await self._call(
            "get_app_icons_batch_sync",
            "get app icons batch",
            None,
            args={"app_ids": list(app_ids)},
            parse=lambda urls: [url or None for url in urls],
        )

    async def get_icon_data_url(self, app_id: str) -> Optional[str]:
        return await self._call(
            "get_app_icon_data_url_sync",
            f"get icon data URL for {app_id}",
            None,
            args={"app_id": app_id},
            parse=lambda url: url or None,
        )

    async def is_cache_ready(self) -> bool:
        return await self._call(
            "is_cache_ready_sync", "check cache readiness", False, parse=bool
        )

    async def initiate_cache_population(
        self,
        clear_cache: bool = False,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        try:
            await self.transport.invoke("initiate_cache", {"clear_cache": clear_cache})
            return True
        except Exception as e:
            logger.error(f"Cache initialization error: {e}")
            if on_error:
                on_error(e)
            return False

    async def write_apps(self, apps: List[CachedApp]) -> bool:
        return await self._call(
            "cache_apps",
            "cache apps",
            False,
            args={"apps": [app.model_dump(exclude_none=True) for app in apps]},
            parse=lambda _: True,
        )

    async def is_install_reference_present(self, ref_id: str) -> bool:
        return await self._call(
            "is_flatpak_installed",
            f"check install state of {ref_id}",
            False,
            args={"ref_id": ref_id},
            parse=bool,
        )

    async def refresh_collection(self, collection_type: str) -> Any:
        return await self.transport.invoke(
            "fetch_and_cache_collection", {"collection_type": collection_type}
        )

    async def refresh_category_collection(self, category_id: str) -> Any:
        return await self.transport.invoke(
            "fetch_and_cache_category_collection", {"category_id": category_id}
        )
