import logging
from typing import Callable, List, Optional

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
from catalogcache.sources.base import DataSource
from catalogcache.sources.local import LocalDataSource
from catalogcache.sources.remote import RemoteDataSource
from catalogcache.sources.selector import is_privileged_channel_available

logger = logging.getLogger(__name__)


def canonical_category_id(category: str) -> str:
    """Upper-case the first character of a category id, leaving the rest."""
    if not category:
        raise ValueError("Empty category ID")
    return category[0].upper() + category[1:]


class Catalog:
    """Public entry point for catalog queries.

    Each operation picks its data source once: the local cache when the
    privileged channel is available, otherwise the remote API. Lower-layer
    failures come back as empty results rather than exceptions.
    """

    def __init__(self, context: Optional[CatalogContext] = None):
        self.context = context or CatalogContext()

    def _source(self) -> DataSource:
        if is_privileged_channel_available(self.context):
            return LocalDataSource(self.context)
        return RemoteDataSource(self.context)

    async def get_app(self, app_id: str) -> App:
        return await self._source().get_app(app_id)

    async def get_apps(self, app_ids: List[str]) -> List[App]:
        return await self._source().get_apps(app_ids)

    async def list_apps(self) -> List[App]:
        return await self._source().list_apps()

    async def get_app_picks(self) -> List[App]:
        return []

    async def get_app_pick(self, app_id: str) -> App:
        return await self.get_app(app_id)

    async def get_collections(self) -> List[Collection]:
        return []

    async def get_collection(self, collection_id: str) -> Collection:
        return empty_collection(collection_id)

    async def get_collection_categories(self) -> List[Collection]:
        return await self._source().get_categories()

    async def get_collection_category(
        self, category: str, limit: int = 24, offset: int = 0
    ) -> Collection:
        category_id = canonical_category_id(category)
        return await self._source().get_collection_category(category_id, limit, offset)

    async def get_collection_category_subcategories(self, category: str) -> List[Collection]:
        return []

    async def get_collection_popular(self) -> Collection:
        return await self._source().get_collection("popular")

    async def get_collection_trending(self) -> Collection:
        return await self._source().get_collection("trending")

    async def get_collection_recently_updated(self) -> Collection:
        return await self._source().get_collection("recently-updated")

    async def get_collection_recently_added(self) -> Collection:
        return empty_collection()

    async def search_apps(
        self, query: str, limit: int = 50, offset: int = 0
    ) -> SearchResponse:
        return await self._source().search_apps(query, limit, offset)

    async def get_homepage(self) -> Homepage:
        return await self._source().get_homepage()

    async def is_cache_ready(self) -> bool:
        return await self._source().is_cache_ready()

    async def is_install_reference_present(self, ref_id: str) -> bool:
        return await self._source().is_install_reference_present(ref_id)

    async def cache_apps(self, apps: List[CachedApp]) -> bool:
        return await self._source().cache_apps(apps)

    async def initialize_cache(
        self,
        on_progress: Optional[Callable[[CacheProgress], None]] = None,
        clear_cache: bool = False,
    ) -> Optional[Callable[[], None]]:
        """Ask the cache service to (re)populate itself in the background.

        ``on_progress`` receives every progress event; an ``error`` stage is
        final. Returns a function that detaches the listener, if one was
        attached.
        """
        logger.info(f"Initializing catalog cache (clear_cache={clear_cache})")
        return await self._source().initialize_cache(on_progress, clear_cache)
