import asyncio
import logging
from typing import Callable, List, Optional

from catalogcache.channel.events import PROGRESS_EVENT
from catalogcache.context import CatalogContext
from catalogcache.enrich import EnrichmentPipeline, app_from_row
from catalogcache.icons.paths import convert_icon_path
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

logger = logging.getLogger(__name__)

# Popular apps resolve icons one by one without filling the shared icon cache.
DIRECT_ICON_COLLECTIONS = ("popular",)


class LocalDataSource(DataSource):
    """Serves catalog queries from the local cache service."""

    def __init__(self, context: CatalogContext):
        self.context = context
        self.channel = context.channel
        self.pipeline = EnrichmentPipeline(self.channel, context.icons, privileged=True)

    async def get_app(self, app_id: str) -> App:
        cached = await self.channel.get_app(app_id)
        if cached is None:
            return App(app_id=app_id)
        icon = await self.pipeline.resolve_icon(cached)
        return app_from_row(cached, icon)

    async def get_apps(self, app_ids: List[str]) -> List[App]:
        return await self.pipeline.enrich(app_ids)

    async def list_apps(self) -> List[App]:
        rows = await self.channel.get_all_apps()
        return [
            app_from_row(row, convert_icon_path(row.icon_path) or row.icon_url)
            for row in rows
        ]

    async def get_categories(self) -> List[Collection]:
        categories = await self.channel.get_categories()
        return [Collection(id=category.id, name=category.name) for category in categories]

    async def get_collection_category(
        self, category_id: str, limit: int, offset: int
    ) -> Collection:
        cached = await self.channel.get_category_collection(category_id)
        if cached and cached.app_ids:
            page_ids = cached.app_ids[offset : offset + limit]
            apps = await self.pipeline.enrich(page_ids)
            return Collection(
                id=category_id,
                hits=apps,
                apps=apps,
                totalHits=cached.total_hits,
            )

        self.context.refreshes.try_begin_refresh(
            f"category:{category_id}",
            lambda: self.channel.refresh_category_collection(category_id),
        )
        return empty_collection(category_id)

    async def get_collection(self, collection_type: str) -> Collection:
        rows = await self.channel.get_collection_apps(collection_type)
        if rows:
            apps = await self.pipeline.enrich_rows(
                rows, skip_icon_data=collection_type in DIRECT_ICON_COLLECTIONS
            )
            return Collection(hits=apps, apps=apps, totalHits=len(apps))

        self.context.refreshes.try_begin_refresh(
            collection_type,
            lambda: self.channel.refresh_collection(collection_type),
        )
        return empty_collection()

    async def search_apps(self, query: str, limit: int, offset: int) -> SearchResponse:
        results = await self.channel.search_apps(query)
        page = results[offset : offset + limit]
        hits = [
            App(
                app_id=result.app_id,
                name=result.name,
                summary=result.summary,
                icon=convert_icon_path(result.icon_path or result.icon_url),
            )
            for result in page
        ]
        return SearchResponse(hits=hits, totalHits=len(results), query=query)

    async def get_homepage(self) -> Homepage:
        collections = await self.channel.get_homepage_collections()
        popular, trending, recently_updated = await asyncio.gather(
            self.pipeline.enrich_rows(collections.popular),
            self.pipeline.enrich_rows(collections.trending),
            self.pipeline.enrich_rows(collections.recentlyUpdated),
        )
        return Homepage(
            popular=Collection(hits=popular, apps=popular, totalHits=len(popular)),
            trending=Collection(hits=trending, apps=trending, totalHits=len(trending)),
            recentlyUpdated=Collection(
                hits=recently_updated,
                apps=recently_updated,
                totalHits=len(recently_updated),
            ),
        )

    async def is_cache_ready(self) -> bool:
        return await self.channel.is_cache_ready()

    async def is_install_reference_present(self, ref_id: str) -> bool:
        return await self.channel.is_install_reference_present(ref_id)

    async def cache_apps(self, apps: List[CachedApp]) -> bool:
        return await self.channel.write_apps(apps)

    async def initialize_cache(
        self,
        on_progress: Optional[Callable[[CacheProgress], None]],
        clear_cache: bool,
    ) -> Optional[Callable[[], None]]:
        unlisten = None
        if on_progress:

            def report(payload):
                try:
                    on_progress(CacheProgress.model_validate(payload))
                except Exception as e:
                    logger.error(f"Failed to report cache progress: {e}")

            unlisten = self.context.transport.listen(PROGRESS_EVENT, report)

        def on_error(exc: Exception):
            if on_progress:
                on_progress(
                    CacheProgress(
                        stage="error",
                        progress=0,
                        total=0,
                        message="Cache initialization failed",
                        details=str(exc),
                    )
                )

        self.context.spawn(
            self.channel.initiate_cache_population(clear_cache, on_error=on_error)
        )
        return unlisten
