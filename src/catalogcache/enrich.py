import asyncio
import logging
from typing import Dict, List, Optional

from catalogcache.channel.local import LocalCacheChannel
from catalogcache.icons.cache import MISSING, IconResolver
from catalogcache.icons.paths import convert_icon_path
from catalogcache.models import App, CachedApp

logger = logging.getLogger(__name__)


def app_from_row(row: CachedApp, icon: Optional[str] = None) -> App:
    return App(
        app_id=row.app_id,
        name=row.name or None,
        summary=row.summary or None,
        description=row.description or None,
        download_flatpak_ref=row.download_flatpak_ref or None,
        icon=icon or None,
    )


class EnrichmentPipeline:
    """Builds public ``App`` records from local cache rows and their icons."""

    def __init__(
        self,
        channel: LocalCacheChannel,
        icons: IconResolver,
        privileged: bool = True,
    ):
        self.channel = channel
        self.icons = icons
        self.privileged = privileged

    async def enrich(self, app_ids: List[str], skip_icon_data: bool = False) -> List[App]:
        """Return one ``App`` per id, in the order of ``app_ids``.

        Rows are fetched with a single batch call. Ids without a row come
        back as bare ``App(app_id=...)`` records. Icons are resolved
        concurrently per id.
        """
        rows = await self.channel.get_apps_batch(
            app_ids,
            include_description=True,
            include_icon_data=True,
            include_cached_at=False,
        )
        by_id: Dict[str, CachedApp] = {row.app_id: row for row in rows}
        logger.debug(f"Enriching {len(app_ids)} apps, {len(by_id)} found in cache")

        return list(
            await asyncio.gather(
                *(
                    self._enrich_one(app_id, by_id.get(app_id), skip_icon_data)
                    for app_id in app_ids
                )
            )
        )

    async def _enrich_one(
        self, app_id: str, row: Optional[CachedApp], skip_icon_data: bool
    ) -> App:
        if row is None:
            return App(app_id=app_id)
        if skip_icon_data:
            icon = await self.direct_icon(row) or row.icon_url
        else:
            icon = await self.resolve_icon(row)
        return app_from_row(row, icon)

    async def resolve_icon(self, row: CachedApp) -> Optional[str]:
        """Pick the icon for ``row``: stored bytes, then local path, then URL."""
        icon = None
        if self.privileged and row.icon_data:
            cached = self.icons.cache.get(row.app_id)
            if cached is not MISSING:
                icon = cached
            else:
                icon = (await self.icons.resolve_batch([row.app_id]))[0]

        if not icon:
            icon = convert_icon_path(row.icon_path) or row.icon_url or None
        return icon

    async def direct_icon(self, row: CachedApp) -> Optional[str]:
        # One-off lookup that leaves the shared icon cache untouched.
        if self.privileged and row.icon_data:
            return await self.channel.get_icon_data_url(row.app_id)
        return None

    async def enrich_rows(
        self, rows: List[CachedApp], skip_icon_data: bool = False
    ) -> List[App]:
        """Build ``App`` records for rows the caller already holds."""
        if skip_icon_data:
            icons = await asyncio.gather(*(self.direct_icon(row) for row in rows))
        else:
            icons = await self.icons.resolve_batch([row.app_id for row in rows])
        return [
            app_from_row(row, icon or row.icon_url) for row, icon in zip(rows, icons)
        ]
