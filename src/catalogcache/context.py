import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

from catalogcache.channel.base import CacheChannel
from catalogcache.channel.local import LocalCacheChannel
from catalogcache.config.settings import Config, config
from catalogcache.icons.cache import IconResolutionCache, IconResolver
from catalogcache.refresh.dedup import CollectionFetchDeduplicator
from catalogcache.remote.client import RemoteCatalogClient

logger = logging.getLogger(__name__)


class CatalogContext:
    """Long-lived state shared by every catalog operation.

    Owns the icon lookup cache and the in-flight refresh marks together with
    the two data sources. Nothing here is persisted; ``reset`` drops all of
    it.
    """

    def __init__(
        self,
        channel: Optional[CacheChannel] = None,
        remote: Optional[RemoteCatalogClient] = None,
        settings: Optional[Config] = None,
    ):
        self.settings = settings or config
        self.transport = channel
        self.channel = LocalCacheChannel(channel) if channel is not None else None
        self.remote = remote or RemoteCatalogClient(
            base_url=self.settings.api_base_url,
            timeout_seconds=self.settings.http_timeout_seconds,
        )
        self.icon_cache = IconResolutionCache()
        self.icons = IconResolver(self.icon_cache, self.channel) if self.channel else None
        self.refreshes = CollectionFetchDeduplicator(
            self.settings.refresh_coalesce_seconds
        )
        self._background: Set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run ``coro`` in the background, keeping a reference until it ends."""
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def reset(self):
        logger.debug("Resetting catalog context")
        self.icon_cache.clear()
        self.refreshes.reset()
