import logging
from typing import Dict, List, Optional, Union

from catalogcache.channel.local import LocalCacheChannel

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


# Returned by IconResolutionCache.get for ids that were never looked up.
MISSING = _Missing()


class IconResolutionCache:
    """Process-lifetime map from app id to its resolved icon data URL.

    A stored ``None`` means the lookup already happened and found no icon.
    """

    def __init__(self):
        self._entries: Dict[str, Optional[str]] = {}

    def get(self, app_id: str) -> Union[str, None, _Missing]:
        return self._entries.get(app_id, MISSING)

    def set(self, app_id: str, value: Optional[str]):
        self._entries[app_id] = value

    def clear(self):
        self._entries.clear()

    def __contains__(self, app_id: str) -> bool:
        return app_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class IconResolver:
    def __init__(self, cache: IconResolutionCache, channel: LocalCacheChannel):
        self.cache = cache
        self.channel = channel

    async def resolve_batch(self, app_ids: List[str]) -> List[Optional[str]]:
        """Resolve icons for ``app_ids`` in input order.

        Ids already in the cache are served from it and the rest are
        resolved with a single batch call whose results, including misses,
        are memoized. If the batch call fails every position is ``None`` and
        nothing is cached, so a later call tries again.
        """
        results: List[Optional[str]] = []
        unresolved: List[int] = []
        for index, app_id in enumerate(app_ids):
            cached = self.cache.get(app_id)
            if cached is MISSING:
                unresolved.append(index)
                results.append(None)
            else:
                results.append(cached)

        if not unresolved:
            return results

        fetched = await self.channel.get_icon_batch([app_ids[i] for i in unresolved])
        if fetched is None:
            return [None] * len(app_ids)
        if len(fetched) != len(unresolved):
            logger.error(
                f"Icon batch returned {len(fetched)} entries for {len(unresolved)} ids"
            )
            return [None] * len(app_ids)

        for index, icon in zip(unresolved, fetched):
            results[index] = icon
            self.cache.set(app_ids[index], icon)
        return results
