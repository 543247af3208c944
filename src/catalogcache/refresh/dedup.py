import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from catalogcache.config.settings import config

logger = logging.getLogger(__name__)


class CollectionFetchDeduplicator:
    """Keeps at most one background refresh per collection label in flight.

    A label stays marked for ``coalesce_seconds`` after its refresh settles,
    whether it succeeded or not, so bursts of requests for an empty
    collection trigger a single refresh.
    """

    def __init__(self, coalesce_seconds: Optional[float] = None):
        if coalesce_seconds is None:
            coalesce_seconds = config.refresh_coalesce_seconds
        self.coalesce_seconds = coalesce_seconds
        self._in_flight: Set[str] = set()
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._tasks: Set[asyncio.Task] = set()

    def is_in_flight(self, label: str) -> bool:
        return label in self._in_flight

    @property
    def pending_tasks(self) -> Set[asyncio.Task]:
        return set(self._tasks)

    def try_begin_refresh(
        self, label: str, refresh: Callable[[], Awaitable[Any]]
    ) -> bool:
        if label in self._in_flight:
            logger.debug(f"Refresh of {label} already in flight")
            return False

        self._in_flight.add(label)
        task = asyncio.create_task(self._run(label, refresh))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, label: str, refresh: Callable[[], Awaitable[Any]]):
        try:
            await refresh()
        except Exception:
            logger.exception(f"Failed to refresh {label} collection")
        finally:
            self._schedule_release(label)

    def _schedule_release(self, label: str):
        loop = asyncio.get_running_loop()
        previous = self._timers.pop(label, None)
        if previous:
            previous.cancel()
        self._timers[label] = loop.call_later(
            self.coalesce_seconds, self._release, label
        )

    def _release(self, label: str):
        self._timers.pop(label, None)
        self._in_flight.discard(label)

    def reset(self):
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._in_flight.clear()
