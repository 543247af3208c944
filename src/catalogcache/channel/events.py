import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Dict, List

logger = logging.getLogger(__name__)

PROGRESS_EVENT = "cache-progress"

# Stages after which no further progress events are sent.
TERMINAL_STAGES = ("complete", "error")


class EventHub:
    """Fans out events from the cache service to listeners and subscribers."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._subscribers: Dict[str, List[asyncio.Queue]] = {}

    def listen(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a callback and return a function that removes it again."""
        self._listeners.setdefault(event, []).append(callback)

        def unlisten():
            listeners = self._listeners.get(event, [])
            if callback in listeners:
                listeners.remove(callback)

        return unlisten

    async def emit(self, event: str, payload: Any):
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Listener for {event} failed: {e}")

        for queue in self._subscribers.get(event, []):
            await queue.put(payload)

    async def subscribe(self, event: str) -> AsyncIterator[Any]:
        queue = asyncio.Queue()
        self._subscribers.setdefault(event, []).append(queue)
        try:
            while True:
                payload = await queue.get()
                yield payload
                if _stage_of(payload) in TERMINAL_STAGES:
                    break
        finally:
            subscribers = self._subscribers.get(event, [])
            if queue in subscribers:
                subscribers.remove(queue)


def _stage_of(payload: Any):
    if isinstance(payload, dict):
        return payload.get("stage")
    return getattr(payload, "stage", None)
