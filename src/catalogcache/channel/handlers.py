import inspect
import logging
from typing import Any, Callable, Dict, Optional

from catalogcache.channel.base import CacheChannel
from catalogcache.channel.events import EventHub
from catalogcache.exceptions import CatalogError, ChannelError

logger = logging.getLogger(__name__)


class HandlerChannel(CacheChannel):
    """In-process channel dispatching commands to registered handlers.

    The host application registers one handler per command name; handlers may
    be plain functions or coroutines and receive the command arguments as
    keyword arguments. Progress notifications are published through
    :meth:`emit`.
    """

    def __init__(self, handlers: Optional[Dict[str, Callable[..., Any]]] = None):
        self._handlers: Dict[str, Callable[..., Any]] = dict(handlers or {})
        self.events = EventHub()

    def register(self, command: str, handler: Callable[..., Any]):
        self._handlers[command] = handler

    def command(self, name: str):
        def decorator(func):
            self.register(name, func)
            return func

        return decorator

    async def invoke(self, command: str, args: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug(f"Invoking cache command {command}")
        handler = self._handlers.get(command)
        if handler is None:
            raise ChannelError(command, "unknown command")

        try:
            result = handler(**(args or {}))
            if inspect.isawaitable(result):
                result = await result
        except CatalogError:
            raise
        except Exception as e:
            raise ChannelError(command, str(e)) from e
        return result

    def listen(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        return self.events.listen(event, callback)

    async def emit(self, event: str, payload: Any):
        await self.events.emit(event, payload)
