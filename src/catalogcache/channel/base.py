from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional


class CacheChannel(ABC):
    """Transport to the external local cache service."""

    @abstractmethod
    async def invoke(self, command: str, args: Optional[Dict[str, Any]] = None) -> Any:
        pass

    @abstractmethod
    def listen(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        pass
