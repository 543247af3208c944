from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from catalogcache.models import (
    App,
    CachedApp,
    CacheProgress,
    Collection,
    Homepage,
    SearchResponse,
)


class DataSource(ABC):
    """One way of answering catalog queries, picked once per operation."""

    @abstractmethod
    async def get_app(self, app_id: str) -> App:
        pass

    @abstractmethod
    async def get_apps(self, app_ids: List[str]) -> List[App]:
        pass

    @abstractmethod
    async def list_apps(self) -> List[App]:
        pass

    @abstractmethod
    async def get_categories(self) -> List[Collection]:
        pass

    @abstractmethod
    async def get_collection_category(
        self, category_id: str, limit: int, offset: int
    ) -> Collection:
        pass

    @abstractmethod
    async def get_collection(self, collection_type: str) -> Collection:
        pass

    @abstractmethod
    async def search_apps(self, query: str, limit: int, offset: int) -> SearchResponse:
        pass

    @abstractmethod
    async def get_homepage(self) -> Homepage:
        pass

    @abstractmethod
    async def is_cache_ready(self) -> bool:
        pass

    @abstractmethod
    async def is_install_reference_present(self, ref_id: str) -> bool:
        pass

    @abstractmethod
    async def cache_apps(self, apps: List[CachedApp]) -> bool:
        pass

    @abstractmethod
    async def initialize_cache(
        self,
        on_progress: Optional[Callable[[CacheProgress], None]],
        clear_cache: bool,
    ) -> Optional[Callable[[], None]]:
        pass
