from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


CATEGORY_IDS = (
    "AudioVideo",
    "Development",
    "Education",
    "Game",
    "Graphics",
    "Network",
    "Office",
    "Science",
    "System",
    "Utility",
)

COLLECTION_TYPES = ("popular", "trending", "recently-updated")


class CachedApp(BaseModel):
    app_id: str
    name: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    download_flatpak_ref: Optional[str] = None
    icon_url: Optional[str] = None
    icon_path: Optional[str] = None
    icon_data: Optional[bytes] = None
    cached_at: int = 0

    @field_validator("icon_data", mode="before")
    @classmethod
    def _icon_bytes(cls, value: Any) -> Any:
        # The cache service serializes raw icon bytes as a list of integers.
        if isinstance(value, list):
            return bytes(value)
        return value


class CachedCategory(BaseModel):
    id: str
    name: str
    cached_at: int = 0


class CachedCategoryCollection(BaseModel):
    category_id: str
    app_ids: List[str] = Field(default_factory=list)
    total_hits: int = 0
    cached_at: int = 0


class SearchResult(BaseModel):
    app_id: str
    name: Optional[str] = None
    summary: Optional[str] = None
    icon_url: Optional[str] = None
    icon_path: Optional[str] = None


class HomepageCollections(BaseModel):
    popular: List[CachedApp] = Field(default_factory=list)
    trending: List[CachedApp] = Field(default_factory=list)
    recentlyUpdated: List[CachedApp] = Field(default_factory=list)


class CacheProgress(BaseModel):
    stage: str
    progress: int = 0
    total: int = 0
    message: str = ""
    details: Optional[str] = None
    appCount: Optional[int] = None
    categoryId: Optional[str] = None


class App(BaseModel):
    """Public app record.

    Only ``app_id`` and the timestamps are owned by the normalizer. The
    remaining marketplace fields pass through with whatever shape the
    upstream API gives them.
    """

    model_config = ConfigDict(extra="allow")

    app_id: str
    id: Optional[str] = None
    name: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    download_flatpak_ref: Optional[str] = None
    added_at: Optional[int] = None
    updated_at: Optional[int] = None
    verification_timestamp: Optional[int] = None
    homepage: Optional[Any] = None
    current_release_version: Optional[Any] = None
    current_release_date: Optional[Any] = None
    main_categories: Optional[Any] = None
    sub_categories: Optional[Any] = None
    keywords: Optional[Any] = None
    categories: Optional[Any] = None
    download_size: Optional[Any] = None
    screenshots: Optional[Any] = None
    developer_name: Optional[Any] = None
    project_license: Optional[Any] = None
    runtime: Optional[Any] = None
    arches: Optional[Any] = None
    type: Optional[Any] = None
    favorites_count: Optional[Any] = None
    installs_last_month: Optional[Any] = None
    isMobileFriendly: Optional[Any] = None
    is_free_license: Optional[Any] = None
    trending: Optional[Any] = None
    verification_verified: Optional[Any] = None
    verification_method: Optional[Any] = None
    verification_login_name: Optional[Any] = None
    verification_login_provider: Optional[Any] = None
    verification_login_is_organization: Optional[Any] = None
    verification_website: Optional[Any] = None


class Collection(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    hits: Optional[List[App]] = None
    apps: Optional[List[App]] = None
    subcollections: Optional[List["Collection"]] = None
    hitsPerPage: Optional[int] = None
    page: Optional[int] = None
    processingTimeMs: Optional[int] = None
    query: Optional[str] = None
    totalHits: Optional[int] = None
    totalPages: Optional[int] = None
    facetDistribution: Optional[Any] = None
    facetStats: Optional[Any] = None


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    hits: Optional[List[App]] = None
    query: Optional[str] = None
    processingTimeMs: Optional[int] = None
    totalHits: Optional[int] = None
    hitsPerPage: Optional[int] = None
    page: Optional[int] = None
    totalPages: Optional[int] = None
    facetDistribution: Optional[Any] = None
    facetStats: Optional[Any] = None


class Homepage(BaseModel):
    popular: Collection
    trending: Collection
    recentlyUpdated: Collection


def empty_collection(collection_id: Optional[str] = None) -> Collection:
    return Collection(id=collection_id, hits=[], apps=[], totalHits=0)
