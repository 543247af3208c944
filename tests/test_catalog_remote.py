from unittest.mock import AsyncMock

import pytest

from catalogcache.catalog import Catalog
from catalogcache.config.settings import Config
from catalogcache.context import CatalogContext
from catalogcache.exceptions import RemoteError


def _catalog(responses):
    """Build a remote-mode catalog whose client answers from ``responses``."""

    async def fetch(path):
        value = responses[path]
        if isinstance(value, Exception):
            raise value
        return value

    remote = AsyncMock()
    remote.fetch = AsyncMock(side_effect=fetch)
    context = CatalogContext(remote=remote, settings=Config())
    return Catalog(context), remote


@pytest.mark.asyncio
async def test_search_with_no_results():
    catalog, remote = _catalog({"/apps/search?q=editor": []})

    response = await catalog.search_apps("editor")

    remote.fetch.assert_awaited_once_with("/apps/search?q=editor")
    assert response.hits == []
    assert response.totalHits == 0
    assert response.query == "editor"


@pytest.mark.asyncio
async def test_search_encodes_query_and_normalizes_response():
    catalog, _remote = _catalog(
        {
            "/apps/search?q=text%20editor": {
                "hits": [
                    {"app_id": "a", "updated_at": "1700000000"},
                    {"app_id": "b"},
                ],
                "total_hits": 2,
                "processing_time_ms": 1,
            }
        }
    )

    response = await catalog.search_apps("text editor", limit=1)

    assert [hit.app_id for hit in response.hits] == ["a"]
    assert response.hits[0].updated_at == 1700000000
    assert response.totalHits == 2
    assert response.processingTimeMs == 1
    assert response.query == "text editor"


@pytest.mark.asyncio
async def test_search_failure_degrades_to_empty():
    catalog, _remote = _catalog({"/apps/search?q=x": RemoteError(500)})

    response = await catalog.search_apps("x")

    assert response.hits == [] and response.totalHits == 0 and response.query == "x"


@pytest.mark.asyncio
async def test_category_collection_pushes_pagination_to_query_string():
    catalog, remote = _catalog(
        {
            "/apps/collection/category/Game?limit=2&offset=4": {
                "hits": [{"app_id": "e"}, {"app_id": "f"}],
                "totalHits": 10,
                "hits_per_page": 2,
            }
        }
    )

    result = await catalog.get_collection_category("game", limit=2, offset=4)

    remote.fetch.assert_awaited_once_with(
        "/apps/collection/category/Game?limit=2&offset=4"
    )
    assert result.id == "Game"
    assert [app.app_id for app in result.hits] == ["e", "f"]
    assert result.apps == result.hits
    assert result.totalHits == 10
    assert result.hitsPerPage == 2


@pytest.mark.asyncio
async def test_category_collection_failure_returns_empty():
    catalog, _remote = _catalog(
        {"/apps/collection/category/Game?limit=24&offset=0": RemoteError(503)}
    )

    result = await catalog.get_collection_category("Game")

    assert result.id == "Game"
    assert result.apps == [] and result.totalHits == 0


@pytest.mark.asyncio
async def test_get_app_normalizes_timestamps():
    catalog, _remote = _catalog(
        {
            "/apps/org.gnome.Maps": {
                "id": "org.gnome.Maps",
                "name": "Maps",
                "added_at": "1600000000",
                "verification_verified": True,
            }
        }
    )

    app = await catalog.get_app("org.gnome.Maps")

    assert app.app_id == "org.gnome.Maps"
    assert app.added_at == 1600000000
    assert app.verification_verified is True


@pytest.mark.asyncio
async def test_get_app_failure_returns_minimal_record():
    catalog, _remote = _catalog({"/apps/gone": RemoteError(404)})

    app = await catalog.get_app("gone")

    assert app.model_dump(exclude_none=True) == {"app_id": "gone"}


@pytest.mark.asyncio
async def test_get_apps_drops_failed_items():
    catalog, _remote = _catalog(
        {
            "/apps/a": {"app_id": "a"},
            "/apps/b": RemoteError(404),
            "/apps/c": {"app_id": "c"},
        }
    )

    apps = await catalog.get_apps(["a", "b", "c"])

    assert [app.app_id for app in apps] == ["a", "c"]


@pytest.mark.asyncio
async def test_collection_accepts_bare_app_list():
    catalog, _remote = _catalog(
        {"/apps/collection/popular": [{"app_id": "a"}, {"app_id": "b"}]}
    )

    result = await catalog.get_collection_popular()

    assert [app.app_id for app in result.apps] == ["a", "b"]
    assert result.totalHits == 2


@pytest.mark.asyncio
async def test_get_app_keeps_fields_with_string_categories():
    catalog, _remote = _catalog(
        {
            "/apps/org.x": {
                "app_id": "org.x",
                "name": "X",
                "summary": "An arcade game",
                "icon": "https://dl.example/x.png",
                "categories": ["Game", "ArcadeGame"],
            }
        }
    )

    app = await catalog.get_app("org.x")

    assert app.name == "X"
    assert app.summary == "An arcade game"
    assert app.icon == "https://dl.example/x.png"
    assert app.categories == ["Game", "ArcadeGame"]


@pytest.mark.asyncio
async def test_collection_skips_invalid_hits():
    catalog, _remote = _catalog(
        {
            "/apps/collection/popular": {
                "hits": [{"app_id": "a", "name": "A"}, {"name": "no id"}],
                "totalHits": 2,
            }
        }
    )

    result = await catalog.get_collection_popular()

    assert [app.app_id for app in result.hits] == ["a"]
    assert result.totalHits == 2


@pytest.mark.asyncio
async def test_app_list_skips_invalid_entries():
    catalog, _remote = _catalog(
        {"/appstream": [{"app_id": "a"}, {"name": "no id"}, "b"]}
    )

    apps = await catalog.list_apps()

    assert [app.app_id for app in apps] == ["a", "b"]


@pytest.mark.asyncio
async def test_homepage_degrades_wholesale_on_any_failure():
    catalog, _remote = _catalog(
        {
            "/apps/collection/popular": {"hits": [{"app_id": "a"}]},
            "/apps/collection/trending": RemoteError(500),
            "/apps/collection/recently-updated": {"hits": [{"app_id": "c"}]},
        }
    )

    homepage = await catalog.get_homepage()

    assert homepage.popular.apps == []
    assert homepage.trending.apps == []
    assert homepage.recentlyUpdated.apps == []


@pytest.mark.asyncio
async def test_categories_and_app_list():
    catalog, _remote = _catalog(
        {
            "/categories": ["AudioVideo", {"id": "Game", "name": "Games"}],
            "/appstream": ["org.gnome.Maps", {"app_id": "org.gnome.Weather"}],
        }
    )

    categories = await catalog.get_collection_categories()
    apps = await catalog.list_apps()

    assert [(c.id, c.name) for c in categories] == [
        ("AudioVideo", "AudioVideo"),
        ("Game", "Games"),
    ]
    assert [app.app_id for app in apps] == ["org.gnome.Maps", "org.gnome.Weather"]


@pytest.mark.asyncio
async def test_cache_operations_are_neutral_without_channel():
    catalog, remote = _catalog({})

    assert await catalog.is_cache_ready() is True
    assert await catalog.is_install_reference_present("app/a") is False
    assert await catalog.initialize_cache(lambda progress: None) is None
    remote.fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_placeholder_operations():
    catalog, _remote = _catalog({})

    assert await catalog.get_app_picks() == []
    assert await catalog.get_collections() == []
    assert await catalog.get_collection_category_subcategories("Game") == []
    assert (await catalog.get_collection("featured")).id == "featured"
    assert (await catalog.get_collection_recently_added()).totalHits == 0
