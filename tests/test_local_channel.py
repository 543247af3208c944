import pytest

from catalogcache.channel.handlers import HandlerChannel
from catalogcache.channel.local import LocalCacheChannel
from catalogcache.exceptions import CacheNotReadyError, ChannelError
from catalogcache.models import CachedApp


def _raise(exc):
    def handler(**_kwargs):
        raise exc

    return handler


@pytest.mark.asyncio
async def test_handler_channel_dispatches_sync_and_async_handlers():
    channel = HandlerChannel()

    @channel.command("is_cache_ready_sync")
    def ready():
        return True

    @channel.command("get_cached_app_sync")
    async def get_app(app_id):
        return {"app_id": app_id, "cached_at": 1}

    assert await channel.invoke("is_cache_ready_sync") is True
    assert await channel.invoke("get_cached_app_sync", {"app_id": "a"}) == {
        "app_id": "a",
        "cached_at": 1,
    }


@pytest.mark.asyncio
async def test_handler_channel_wraps_handler_failures():
    channel = HandlerChannel({"get_cached_apps_sync": _raise(RuntimeError("db locked"))})

    with pytest.raises(ChannelError, match="db locked"):
        await channel.invoke("get_cached_apps_sync")

    with pytest.raises(ChannelError, match="unknown command"):
        await channel.invoke("missing_command")


@pytest.mark.asyncio
async def test_reads_parse_into_models():
    channel = LocalCacheChannel(
        HandlerChannel(
            {
                "get_apps_batch_opt": lambda **kwargs: [
                    {"app_id": app_id, "icon_data": [137, 80, 78, 71]}
                    for app_id in kwargs["app_ids"]
                ],
                "get_cached_category_collection_sync": lambda category_id: {
                    "category_id": category_id,
                    "app_ids": ["a", "b"],
                    "total_hits": 10,
                    "cached_at": 5,
                },
                "get_homepage_collections_sync": lambda: [
                    [{"app_id": "p"}],
                    [{"app_id": "t"}],
                    [],
                ],
                "get_cached_category_apps_paginated": lambda **kwargs: [
                    [{"app_id": "a"}],
                    7,
                ],
            }
        )
    )

    apps = await channel.get_apps_batch(["a", "b"])
    assert [app.app_id for app in apps] == ["a", "b"]
    assert apps[0].icon_data == b"\x89PNG"

    collection = await channel.get_category_collection("Game")
    assert collection.app_ids == ["a", "b"]
    assert collection.total_hits == 10

    homepage = await channel.get_homepage_collections()
    assert [app.app_id for app in homepage.popular] == ["p"]
    assert homepage.recentlyUpdated == []

    apps, total = await channel.get_category_apps_paginated("Game", 1, 0)
    assert [app.app_id for app in apps] == ["a"]
    assert total == 7


@pytest.mark.asyncio
async def test_failures_degrade_to_neutral_values():
    failing = _raise(CacheNotReadyError("any"))
    commands = [
        "get_cached_apps_sync",
        "get_apps_batch_opt",
        "get_cached_app_sync",
        "get_cached_categories_sync",
        "get_cached_category_collection_sync",
        "get_cached_category_collection_with_apps_sync",
        "get_cached_category_apps_paginated",
        "get_cached_collection_apps_sync",
        "get_homepage_collections_sync",
        "search_cached_apps_sync",
        "get_app_icons_batch_sync",
        "get_app_icon_data_url_sync",
        "is_cache_ready_sync",
        "cache_apps",
        "is_flatpak_installed",
    ]
    channel = LocalCacheChannel(HandlerChannel({name: failing for name in commands}))

    assert await channel.get_all_apps() == []
    assert await channel.get_apps_batch(["a"]) == []
    assert await channel.get_app("a") is None
    assert await channel.get_categories() == []
    assert await channel.get_category_collection("Game") is None
    assert await channel.get_category_collection_with_apps("Game", 10) is None
    assert await channel.get_category_apps_paginated("Game", 10, 0) == ([], 0)
    assert await channel.get_collection_apps("popular") == []
    homepage = await channel.get_homepage_collections()
    assert homepage.popular == [] and homepage.trending == []
    assert await channel.search_apps("editor") == []
    assert await channel.get_icon_batch(["a"]) is None
    assert await channel.get_icon_data_url("a") is None
    assert await channel.is_cache_ready() is False
    assert await channel.write_apps([CachedApp(app_id="a")]) is False
    assert await channel.is_install_reference_present("app/a/x86_64/stable") is False


@pytest.mark.asyncio
async def test_malformed_payload_degrades_to_empty():
    channel = LocalCacheChannel(
        HandlerChannel({"get_cached_categories_sync": lambda: [{"name": "no id"}]})
    )

    assert await channel.get_categories() == []


@pytest.mark.asyncio
async def test_initiate_cache_population_reports_errors():
    errors = []
    channel = LocalCacheChannel(
        HandlerChannel({"initiate_cache": _raise(RuntimeError("network down"))})
    )

    result = await channel.initiate_cache_population(True, on_error=errors.append)

    assert result is False
    assert "network down" in str(errors[0])


@pytest.mark.asyncio
async def test_refresh_commands_propagate_errors():
    channel = LocalCacheChannel(
        HandlerChannel({"fetch_and_cache_collection": _raise(RuntimeError("boom"))})
    )

    with pytest.raises(ChannelError):
        await channel.refresh_collection("popular")


@pytest.mark.asyncio
async def test_write_apps_sends_rows():
    received = {}

    def cache_apps(apps):
        received["apps"] = apps

    channel = LocalCacheChannel(HandlerChannel({"cache_apps": cache_apps}))

    assert await channel.write_apps([CachedApp(app_id="a", name="A")]) is True
    assert received["apps"] == [{"app_id": "a", "name": "A", "cached_at": 0}]
