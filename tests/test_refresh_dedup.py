import asyncio
from unittest.mock import AsyncMock

import pytest

from catalogcache.refresh.dedup import CollectionFetchDeduplicator


@pytest.mark.asyncio
async def test_concurrent_refreshes_run_once():
    dedup = CollectionFetchDeduplicator(coalesce_seconds=5)
    refresh = AsyncMock()

    started = [
        dedup.try_begin_refresh("popular", refresh),
        dedup.try_begin_refresh("popular", refresh),
    ]
    await asyncio.gather(*dedup.pending_tasks)

    assert started == [True, False]
    assert refresh.await_count == 1
    assert dedup.is_in_flight("popular")
    dedup.reset()


@pytest.mark.asyncio
async def test_labels_are_independent():
    dedup = CollectionFetchDeduplicator(coalesce_seconds=5)
    refresh = AsyncMock()

    assert dedup.try_begin_refresh("popular", refresh)
    assert dedup.try_begin_refresh("trending", refresh)
    await asyncio.gather(*dedup.pending_tasks)

    assert refresh.await_count == 2
    dedup.reset()


@pytest.mark.asyncio
async def test_mark_expires_after_delay():
    dedup = CollectionFetchDeduplicator(coalesce_seconds=0.01)
    refresh = AsyncMock()

    dedup.try_begin_refresh("popular", refresh)
    await asyncio.gather(*dedup.pending_tasks)
    assert dedup.is_in_flight("popular")

    await asyncio.sleep(0.05)
    assert not dedup.is_in_flight("popular")
    assert dedup.try_begin_refresh("popular", refresh)
    await asyncio.gather(*dedup.pending_tasks)
    assert refresh.await_count == 2
    dedup.reset()


@pytest.mark.asyncio
async def test_failed_refresh_still_expires_through_delay():
    dedup = CollectionFetchDeduplicator(coalesce_seconds=0.01)
    refresh = AsyncMock(side_effect=RuntimeError("cache service offline"))

    assert dedup.try_begin_refresh("trending", refresh)
    await asyncio.gather(*dedup.pending_tasks)

    assert dedup.is_in_flight("trending")
    await asyncio.sleep(0.05)
    assert not dedup.is_in_flight("trending")


@pytest.mark.asyncio
async def test_reset_clears_marks():
    dedup = CollectionFetchDeduplicator(coalesce_seconds=5)
    dedup.try_begin_refresh("popular", AsyncMock())
    await asyncio.gather(*dedup.pending_tasks)

    dedup.reset()

    assert not dedup.is_in_flight("popular")


@pytest.mark.asyncio
async def test_failed_refresh_is_logged_with_label(caplog):
    dedup = CollectionFetchDeduplicator(coalesce_seconds=5)
    refresh = AsyncMock(side_effect=RuntimeError("cache service offline"))

    with caplog.at_level("ERROR", logger="catalogcache.refresh.dedup"):
        dedup.try_begin_refresh("category:Game", refresh)
        await asyncio.gather(*dedup.pending_tasks)

    assert "Failed to refresh category:Game collection" in caplog.text
    dedup.reset()
