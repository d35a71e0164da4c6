"""Tests for the local aggregate cache."""

import json
from dataclasses import replace

import pytest

from core import CacheDefaults
from core.exceptions import PersistenceFailure
from services import StatsCache
from tests.fakes import FailingStore, TODAY, server_stats


@pytest.mark.asyncio
async def test_first_load_persists_defaults(stats_cache, kv_store):
    """An empty store is seeded with a fresh aggregate."""
    aggregate = await stats_cache.load()

    assert aggregate.total_users == 0
    assert aggregate.current_draw_date == TODAY

    stored = json.loads(await kv_store.get(CacheDefaults.SHARED_STATE_KEY))
    assert stored["currentDrawId"] == aggregate.current_draw_id
    assert stored["currentCommitmentHash"] == aggregate.current_commitment_hash


@pytest.mark.asyncio
async def test_repeated_loads_keep_the_same_draw(stats_cache):
    first = await stats_cache.load()
    second = await stats_cache.load()

    assert second == first


@pytest.mark.asyncio
async def test_corrupt_json_yields_default(stats_cache, kv_store):
    await kv_store.set(CacheDefaults.SHARED_STATE_KEY, "{not json")

    aggregate = await stats_cache.load()

    assert aggregate.all_time_total_tickets == 0
    assert aggregate.current_draw_date == TODAY
    # The corrupt value is left alone
    assert await kv_store.get(CacheDefaults.SHARED_STATE_KEY) == "{not json"


@pytest.mark.asyncio
async def test_wrongly_typed_payload_yields_default(stats_cache, kv_store):
    await kv_store.set(CacheDefaults.SHARED_STATE_KEY, json.dumps([1, 2, 3]))

    aggregate = await stats_cache.load()

    assert aggregate.total_users == 0


@pytest.mark.asyncio
async def test_unreadable_store_yields_default(calendar):
    cache = StatsCache(FailingStore(PersistenceFailure("disk gone")), today_provider=calendar)

    aggregate = await cache.load()

    assert aggregate.current_draw_date == TODAY
    assert aggregate.all_time_total_draws == 0


@pytest.mark.asyncio
async def test_save_propagates_persistence_failure(calendar):
    cache = StatsCache(FailingStore(PersistenceFailure("read-only")), today_provider=calendar)

    with pytest.raises(PersistenceFailure):
        await cache.save(cache.default_aggregate())


@pytest.mark.asyncio
async def test_rollover_on_load_is_persisted(stats_cache, calendar):
    yesterday = stats_cache.default_aggregate("2026-10-15")
    await stats_cache.save(replace(yesterday, today_total_tickets=30, all_time_total_tickets=30))

    aggregate = await stats_cache.load()

    assert aggregate.current_draw_date == TODAY
    assert aggregate.today_total_tickets == 0
    assert aggregate.all_time_total_tickets == 30
    assert aggregate.current_draw_id != yesterday.current_draw_id

    raw = await stats_cache.read_raw()
    assert raw["currentDrawDate"] == TODAY
    assert raw["currentDrawId"] == aggregate.current_draw_id


@pytest.mark.asyncio
async def test_day_change_between_loads(stats_cache, calendar):
    before = await stats_cache.load()
    calendar.today = "2026-10-17"

    after = await stats_cache.load()

    assert after.current_draw_date == "2026-10-17"
    assert after.current_draw_id != before.current_draw_id


@pytest.mark.asyncio
async def test_save_raw_stores_payload_verbatim(stats_cache):
    payload = server_stats(serverOnlyField="kept")

    await stats_cache.save_raw(payload)

    assert await stats_cache.read_raw() == payload


@pytest.mark.asyncio
@pytest.mark.parametrize("blob", [
    '{"totalUsers": 1e999}',
    '{"todayPrizePool": Infinity}',
    '{"allTimeTotalDraws": NaN}',
])
async def test_non_finite_cached_numbers_yield_default(stats_cache, kv_store, blob):
    await kv_store.set(CacheDefaults.SHARED_STATE_KEY, blob)

    aggregate = await stats_cache.load()

    assert aggregate.total_users == 0
    assert aggregate.current_draw_date == TODAY
