"""Pytest configuration and fixtures."""

import pytest
from aiohttp.test_utils import TestServer
from faker import Faker

from database import KeyValueStore, OptimizedSQLitePool, run_migrations
from services import CloudSyncService, RemoteTransport, StatsCache, SyncAvailabilityPolicy
from tests.fakes import FakeCalendar, FakeClock, FakeTransport, StubBackend, server_stats


@pytest.fixture
def fake():
    return Faker()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
async def db_pool(tmp_path):
    pool = OptimizedSQLitePool(str(tmp_path / "stats_cache.sqlite"), pool_size=2)
    await pool.init_pool()
    await run_migrations(pool)
    yield pool
    await pool.close()


@pytest.fixture
def kv_store(db_pool):
    return KeyValueStore(db_pool)


@pytest.fixture
def stats_cache(kv_store, calendar):
    return StatsCache(kv_store, today_provider=calendar)


@pytest.fixture
def fake_transport():
    return FakeTransport(server_stats())


@pytest.fixture
def make_sync(stats_cache, clock):
    """Build a CloudSyncService around the shared cache."""

    def factory(transport=None, configured: bool = True, cache=None) -> CloudSyncService:
        policy = SyncAvailabilityPolicy(configured=configured, cooldown=60.0, clock=clock)
        return CloudSyncService(
            cache=cache or stats_cache,
            transport=transport or FakeTransport(server_stats()),
            policy=policy,
        )

    return factory


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
async def backend_url(stub_backend):
    server = TestServer(stub_backend.make_app())
    await server.start_server()
    yield f"http://{server.host}:{server.port}"
    await server.close()


@pytest.fixture
async def http_transport(backend_url):
    transport = RemoteTransport(backend_url, api_key="secret-key", timeout_ms=2000)
    yield transport
    await transport.close()
