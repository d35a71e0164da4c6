"""Tests for the polling subscription."""

import asyncio
import logging

import pytest

from core import SubscriptionState
from services import UpdateSubscription, subscribe_to_updates
from tests.fakes import FakeTransport, server_stats


class GatedTransport(FakeTransport):
    """Transport whose calls block until ``gate`` is set."""

    def __init__(self, payload):
        super().__init__(payload)
        self.gate = asyncio.Event()
        self.started = asyncio.Event()

    async def call(self, path, method="GET", body=None):
        self.started.set()
        await self.gate.wait()
        return await super().call(path, method, body)


@pytest.mark.asyncio
async def test_first_poll_runs_immediately(make_sync):
    updates = []
    subscription = UpdateSubscription(make_sync(), updates.append, interval_ms=60_000)

    subscription.start()
    await asyncio.sleep(0)
    await subscription.wait_idle()
    subscription.cancel()

    assert len(updates) == 1
    assert updates[0].total_users == 5


@pytest.mark.asyncio
async def test_polls_repeat_on_interval(make_sync):
    updates = []
    subscription = UpdateSubscription(make_sync(), updates.append, interval_ms=20)

    subscription.start()
    await asyncio.sleep(0.15)
    subscription.cancel()
    await subscription.wait_idle()

    assert len(updates) >= 3


@pytest.mark.asyncio
async def test_online_interval_when_backend_usable(make_sync):
    subscription = UpdateSubscription(make_sync(), lambda stats: None)

    subscription.start()
    subscription.cancel()
    await subscription.wait_idle()

    assert subscription.effective_interval_ms == 10_000


@pytest.mark.asyncio
async def test_offline_interval_without_backend(make_sync):
    subscription = UpdateSubscription(make_sync(configured=False), lambda stats: None)

    subscription.start()
    subscription.cancel()
    await subscription.wait_idle()

    assert subscription.effective_interval_ms == 30_000


@pytest.mark.asyncio
async def test_offline_interval_while_breaker_open(make_sync):
    sync = make_sync()
    sync.policy.mark_failed()
    subscription = UpdateSubscription(sync, lambda stats: None)

    subscription.start()
    subscription.cancel()
    await subscription.wait_idle()

    assert subscription.effective_interval_ms == 30_000


@pytest.mark.asyncio
async def test_cancel_drops_in_flight_result(make_sync):
    transport = GatedTransport(server_stats())
    updates = []
    subscription = UpdateSubscription(make_sync(transport=transport), updates.append, interval_ms=60_000)

    subscription.start()
    await transport.started.wait()
    subscription.cancel()
    transport.gate.set()
    await subscription.wait_idle()

    assert updates == []
    assert subscription.state == SubscriptionState.CANCELLED


@pytest.mark.asyncio
async def test_no_updates_after_cancel(make_sync):
    updates = []
    subscription = UpdateSubscription(make_sync(), updates.append, interval_ms=10)

    subscription.start()
    await asyncio.sleep(0.05)
    subscription.cancel()
    await subscription.wait_idle()
    delivered = len(updates)
    await asyncio.sleep(0.05)

    assert len(updates) == delivered


@pytest.mark.asyncio
async def test_callback_error_is_logged_not_raised(make_sync, caplog):
    def explode(stats):
        raise RuntimeError("display broke")

    subscription = UpdateSubscription(make_sync(), explode, interval_ms=60_000)

    with caplog.at_level(logging.ERROR):
        subscription.start()
        await asyncio.sleep(0)
        await subscription.wait_idle()
        subscription.cancel()

    assert "Stats update callback failed" in caplog.text


@pytest.mark.asyncio
async def test_start_twice_is_ignored(make_sync):
    transport = FakeTransport(server_stats())
    subscription = UpdateSubscription(make_sync(transport=transport), lambda stats: None, interval_ms=60_000)

    subscription.start()
    subscription.start()
    await asyncio.sleep(0)
    await subscription.wait_idle()
    subscription.cancel()

    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_subscribe_to_updates_returns_canceller(make_sync):
    updates = []

    cancel = subscribe_to_updates(make_sync(), updates.append, interval_ms=60_000)
    await asyncio.sleep(0.2)
    cancel()
    cancel()

    assert len(updates) == 1
