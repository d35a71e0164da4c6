"""Polling subscription delivering fresh aggregates to a callback."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Set

from core import get_logger, SubscriptionState, SyncDefaults
from database.models import GlobalAggregate
from services.cloud_sync import CloudSyncService

logger = get_logger(__name__)

UpdateCallback = Callable[[GlobalAggregate], None]


class UpdateSubscription:
    """Periodically read the aggregate and hand it to ``on_update``.

    One poll runs immediately on start, then one per tick. Cancellation is
    cooperative: the ticker stops at once, but a poll that has already
    started finishes its read and only then checks whether the subscription
    is still active before delivering.
    """

    def __init__(
        self,
        sync: CloudSyncService,
        on_update: UpdateCallback,
        interval_ms: int = SyncDefaults.POLL_INTERVAL_MS,
        offline_interval_ms: int = SyncDefaults.OFFLINE_POLL_INTERVAL_MS,
    ) -> None:
        self.sync = sync
        self.on_update = on_update
        self.interval_ms = interval_ms
        self.offline_interval_ms = offline_interval_ms
        self.state = SubscriptionState.IDLE
        self.effective_interval_ms: Optional[int] = None
        self._ticker: Optional[asyncio.Task] = None
        self._polls: Set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return self.state == SubscriptionState.ACTIVE

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self.state != SubscriptionState.IDLE:
            logger.warning(f"Subscription already {self.state.value}, not starting again")
            return

        # Polling often is pointless when only the local cache would answer
        if self.sync.policy.should_attempt():
            self.effective_interval_ms = self.interval_ms
        else:
            self.effective_interval_ms = self.offline_interval_ms

        self.state = SubscriptionState.ACTIVE
        self._spawn_poll()
        self._ticker = asyncio.create_task(self._tick_loop())
        logger.info(f"Stats polling started (every {self.effective_interval_ms / 1000:.0f}s)")

    def cancel(self) -> None:
        """Stop polling; polls already in flight will not deliver."""
        if self.state == SubscriptionState.CANCELLED:
            return
        self.state = SubscriptionState.CANCELLED
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        logger.info("Stats polling stopped")

    async def wait_idle(self) -> None:
        """Wait for polls that are still in flight."""
        if self._polls:
            await asyncio.gather(*list(self._polls), return_exceptions=True)

    async def _tick_loop(self) -> None:
        interval = self.effective_interval_ms / 1000
        while self.active:
            await asyncio.sleep(interval)
            if self.active:
                self._spawn_poll()

    def _spawn_poll(self) -> None:
        task = asyncio.create_task(self._poll())
        self._polls.add(task)
        task.add_done_callback(self._polls.discard)

    async def _poll(self) -> None:
        if not self.active:
            return

        try:
            result = await self.sync.read_aggregate()
        except Exception as e:
            logger.error(f"Stats poll failed: {e}", exc_info=True)
            return

        if not self.active:
            logger.debug("Dropping poll result for cancelled subscription")
            return

        if result.success and result.data is not None:
            try:
                self.on_update(result.data)
            except Exception as e:
                logger.error(f"Stats update callback failed: {e}", exc_info=True)


def subscribe_to_updates(
    sync: CloudSyncService,
    on_update: UpdateCallback,
    interval_ms: int = SyncDefaults.POLL_INTERVAL_MS,
) -> Callable[[], None]:
    """Start polling and return a function that cancels it.

    Must be called from a running event loop.
    """
    subscription = UpdateSubscription(sync, on_update, interval_ms=interval_ms)
    subscription.start()
    return subscription.cancel
