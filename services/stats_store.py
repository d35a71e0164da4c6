"""Application-facing holder of the latest global statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from core import get_logger, LotteryDefaults, SyncDefaults
from database.models import GlobalAggregate
from services.cloud_sync import CloudSyncService, SyncResult
from services.subscription import UpdateSubscription

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class TodayStats:
    tickets: int
    pool: float
    participants: int


class GlobalStatsStore:
    """Keeps the most recent aggregate in memory for display code.

    All writes go through CloudSyncService; this class only remembers what
    the last operation returned and whether the backend answered it.
    """

    def __init__(
        self,
        sync: CloudSyncService,
        offline_interval_ms: int = SyncDefaults.OFFLINE_POLL_INTERVAL_MS,
        on_change: Optional[Callable[[GlobalAggregate], None]] = None,
    ) -> None:
        self.sync = sync
        self.on_change = on_change
        self.offline_interval_ms = offline_interval_ms
        self.global_stats: GlobalAggregate = sync.cache.default_aggregate()
        self.is_loading = False
        self.is_cloud_connected = sync.is_sync_enabled()
        self._subscription: Optional[UpdateSubscription] = None

    def _apply(self, result: SyncResult[GlobalAggregate]) -> None:
        if result.success and result.data is not None:
            self.global_stats = result.data

    async def load_global_stats(self) -> None:
        """Refresh ``global_stats``.

        ``is_cloud_connected`` ends up true only when a backend is configured
        and the availability policy has no recent failure on record; a read
        that fell back to the cache is not flagged offline on its own.
        """
        self.is_loading = True
        try:
            result = await self.sync.read_aggregate()
            if result.success and result.data is not None:
                self.global_stats = result.data
                self.is_cloud_connected = (
                    self.sync.is_sync_enabled()
                    and not result.is_offline
                    and not self.sync.policy.state.recently_failed
                )
        finally:
            self.is_loading = False

    def start_realtime_sync(self, interval_ms: int = SyncDefaults.POLL_INTERVAL_MS) -> None:
        """Start polling, replacing any running subscription."""
        if self._subscription is not None:
            self._subscription.cancel()

        self._subscription = UpdateSubscription(
            self.sync,
            self._on_update,
            interval_ms=interval_ms,
            offline_interval_ms=self.offline_interval_ms,
        )
        self._subscription.start()

    def stop_realtime_sync(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    @property
    def subscription(self) -> Optional[UpdateSubscription]:
        return self._subscription

    def _on_update(self, aggregate: GlobalAggregate) -> None:
        self.global_stats = aggregate
        if self.on_change is not None:
            self.on_change(aggregate)

    async def increment_user_count(self, user_id: Optional[str] = None) -> None:
        result = await self.sync.record_user_registration(user_id or LotteryDefaults.ANONYMOUS_USER_ID)
        self._apply(result)

    async def record_ticket_purchase(
        self,
        user_id: str,
        ticket_id: str,
        draw_id: str,
        username: Optional[str] = None,
    ) -> None:
        result = await self.sync.record_ticket_purchase(
            user_id, ticket_id, draw_id, username or LotteryDefaults.DEFAULT_USERNAME
        )
        self._apply(result)

    async def record_draw_completion(
        self,
        draw_id: str,
        winner_username: str,
        winner_ticket_id: str,
        prize_amount: float,
        total_entries: int,
    ) -> None:
        result = await self.sync.record_draw_completion(
            draw_id, winner_username, winner_ticket_id, prize_amount, total_entries
        )
        self._apply(result)

    async def reset_daily_stats(self) -> None:
        """Reload; the cache rolls daily counters over on its own."""
        await self.load_global_stats()

    def get_today_stats(self) -> TodayStats:
        stats = self.global_stats
        return TodayStats(
            tickets=stats.today_total_tickets,
            pool=stats.today_prize_pool,
            participants=stats.today_unique_participants,
        )
