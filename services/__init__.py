"""Services package."""

from .availability import SyncAvailabilityPolicy, SyncAvailabilityState
from .transport import RemoteTransport
from .rollover import apply_rollover, default_aggregate, mint_draw_id, mint_commitment_hash, today_iso
from .stats_cache import StatsCache
from .cloud_sync import CloudSyncService, SyncResult
from .subscription import UpdateSubscription, subscribe_to_updates
from .stats_store import GlobalStatsStore, TodayStats

__all__ = [
    "SyncAvailabilityPolicy",
    "SyncAvailabilityState",
    "RemoteTransport",
    "apply_rollover",
    "default_aggregate",
    "mint_draw_id",
    "mint_commitment_hash",
    "today_iso",
    "StatsCache",
    "CloudSyncService",
    "SyncResult",
    "UpdateSubscription",
    "subscribe_to_updates",
    "GlobalStatsStore",
    "TodayStats",
]
