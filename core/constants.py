"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Remote sync
class SyncDefaults:
    """Remote sync defaults."""
    REQUEST_TIMEOUT_MS = 5000
    RETRY_AFTER_SECONDS = 60.0  # Breaker cool-down after a failed call
    POLL_INTERVAL_MS = 10000
    OFFLINE_POLL_INTERVAL_MS = 30000


class Endpoints:
    """Backend REST paths."""
    STATS = "/stats"
    TICKET = "/stats/ticket"
    USER = "/stats/user"
    DRAW_COMPLETE = "/draws/complete"


# Persistent cache
class CacheDefaults:
    """Local aggregate cache configuration."""
    SHARED_STATE_KEY = "@daily_dollar_lotto_shared_state"


# Database constants
class DatabaseDefaults:
    """Default database configuration."""
    POOL_SIZE = 2
    BUSY_TIMEOUT = 5000  # milliseconds


# Lottery constants
class LotteryDefaults:
    """Lottery configuration."""
    TICKET_NET_CONTRIBUTION = 0.95  # Share of each $1 ticket added to the pool
    DRAW_ID_PREFIX = "DRAW"
    DRAW_ID_SUFFIX_LENGTH = 6
    DRAW_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    SEED_RANDOM_BYTES = 32
    ANONYMOUS_USER_ID = "anonymous"
    DEFAULT_USERNAME = "Player"


class SubscriptionState(str, Enum):
    """Lifecycle of a polling subscription."""
    IDLE = "idle"
    ACTIVE = "active"
    CANCELLED = "cancelled"
