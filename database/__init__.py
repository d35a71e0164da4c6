"""Database package public API."""

from .connection import OptimizedSQLitePool, init_db_pool, close_db_pool
from .kv_store import KeyValueStore
from .migrations import run_migrations
from .models import GlobalAggregate, LastWinner

__all__ = [
    "OptimizedSQLitePool",
    "init_db_pool",
    "close_db_pool",
    "KeyValueStore",
    "run_migrations",
    "GlobalAggregate",
    "LastWinner",
]
