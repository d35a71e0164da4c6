"""Application initialization orchestrator."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable, Optional

from config import Config, load_config
from core.logger import get_logger
from database import KeyValueStore, OptimizedSQLitePool, close_db_pool, init_db_pool, run_migrations
from database.models import GlobalAggregate
from services import (
    CloudSyncService,
    GlobalStatsStore,
    RemoteTransport,
    StatsCache,
    SyncAvailabilityPolicy,
)

logger = get_logger(__name__)


def build_sync_service(
    config: Config,
    pool: OptimizedSQLitePool,
    clock: Optional[Callable[[], float]] = None,
    today_provider: Optional[Callable[[], str]] = None,
) -> CloudSyncService:
    """Wire cache, transport and availability policy from configuration."""
    cache = StatsCache(KeyValueStore(pool), today_provider=today_provider)
    transport = RemoteTransport(
        base_url=config.api_url,
        api_key=config.api_key,
        timeout_ms=config.request_timeout_ms,
    )
    policy = SyncAvailabilityPolicy(
        configured=config.sync_enabled,
        cooldown=float(config.retry_after_seconds),
        clock=clock,
    )
    return CloudSyncService(cache=cache, transport=transport, policy=policy)


class ApplicationInitializer:
    """Orchestrates application initialization and lifecycle."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.db_pool: Optional[OptimizedSQLitePool] = None
        self.sync: Optional[CloudSyncService] = None
        self.store: Optional[GlobalStatsStore] = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        await self._init_database()
        self._init_sync()

    async def run(self) -> None:
        """Load stats once, then keep polling until cancelled."""
        await self.store.load_global_stats()
        self._log_stats(self.store.global_stats)

        self.store.start_realtime_sync(self.config.poll_interval_ms)
        subscription = self.store.subscription

        try:
            while subscription.active:
                await asyncio.sleep(1)
        except asyncio.CancelledError:
            logger.info("Shutting down...")
            raise
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Cleanup resources."""
        if self.store and self.store.subscription:
            subscription = self.store.subscription
            self.store.stop_realtime_sync()
            await subscription.wait_idle()
        with suppress(Exception):
            if self.sync:
                await self.sync.transport.close()
        with suppress(Exception):
            await close_db_pool()

    async def _init_database(self) -> None:
        """Initialize database pool and run migrations."""
        self.db_pool = await init_db_pool(
            database_path=self.config.database_path,
            pool_size=self.config.db_pool_size,
            busy_timeout_ms=self.config.db_busy_timeout,
        )
        await run_migrations(self.db_pool)
        logger.info("✅ Local stats database initialized")

    def _init_sync(self) -> None:
        """Initialize sync service and stats store."""
        self.sync = build_sync_service(self.config, self.db_pool)
        self.store = GlobalStatsStore(
            self.sync,
            offline_interval_ms=self.config.offline_poll_interval_ms,
            on_change=self._log_stats,
        )
        if self.sync.is_sync_enabled():
            logger.info(f"☁️ Cloud sync enabled: {self.config.api_url}")
        else:
            logger.info("📴 No STATS_API_URL set, running in local-only mode")

    @staticmethod
    def _log_stats(stats: GlobalAggregate) -> None:
        logger.info(
            f"{stats.current_draw_id}: {stats.today_total_tickets} tickets, "
            f"pool ${stats.today_prize_pool:.2f}, {stats.total_users} users, "
            f"{stats.all_time_total_draws} draws"
        )
