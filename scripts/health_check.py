#!/usr/bin/env python3
"""
Post-deploy health check for the stats sync engine.
Verifies configuration, the local cache database and backend reachability.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to the import path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from config import load_config
from core.exceptions import SyncError
from database import KeyValueStore, init_db_pool, run_migrations
from services import RemoteTransport, StatsCache

logger = logging.getLogger(__name__)


class SyncHealthChecker:
    """Collects pass/warning/issue results of the individual checks."""

    def __init__(self):
        self.config = load_config()
        self.issues = []
        self.warnings = []
        self.passed = []

    def add_issue(self, test_name: str, issue: str):
        self.issues.append(f"❌ {test_name}: {issue}")
        logger.error(f"FAILED {test_name}: {issue}")

    def add_warning(self, test_name: str, warning: str):
        self.warnings.append(f"⚠️ {test_name}: {warning}")
        logger.warning(f"WARNING {test_name}: {warning}")

    def add_pass(self, test_name: str, details: str = ""):
        message = f"✅ {test_name}"
        if details:
            message += f": {details}"
        self.passed.append(message)
        logger.info(f"PASSED {test_name}")

    def test_configuration(self):
        """Check sync-related settings."""
        config = self.config
        if not config.sync_enabled:
            self.add_warning("Configuration", "STATS_API_URL not set, stats stay local-only")
            return True

        if not config.api_url.startswith("https://"):
            self.add_warning("Configuration", f"Backend URL is not HTTPS: {config.api_url}")
        if not config.api_key:
            self.add_warning("Configuration", "STATS_API_KEY not set, requests are unauthenticated")
        if config.request_timeout_ms <= 0:
            self.add_issue("Configuration", f"Invalid request timeout {config.request_timeout_ms}ms")
            return False

        self.add_pass("Configuration", f"Backend {config.api_url}")
        return True

    async def test_local_cache(self):
        """Open the local database and load the cached aggregate."""
        try:
            pool = await init_db_pool(
                database_path=self.config.database_path,
                pool_size=1,
                busy_timeout_ms=self.config.db_busy_timeout,
            )
            await run_migrations(pool)
            cache = StatsCache(KeyValueStore(pool))
            raw = await cache.read_raw()
            aggregate = await cache.load()
            await pool.close()
        except Exception as e:
            self.add_issue("Local Cache", str(e))
            return False

        if raw is None:
            self.add_warning("Local Cache", "Cache was empty, defaults written")
        self.add_pass(
            "Local Cache",
            f"{aggregate.current_draw_id}, {aggregate.all_time_total_tickets} tickets all-time",
        )
        return True

    async def test_backend(self):
        """Fetch /stats once, without the circuit breaker."""
        if not self.config.sync_enabled:
            return True

        async with RemoteTransport(
            base_url=self.config.api_url,
            api_key=self.config.api_key,
            timeout_ms=self.config.request_timeout_ms,
        ) as transport:
            try:
                payload = await transport.call("/stats")
            except SyncError as e:
                self.add_issue("Backend", str(e))
                return False

        self.add_pass("Backend", f"{len(payload)} fields in /stats")
        return True

    async def run_all_tests(self):
        logger.info("🧪 Starting stats sync health check...")

        self.test_configuration()
        await self.test_local_cache()
        await self.test_backend()

        print("\n" + "=" * 60)
        print("🧪 STATS SYNC HEALTH CHECK RESULTS")
        print("=" * 60)

        if self.issues:
            print(f"\n🔴 CRITICAL ISSUES ({len(self.issues)}):")
            for issue in self.issues:
                print(f"  {issue}")

        if self.warnings:
            print(f"\n🟡 WARNINGS ({len(self.warnings)}):")
            for warning in self.warnings:
                print(f"  {warning}")

        if self.passed:
            print(f"\n✅ PASSED ({len(self.passed)}):")
            for passed in self.passed:
                print(f"  {passed}")

        if self.issues:
            print(f"\n🚨 ACTION REQUIRED: Fix {len(self.issues)} critical issues.")
            return False
        return True


async def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    checker = SyncHealthChecker()
    success = await checker.run_all_tests()

    # Exit code for CI/CD
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    asyncio.run(main())
