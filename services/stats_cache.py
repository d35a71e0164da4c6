"""On-device cache holding the last known global aggregate."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from core import get_logger, CacheDefaults
from core.exceptions import PersistenceFailure
from database.kv_store import KeyValueStore
from database.models import GlobalAggregate
from services.rollover import apply_rollover, today_iso
from services.rollover import default_aggregate as fresh_aggregate

logger = get_logger(__name__)


class StatsCache:
    """Single-key JSON cache of the aggregate with rollover on load.

    ``load`` never raises: an unreadable or corrupt store yields a freshly
    minted default aggregate. ``save`` and ``save_raw`` raise
    PersistenceFailure and leave recovery to the caller.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = CacheDefaults.SHARED_STATE_KEY,
        today_provider: Optional[Callable[[], str]] = None,
    ) -> None:
        self.store = store
        self.key = key
        self._today = today_provider or today_iso

    def today(self) -> str:
        return self._today()

    def default_aggregate(self, today: Optional[str] = None) -> GlobalAggregate:
        return fresh_aggregate(today or self.today())

    async def load(self, today: Optional[str] = None) -> GlobalAggregate:
        """Load the cached aggregate, rolled over to today.

        Args:
            today: Date to roll over to; defaults to the injected provider

        Returns:
            Cached aggregate (rolled over and re-persisted when the day
            changed), a persisted default on first run, or an unpersisted
            default when the store is unusable
        """
        today = today or self.today()
        try:
            stored = await self.store.get(self.key)
            if stored is None:
                aggregate = None
            else:
                aggregate = GlobalAggregate.from_dict(json.loads(stored))
        except (PersistenceFailure, ValueError, TypeError, OverflowError, RecursionError) as e:
            # json.JSONDecodeError is a ValueError; deeply nested JSON hits RecursionError
            logger.warning(f"Local stats cache unusable, using defaults: {e}")
            return self.default_aggregate(today)

        if aggregate is None:
            result = self.default_aggregate(today)
            logger.info("Initializing local stats cache with defaults")
        else:
            result = apply_rollover(aggregate, today)
            if result is aggregate:
                return result

        try:
            await self.save(result)
        except PersistenceFailure as e:
            logger.warning(f"Could not persist local stats cache: {e}")
        return result

    async def save(self, aggregate: GlobalAggregate) -> None:
        """Persist aggregate, replacing whatever was cached before."""
        await self.store.set(self.key, json.dumps(aggregate.to_dict()))

    async def save_raw(self, payload: Dict[str, Any]) -> None:
        """Persist a backend payload exactly as received."""
        await self.store.set(self.key, json.dumps(payload))

    async def read_raw(self) -> Optional[Dict[str, Any]]:
        """Return the stored JSON object without rollover or model parsing."""
        stored = await self.store.get(self.key)
        if stored is None:
            return None
        return json.loads(stored)
