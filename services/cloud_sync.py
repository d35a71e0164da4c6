"""Offline-first synchronisation of the global lottery statistics.

Every operation runs in two phases:

1. local commit: load the cached aggregate (rolled over to today), apply the
   event optimistically and persist it, so the caller always sees its own
   write even with no network;
2. remote reconciliation: if the availability policy allows it, send the
   event to the backend; on success the backend's aggregate replaces the
   cache wholesale, on failure the policy is tripped and the local
   aggregate is returned.

None of the sync or persistence errors reach the caller. Local commits are
serialised through one lock; the remote phase runs outside it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from core import get_logger, Endpoints, LotteryDefaults
from core.exceptions import (
    ConfigurationAbsent,
    PersistenceFailure,
    RemoteRejected,
    SyncError,
    TransportFailure,
)
from database.models import GlobalAggregate, LastWinner
from services.availability import SyncAvailabilityPolicy
from services.rollover import utc_timestamp
from services.stats_cache import StatsCache
from services.transport import RemoteTransport

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SyncResult(Generic[T]):
    """Uniform return envelope of the sync operations.

    ``is_offline`` and ``error`` are advisory; ``data`` is always usable
    when ``success`` is true.
    """

    success: bool
    data: Optional[T] = None
    is_offline: Optional[bool] = None
    error: Optional[str] = None


def describe_sync_error(error: SyncError) -> str:
    if isinstance(error, RemoteRejected):
        return f"Backend rejected request (HTTP {error.status})"
    if isinstance(error, TransportFailure):
        return f"Backend unreachable: {error}"
    if isinstance(error, ConfigurationAbsent):
        return "Backend not configured"
    return str(error)


class CloudSyncService:
    """Read and record global statistics with a local-first fallback."""

    def __init__(
        self,
        cache: StatsCache,
        transport: RemoteTransport,
        policy: SyncAvailabilityPolicy,
    ) -> None:
        self.cache = cache
        self.transport = transport
        self.policy = policy
        self._local_lock = asyncio.Lock()

    def is_sync_enabled(self) -> bool:
        """Whether a backend is configured at all."""
        return self.policy.is_configured

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    async def read_aggregate(self) -> SyncResult[GlobalAggregate]:
        """Fetch the aggregate from the backend, or from the cache.

        A failed remote read falls back silently: ``is_offline`` stays unset.
        """
        if not self.policy.should_attempt():
            return SyncResult(success=True, data=await self._load_local())

        try:
            payload = await self.transport.call(Endpoints.STATS, "GET")
            aggregate = await self._accept_remote(payload)
        except SyncError as e:
            self.policy.mark_failed()
            logger.debug(f"Reading stats from local cache: {describe_sync_error(e)}")
            return SyncResult(success=True, data=await self._load_local())

        return SyncResult(success=True, data=aggregate)

    async def record_ticket_purchase(
        self,
        user_id: str,
        ticket_id: str,
        draw_id: str,
        username: str,
    ) -> SyncResult[GlobalAggregate]:
        """Count a ticket locally, then report it to the backend."""

        def apply(current: GlobalAggregate) -> GlobalAggregate:
            tickets = current.today_total_tickets + 1
            return replace(
                current,
                today_total_tickets=tickets,
                # Recomputed from the count, not accumulated
                today_prize_pool=tickets * LotteryDefaults.TICKET_NET_CONTRIBUTION,
                today_unique_participants=current.today_unique_participants + 1,
                all_time_total_tickets=current.all_time_total_tickets + 1,
                last_updated=utc_timestamp(),
            )

        return await self._record(
            "ticket purchase",
            apply,
            Endpoints.TICKET,
            lambda: {
                "userId": user_id,
                "ticketId": ticket_id,
                "drawId": draw_id,
                "username": username,
                "timestamp": utc_timestamp(),
            },
        )

    async def record_user_registration(self, user_id: str) -> SyncResult[GlobalAggregate]:
        """Count a new user locally, then report it to the backend."""

        def apply(current: GlobalAggregate) -> GlobalAggregate:
            return replace(
                current,
                total_users=current.total_users + 1,
                last_updated=utc_timestamp(),
            )

        return await self._record(
            "user registration",
            apply,
            Endpoints.USER,
            lambda: {"userId": user_id, "timestamp": utc_timestamp()},
        )

    async def record_draw_completion(
        self,
        draw_id: str,
        winner_username: str,
        winner_ticket_id: str,
        prize_amount: float,
        total_entries: int,
    ) -> SyncResult[GlobalAggregate]:
        """Fold a finished draw into the lifetime totals, then report it.

        ``total_entries`` is sent to the backend for its records but does not
        change the local aggregate.
        """
        today = self.cache.today()

        def apply(current: GlobalAggregate) -> GlobalAggregate:
            is_record = prize_amount > current.largest_pool_ever
            return replace(
                current,
                all_time_total_draws=current.all_time_total_draws + 1,
                all_time_total_prizes_paid=current.all_time_total_prizes_paid + prize_amount,
                all_time_total_winners=current.all_time_total_winners + 1,
                largest_pool_ever=prize_amount if is_record else current.largest_pool_ever,
                largest_pool_date=today if is_record else current.largest_pool_date,
                last_winner=LastWinner(
                    username=winner_username,
                    amount=prize_amount,
                    ticket_id=winner_ticket_id,
                    draw_id=draw_id,
                    date=today,
                ),
                last_updated=utc_timestamp(),
            )

        return await self._record(
            "draw completion",
            apply,
            Endpoints.DRAW_COMPLETE,
            lambda: {
                "drawId": draw_id,
                "winnerUsername": winner_username,
                "winnerTicketId": winner_ticket_id,
                "prizeAmount": prize_amount,
                "totalEntries": total_entries,
                "timestamp": utc_timestamp(),
            },
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    async def _record(
        self,
        event: str,
        apply: Callable[[GlobalAggregate], GlobalAggregate],
        path: str,
        build_body: Callable[[], Dict[str, Any]],
    ) -> SyncResult[GlobalAggregate]:
        local = await self._commit_local(event, apply)

        if not self.policy.should_attempt():
            return SyncResult(success=True, data=local)

        try:
            payload = await self.transport.call(path, "POST", build_body())
            aggregate = await self._accept_remote(payload)
        except SyncError as e:
            self.policy.mark_failed()
            message = describe_sync_error(e)
            logger.warning(f"Recorded {event} locally only: {message}")
            return SyncResult(success=True, data=local, is_offline=True, error=message)

        return SyncResult(success=True, data=aggregate)

    async def _commit_local(
        self,
        event: str,
        apply: Callable[[GlobalAggregate], GlobalAggregate],
    ) -> GlobalAggregate:
        async with self._local_lock:
            updated = apply(await self.cache.load())
            try:
                await self.cache.save(updated)
            except PersistenceFailure as e:
                logger.error(f"Failed to persist local {event}: {e}")
        return updated

    async def _load_local(self) -> GlobalAggregate:
        async with self._local_lock:
            return await self.cache.load()

    async def _accept_remote(self, payload: Dict[str, Any]) -> GlobalAggregate:
        """Mark the call successful and replace the cache with payload.

        Raises:
            TransportFailure: If payload is not a valid aggregate
        """
        try:
            aggregate = GlobalAggregate.from_dict(payload)
        except (ValueError, TypeError, OverflowError) as e:
            raise TransportFailure(f"Backend returned a malformed aggregate: {e}", e) from e

        self.policy.mark_succeeded()
        try:
            await self.cache.save_raw(payload)
        except PersistenceFailure as e:
            logger.error(f"Failed to cache backend stats: {e}")
        return aggregate
