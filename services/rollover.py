"""Daily rollover of the shared aggregate and draw identity minting."""

from __future__ import annotations

import hashlib
import os
import secrets
from dataclasses import replace
from datetime import datetime, timezone

from core import get_logger, LotteryDefaults
from database.models import GlobalAggregate

logger = get_logger(__name__)


def utc_timestamp() -> str:
    """Current time as an ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def today_iso() -> str:
    """Today's UTC calendar date as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).date().isoformat()


def mint_draw_id(today: str) -> str:
    """Create a draw identifier such as ``DRAW-2026-10-16-K3Z9QA``."""
    suffix = "".join(
        secrets.choice(LotteryDefaults.DRAW_ID_ALPHABET)
        for _ in range(LotteryDefaults.DRAW_ID_SUFFIX_LENGTH)
    )
    return f"{LotteryDefaults.DRAW_ID_PREFIX}-{today}-{suffix}"


def mint_commitment_hash() -> str:
    """Create an opaque commitment token for a new draw.

    The authoritative commitment comes from the backend; locally this is a
    SHA-256 digest of a timestamp and random bytes.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    random_bytes = os.urandom(LotteryDefaults.SEED_RANDOM_BYTES)
    combined = f"{timestamp}{random_bytes.hex()}"
    return hashlib.sha256(combined.encode()).hexdigest()


def default_aggregate(today: str) -> GlobalAggregate:
    """Fresh aggregate used on first run or when the cache is unusable."""
    return GlobalAggregate(
        total_users=0,
        today_total_tickets=0,
        today_prize_pool=0.0,
        today_unique_participants=0,
        all_time_total_tickets=0,
        all_time_total_prizes_paid=0.0,
        all_time_total_draws=0,
        all_time_total_winners=0,
        largest_pool_ever=0.0,
        largest_pool_date=today,
        last_winner=None,
        last_updated=utc_timestamp(),
        current_draw_id=mint_draw_id(today),
        current_draw_date=today,
        current_commitment_hash=mint_commitment_hash(),
    )


def needs_rollover(aggregate: GlobalAggregate, today: str) -> bool:
    return aggregate.current_draw_date != today


def apply_rollover(aggregate: GlobalAggregate, today: str) -> GlobalAggregate:
    """Reset daily counters when the calendar date has changed.

    Only ``today`` is compared against, so after several days offline the
    intermediate days are skipped rather than replayed. Applying the
    rollover a second time for the same ``today`` returns its input
    unchanged.

    Args:
        aggregate: Aggregate as loaded from the cache
        today: Current date as ``YYYY-MM-DD``

    Returns:
        The same object when no rollover is due, otherwise a new aggregate
        with zeroed daily counters and a freshly minted draw
    """
    if not needs_rollover(aggregate, today):
        return aggregate

    logger.info(
        f"New draw day {today} (previous {aggregate.current_draw_date or 'unset'}), "
        f"resetting daily counters"
    )
    return replace(
        aggregate,
        today_total_tickets=0,
        today_prize_pool=0.0,
        today_unique_participants=0,
        current_draw_id=mint_draw_id(today),
        current_draw_date=today,
        current_commitment_hash=mint_commitment_hash(),
        last_updated=utc_timestamp(),
    )
