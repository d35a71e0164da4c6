"""Aggregate statistics models and their JSON wire form."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


def _as_number(payload: Dict[str, Any], key: str, default: float) -> int | float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"{key} is out of range") from e
    # JSON 1e999 and Infinity decode to inf
    if not math.isfinite(number):
        raise ValueError(f"{key} must be finite, got {value!r}")
    return value


def _as_int(payload: Dict[str, Any], key: str, default: int = 0) -> int:
    return int(_as_number(payload, key, default))


def _as_float(payload: Dict[str, Any], key: str, default: float = 0.0) -> float:
    return float(_as_number(payload, key, default))


def _as_str(payload: Dict[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


@dataclass(slots=True, frozen=True)
class LastWinner:
    username: str
    amount: float
    ticket_id: str
    draw_id: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "amount": self.amount,
            "ticketId": self.ticket_id,
            "drawId": self.draw_id,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LastWinner":
        if not isinstance(payload, dict):
            raise ValueError(f"lastWinner must be an object, got {payload!r}")
        return cls(
            username=_as_str(payload, "username"),
            amount=_as_float(payload, "amount"),
            ticket_id=_as_str(payload, "ticketId"),
            draw_id=_as_str(payload, "drawId"),
            date=_as_str(payload, "date"),
        )


@dataclass(slots=True, frozen=True)
class GlobalAggregate:
    """Shared lottery statistics synchronised between devices and backend.

    The average pool size is derived from the lifetime totals and is never
    stored on its own.
    """

    total_users: int
    today_total_tickets: int
    today_prize_pool: float
    today_unique_participants: int
    all_time_total_tickets: int
    all_time_total_prizes_paid: float
    all_time_total_draws: int
    all_time_total_winners: int
    largest_pool_ever: float
    largest_pool_date: str
    last_winner: Optional[LastWinner]
    last_updated: str
    current_draw_id: str
    current_draw_date: str
    current_commitment_hash: str

    @property
    def average_pool_size(self) -> Optional[float]:
        """Mean prize per draw, or None before the first draw."""
        if self.all_time_total_draws == 0:
            return None
        return self.all_time_total_prizes_paid / self.all_time_total_draws

    def to_dict(self) -> Dict[str, Any]:
        average = self.average_pool_size
        return {
            "totalUsers": self.total_users,
            "todayTotalTickets": self.today_total_tickets,
            "todayPrizePool": self.today_prize_pool,
            "todayUniqueParticipants": self.today_unique_participants,
            "allTimeTotalTickets": self.all_time_total_tickets,
            "allTimeTotalPrizesPaid": self.all_time_total_prizes_paid,
            "allTimeTotalDraws": self.all_time_total_draws,
            "allTimeTotalWinners": self.all_time_total_winners,
            # Clients expect a number here even before the first draw
            "averagePoolSize": average if average is not None else 0,
            "largestPoolEver": self.largest_pool_ever,
            "largestPoolDate": self.largest_pool_date,
            "lastWinner": self.last_winner.to_dict() if self.last_winner else None,
            "lastUpdated": self.last_updated,
            "currentDrawId": self.current_draw_id,
            "currentDrawDate": self.current_draw_date,
            "currentCommitmentHash": self.current_commitment_hash,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GlobalAggregate":
        """Build an aggregate from its camelCase JSON form.

        Missing keys fall back to fresh-aggregate defaults and unknown keys
        are ignored. ``averagePoolSize`` is recomputed, not read.

        Raises:
            ValueError: If payload is not an object or a value has the wrong type
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Aggregate must be a JSON object, got {type(payload).__name__}")

        raw_winner = payload.get("lastWinner")
        return cls(
            total_users=_as_int(payload, "totalUsers"),
            today_total_tickets=_as_int(payload, "todayTotalTickets"),
            today_prize_pool=_as_float(payload, "todayPrizePool"),
            today_unique_participants=_as_int(payload, "todayUniqueParticipants"),
            all_time_total_tickets=_as_int(payload, "allTimeTotalTickets"),
            all_time_total_prizes_paid=_as_float(payload, "allTimeTotalPrizesPaid"),
            all_time_total_draws=_as_int(payload, "allTimeTotalDraws"),
            all_time_total_winners=_as_int(payload, "allTimeTotalWinners"),
            largest_pool_ever=_as_float(payload, "largestPoolEver"),
            largest_pool_date=_as_str(payload, "largestPoolDate"),
            last_winner=LastWinner.from_dict(raw_winner) if raw_winner is not None else None,
            last_updated=_as_str(payload, "lastUpdated"),
            current_draw_id=_as_str(payload, "currentDrawId"),
            current_draw_date=_as_str(payload, "currentDrawDate"),
            current_commitment_hash=_as_str(payload, "currentCommitmentHash"),
        )
