"""Tests for the aggregate wire format."""

import pytest

from database.models import GlobalAggregate, LastWinner
from tests.fakes import server_stats


def test_from_dict_reads_camel_case_payload():
    aggregate = GlobalAggregate.from_dict(server_stats())

    assert aggregate.total_users == 5
    assert aggregate.today_prize_pool == pytest.approx(11.4)
    assert aggregate.all_time_total_draws == 4
    assert aggregate.last_winner == LastWinner(
        username="carol",
        amount=80.0,
        ticket_id="T-9",
        draw_id="DRAW-2026-10-15-ABC123",
        date="2026-10-15",
    )
    assert aggregate.current_draw_id == "DRAW-2026-10-16-SRV001"


def test_average_pool_size_is_derived():
    """A stale averagePoolSize on the wire is ignored."""
    aggregate = GlobalAggregate.from_dict(server_stats(averagePoolSize=999.0))

    assert aggregate.average_pool_size == pytest.approx(75.0)
    assert aggregate.to_dict()["averagePoolSize"] == pytest.approx(75.0)


def test_average_pool_size_undefined_before_first_draw():
    aggregate = GlobalAggregate.from_dict(
        server_stats(allTimeTotalDraws=0, allTimeTotalPrizesPaid=0.0)
    )

    assert aggregate.average_pool_size is None
    assert aggregate.to_dict()["averagePoolSize"] == 0


def test_to_dict_matches_server_shape():
    payload = server_stats()

    assert GlobalAggregate.from_dict(payload).to_dict() == payload


def test_missing_keys_use_defaults():
    aggregate = GlobalAggregate.from_dict({"totalUsers": 3, "lastWinner": None})

    assert aggregate.total_users == 3
    assert aggregate.all_time_total_tickets == 0
    assert aggregate.last_winner is None
    assert aggregate.current_draw_id == ""


@pytest.mark.parametrize("payload", [
    ["not", "an", "object"],
    "stats",
    None,
])
def test_non_object_payload_rejected(payload):
    with pytest.raises(ValueError):
        GlobalAggregate.from_dict(payload)


@pytest.mark.parametrize("key,value", [
    ("totalUsers", "five"),
    ("todayPrizePool", True),
    ("currentDrawId", 42),
    ("lastWinner", "carol"),
])
def test_wrong_value_types_rejected(key, value):
    with pytest.raises(ValueError):
        GlobalAggregate.from_dict(server_stats(**{key: value}))


@pytest.mark.parametrize("key,value", [
    ("totalUsers", float("inf")),
    ("allTimeTotalPrizesPaid", float("-inf")),
    ("largestPoolEver", float("nan")),
    ("allTimeTotalTickets", 10 ** 400),
])
def test_non_finite_numbers_rejected(key, value):
    with pytest.raises(ValueError):
        GlobalAggregate.from_dict(server_stats(**{key: value}))


def test_non_finite_winner_amount_rejected():
    winner = dict(server_stats()["lastWinner"], amount=float("inf"))

    with pytest.raises(ValueError):
        GlobalAggregate.from_dict(server_stats(lastWinner=winner))
