"""Tests for the availability calculator.

Covers:
- Stay validation
- summarize(): capacity, maintenance, over-count
- compute_availability(): only paid occupying stays count
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from helpers import make_reservation, make_room, mock_txn
from innkeep.domain.availability import (
    compute_availability,
    summarize,
    validate_stay,
)
from innkeep.domain.errors import InvalidArgumentError, RoomNotFoundError
from innkeep.domain.models import OCCUPYING_STATUSES, ReservationStatus


class TestValidateStay:
    def test_accepts_one_night(self):
        validate_stay(date(2026, 3, 10), date(2026, 3, 11))

    def test_rejects_zero_length(self):
        with pytest.raises(InvalidArgumentError, match="after check-in"):
            validate_stay(date(2026, 3, 10), date(2026, 3, 10))

    def test_rejects_inverted(self):
        with pytest.raises(InvalidArgumentError):
            validate_stay(date(2026, 3, 12), date(2026, 3, 10))


class TestSummarize:
    def test_free_units(self):
        room = make_room(available=2, occupied=1)
        result = summarize(room, 1)
        assert result.capacity == 3
        assert result.reserved == 1
        assert result.available == 2
        assert result.is_available is True

    def test_capacity_never_below_one(self):
        room = make_room(available=0, occupied=0)
        result = summarize(room, 0)
        assert result.capacity == 1
        assert result.available == 1

    def test_maintenance_flag_reports_full(self):
        room = make_room(available=3, maintenance=True)
        result = summarize(room, 0)
        assert result.reserved == 3
        assert result.available == 0
        assert result.is_available is False

    def test_maintenance_status_reports_full(self):
        room = make_room(available=1, status="Maintenance")
        assert summarize(room, 0).available == 0

    def test_overcount_clamps_available_at_zero(self):
        room = make_room(available=1)
        result = summarize(room, 3)
        assert result.reserved == 3
        assert result.available == 0

    def test_to_dict_shape(self):
        room = make_room(name="Suite", available=1)
        assert summarize(room, 0).to_dict() == {
            "room_name": "Suite",
            "capacity": 1,
            "reserved": 0,
            "available": 1,
            "isAvailable": True,
        }


class TestComputeAvailability:
    def _run(self, room, overlapping, paid_ids, start=date(2026, 3, 10), end=date(2026, 3, 12)):
        with patch("innkeep.domain.availability.txn") as txn_fn, \
             patch("innkeep.domain.availability.get_room_by_name", return_value=room), \
             patch(
                 "innkeep.domain.availability.find_overlapping_reservations",
                 return_value=overlapping,
             ) as find, \
             patch(
                 "innkeep.domain.availability.paid_reservation_ids",
                 return_value=set(paid_ids),
             ):
            mock_txn(txn_fn)
            result = compute_availability(room.name if room else "Nope", start, end)
        return result, find

    def test_only_paid_reservations_count(self):
        room = make_room(available=2)
        paid = make_reservation()
        unpaid = make_reservation()
        result, _ = self._run(room, [paid, unpaid], [paid.id])
        assert result.reserved == 1
        assert result.available == 1

    def test_queries_occupying_statuses_for_range(self):
        room = make_room(available=1)
        _, find = self._run(room, [], [])
        kwargs = find.call_args.kwargs
        assert kwargs["room_id"] == room.id
        assert kwargs["start"] == date(2026, 3, 10)
        assert kwargs["end"] == date(2026, 3, 12)
        assert set(kwargs["statuses"]) == set(OCCUPYING_STATUSES)
        assert ReservationStatus.PENDING not in kwargs["statuses"]

    def test_fully_reserved(self):
        room = make_room(available=1)
        booked = make_reservation()
        result, _ = self._run(room, [booked], [booked.id])
        assert result.available == 0
        assert result.is_available is False

    def test_maintenance_skips_reservation_lookup(self):
        room = make_room(available=2, maintenance=True)
        result, find = self._run(room, [], [])
        assert result.available == 0
        assert result.reserved == 2
        find.assert_not_called()

    def test_unknown_room(self):
        with pytest.raises(RoomNotFoundError):
            self._run(None, [], [])

    def test_inverted_range_rejected_before_db(self):
        with patch("innkeep.domain.availability.txn") as txn_fn:
            with pytest.raises(InvalidArgumentError):
                compute_availability("Deluxe", date(2026, 3, 12), date(2026, 3, 10))
            txn_fn.assert_not_called()

    def test_instants_normalized_to_hotel_date(self):
        room = make_room(available=1)
        # 2026-03-09 17:00 UTC is 2026-03-10 01:00 in Asia/Manila
        start = datetime(2026, 3, 9, 17, 0, tzinfo=timezone.utc)
        end = datetime(2026, 3, 11, 17, 0, tzinfo=timezone.utc)
        _, find = self._run(room, [], [], start=start, end=end)
        assert find.call_args.kwargs["start"] == date(2026, 3, 10)
        assert find.call_args.kwargs["end"] == date(2026, 3, 12)
