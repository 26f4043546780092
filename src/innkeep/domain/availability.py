"""Availability calculator.

Answers "how many units of this room are free for [start, end)?".

Overlap formula:  (existing.check_in < end) AND (existing.check_out > start)
Strict inequality frees the check-out day: a stay ending on the 12th does
not overlap one starting on the 12th.

Only paid reservations in an occupying status (confirmed, checked_out)
consume inventory here. Pending holds are an admission-time concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from innkeep.infra.db import txn
from innkeep.infra.repositories.payments_repository import paid_reservation_ids
from innkeep.infra.repositories.reservations_repository import (
    find_overlapping_reservations,
)
from innkeep.infra.repositories.rooms_repository import get_room_by_name
from innkeep.infra.settings import Settings, get_settings
from innkeep.infra.time import to_local_date
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

from .errors import InvalidArgumentError, RoomNotFoundError
from .models import OCCUPYING_STATUSES, Room

logger = get_logger(__name__)


@dataclass(frozen=True)
class Availability:
    room_name: str
    capacity: int
    reserved: int
    available: int

    @property
    def is_available(self) -> bool:
        return self.available > 0

    def to_dict(self) -> dict:
        return {
            "room_name": self.room_name,
            "capacity": self.capacity,
            "reserved": self.reserved,
            "available": self.available,
            "isAvailable": self.is_available,
        }


def validate_stay(check_in: date, check_out: date) -> None:
    """Reject zero-length and inverted date ranges.

    Raises:
        InvalidArgumentError: If check_in is not strictly before check_out.
    """
    if check_in >= check_out:
        raise InvalidArgumentError("Check-out date must be after check-in date")


def summarize(room: Room, reserved: int) -> Availability:
    """Availability of a room given how many paid stays overlap the range.

    A room under maintenance reports itself fully reserved. ``reserved`` is
    reported as counted, even if inconsistent data pushes it past capacity.
    """
    capacity = room.capacity
    if room.under_maintenance:
        return Availability(
            room_name=room.name,
            capacity=capacity,
            reserved=capacity,
            available=0,
        )
    return Availability(
        room_name=room.name,
        capacity=capacity,
        reserved=reserved,
        available=max(0, capacity - reserved),
    )


def compute_availability(
    room_name: str,
    start: date | datetime,
    end: date | datetime,
    *,
    settings: Settings | None = None,
) -> Availability:
    """Compute free units of a room for the half-open range [start, end).

    Args:
        room_name: Room display name.
        start: First night (date or instant; normalized to the local date).
        end: Departure day (exclusive).
        settings: Optional settings override (defaults to process settings).

    Returns:
        Availability summary.

    Raises:
        InvalidArgumentError: If start is not before end.
        RoomNotFoundError: If no room has that name.
    """
    settings = settings or get_settings()
    start_day = to_local_date(start, settings.hotel_timezone)
    end_day = to_local_date(end, settings.hotel_timezone)
    validate_stay(start_day, end_day)

    with txn() as cur:
        room = get_room_by_name(cur, room_name)
        if room is None:
            raise RoomNotFoundError(room_name)

        if room.under_maintenance:
            return summarize(room, room.capacity)

        overlapping = find_overlapping_reservations(
            cur,
            room_id=room.id,
            start=start_day,
            end=end_day,
            statuses=OCCUPYING_STATUSES,
        )
        paid = paid_reservation_ids(cur, [r.id for r in overlapping])

    reserved = sum(1 for r in overlapping if r.id in paid)
    result = summarize(room, reserved)

    logger.debug(
        "availability computed",
        extra={
            "extra_fields": safe_log_context(
                room_id=room.id,
                start=start_day,
                end=end_day,
                capacity=result.capacity,
                reserved=result.reserved,
            )
        },
    )
    return result
