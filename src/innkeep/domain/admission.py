"""Booking admission - decides whether a new booking may be accepted.

Checks, in order:
1. Required fields and a positive-length stay
2. Room exists
3. Room is not under maintenance
4. Capacity/hold check against overlapping reservations
5. Insert as 'pending'

Steps 2-5 run in one transaction with the room row locked FOR UPDATE, so
two admissions for the same room never interleave their check and insert.

Hold semantics: another user's pending booking blocks capacity only while
it is fresh (created within the hold window). A user's own pending
bookings never block that user's retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable

from innkeep.infra.db import txn
from innkeep.infra.repositories.reservations_repository import (
    find_overlapping_reservations,
    insert_reservation,
)
from innkeep.infra.repositories.rooms_repository import get_room_by_name
from innkeep.infra.settings import Settings, get_settings
from innkeep.infra.time import to_local_date, utc_now
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

from .availability import validate_stay
from .errors import (
    FullyBookedError,
    InvalidArgumentError,
    RoomNotFoundError,
    RoomUnavailableError,
)
from .models import ADMISSION_STATUSES, Reservation, ReservationStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class BookingRequest:
    """A guest's request to book a room for [check_in, check_out)."""

    user_name: str
    room_name: str
    check_in: date | datetime
    check_out: date | datetime
    guest_count: int
    total_amount: Decimal
    special_requests: str = ""
    extra_beds: int | None = None
    extra_persons: int | None = None


def _validate_request(request: BookingRequest) -> None:
    missing = [
        name
        for name in ("user_name", "room_name", "check_in", "check_out")
        if not getattr(request, name)
    ]
    if not request.guest_count:
        missing.append("guest_count")
    if not request.total_amount:
        missing.append("total_amount")
    if missing:
        raise InvalidArgumentError(f"Missing required fields: {', '.join(missing)}")

    if request.guest_count < 1:
        raise InvalidArgumentError("guest_count must be at least 1")
    if request.total_amount <= 0:
        raise InvalidArgumentError("total_amount must be positive")
    for name in ("extra_beds", "extra_persons"):
        value = getattr(request, name)
        if value is not None and value < 0:
            raise InvalidArgumentError(f"{name} cannot be negative")


def is_blocking(
    reservation: Reservation,
    *,
    user_name: str,
    now: datetime,
    hold_window: timedelta,
) -> bool:
    """Whether an overlapping reservation consumes capacity for this requester."""
    if reservation.status in (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_OUT):
        return True
    if reservation.status != ReservationStatus.PENDING:
        return False
    if reservation.user_name == user_name:
        return False
    return now - reservation.created_at <= hold_window


def count_blocking(
    reservations: Iterable[Reservation],
    *,
    user_name: str,
    now: datetime,
    hold_window: timedelta,
) -> int:
    return sum(
        1
        for r in reservations
        if is_blocking(r, user_name=user_name, now=now, hold_window=hold_window)
    )


def submit_booking(
    request: BookingRequest,
    *,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> Reservation:
    """Admit a booking as 'pending' or reject it.

    Args:
        request: Booking request.
        now: Current instant (defaults to utc_now()).
        settings: Optional settings override.

    Returns:
        The inserted pending Reservation.

    Raises:
        InvalidArgumentError: Missing fields or check_in >= check_out.
        RoomNotFoundError: Unknown room name.
        RoomUnavailableError: Room under maintenance.
        FullyBookedError: Blocking reservations already fill capacity.
    """
    settings = settings or get_settings()
    now = now or utc_now()

    _validate_request(request)
    check_in = to_local_date(request.check_in, settings.hotel_timezone)
    check_out = to_local_date(request.check_out, settings.hotel_timezone)
    validate_stay(check_in, check_out)

    hold_window = timedelta(minutes=settings.hold_window_minutes)

    with txn() as cur:
        room = get_room_by_name(cur, request.room_name, lock=True)
        if room is None:
            raise RoomNotFoundError(request.room_name)

        if room.under_maintenance:
            logger.info(
                "booking rejected: room under maintenance",
                extra={"extra_fields": safe_log_context(room_id=room.id)},
            )
            raise RoomUnavailableError(room.name)

        overlapping = find_overlapping_reservations(
            cur,
            room_id=room.id,
            start=check_in,
            end=check_out,
            statuses=ADMISSION_STATUSES,
        )
        blocking = count_blocking(
            overlapping,
            user_name=request.user_name,
            now=now,
            hold_window=hold_window,
        )
        if blocking >= room.capacity:
            logger.info(
                "booking rejected: fully booked",
                extra={
                    "extra_fields": safe_log_context(
                        room_id=room.id,
                        check_in=check_in,
                        check_out=check_out,
                        capacity=room.capacity,
                        blocking=blocking,
                    )
                },
            )
            raise FullyBookedError(room.name, room.capacity, blocking)

        reservation = insert_reservation(
            cur,
            room_id=room.id,
            user_name=request.user_name,
            check_in=check_in,
            check_out=check_out,
            guest_count=request.guest_count,
            total_amount=request.total_amount,
            special_requests=request.special_requests or "",
            extra_beds=request.extra_beds,
            extra_persons=request.extra_persons,
            created_at=now,
        )

    logger.info(
        "booking admitted",
        extra={
            "extra_fields": safe_log_context(
                reservation_id=reservation.id,
                room_id=room.id,
                check_in=check_in,
                check_out=check_out,
                capacity=room.capacity,
                blocking=blocking,
            )
        },
    )
    return reservation
