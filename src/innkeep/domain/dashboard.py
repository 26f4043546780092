"""Derived views for the admin dashboard."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from innkeep.infra.db import txn
from innkeep.infra.repositories.payments_repository import completed_revenue
from innkeep.infra.repositories.reservations_repository import (
    count_by_status,
    count_paid_by_day,
    paid_occupancy_by_room,
)
from innkeep.infra.repositories.rooms_repository import list_rooms
from innkeep.infra.settings import Settings, get_settings
from innkeep.infra.time import local_today, utc_now

from .availability import summarize
from .models import OCCUPYING_STATUSES, ReservationStatus


def _signed(delta: int) -> str:
    return f"+{delta}" if delta >= 0 else str(delta)


def dashboard_stats(
    *,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> dict:
    """Today's arrivals/departures, tonight's occupancy, revenue and status counts.

    Arrivals, departures and occupancy count only paid reservations in an
    occupying status, the same rule the availability calculator applies.
    """
    settings = settings or get_settings()
    today: date = local_today(settings.hotel_timezone, now or utc_now())
    yesterday = today - timedelta(days=1)
    tomorrow = today + timedelta(days=1)

    with txn() as cur:
        check_ins = count_paid_by_day(
            cur, column="check_in", day=today, statuses=OCCUPYING_STATUSES
        )
        check_ins_before = count_paid_by_day(
            cur, column="check_in", day=yesterday, statuses=OCCUPYING_STATUSES
        )
        check_outs = count_paid_by_day(
            cur, column="check_out", day=today, statuses=OCCUPYING_STATUSES
        )
        check_outs_before = count_paid_by_day(
            cur, column="check_out", day=yesterday, statuses=OCCUPYING_STATUSES
        )
        rooms = list_rooms(cur)
        occupancy = paid_occupancy_by_room(
            cur, start=today, end=tomorrow, statuses=OCCUPYING_STATUSES
        )
        revenue = completed_revenue(cur)
        by_status = count_by_status(cur)

    tonight = [summarize(room, occupancy.get(room.id, 0)) for room in rooms]

    return {
        "todayCheckIns": check_ins,
        "todayCheckOuts": check_outs,
        "checkInChange": _signed(check_ins - check_ins_before),
        "checkOutChange": _signed(check_outs - check_outs_before),
        "totalAvailableRooms": sum(a.available for a in tonight),
        "totalOccupiedRooms": sum(a.reserved for a in tonight),
        "totalRevenue": revenue,
        "pending": by_status[ReservationStatus.PENDING],
        "confirmed": by_status[ReservationStatus.CONFIRMED],
        "checkedOut": by_status[ReservationStatus.CHECKED_OUT],
    }


def dashboard_rooms(
    *,
    limit: int | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> list[dict]:
    """Per-room view of tonight: paid occupying stays over total units.

    Tonight is the half-open range [today, today+1), so a guest checking
    out today no longer holds a unit. Rooms under maintenance show every
    unit taken, as in the availability calculator.
    """
    settings = settings or get_settings()
    today: date = local_today(settings.hotel_timezone, now or utc_now())

    with txn() as cur:
        rooms = list_rooms(cur, limit=limit)
        occupancy = paid_occupancy_by_room(
            cur, start=today, end=today + timedelta(days=1), statuses=OCCUPYING_STATUSES
        )

    views = []
    for room in rooms:
        tonight = summarize(room, occupancy.get(room.id, 0))
        views.append(
            {
                "id": room.id,
                "name": room.name,
                "price": room.price,
                "capacity": room.guest_capacity,
                "occupied": f"{tonight.reserved}/{tonight.capacity}",
                "availableToday": tonight.available,
                "totalUnits": tonight.capacity,
                "reservedToday": tonight.reserved,
                "amenities": list(room.features[:3]),
                "status": room.status,
                "maintenance": room.under_maintenance,
            }
        )
    return views
