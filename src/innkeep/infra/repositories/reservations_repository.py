"""Reservations repository - persistence for reservation records.

Uses raw SQL with psycopg2 (no ORM). Reservations are keyed to rooms by
room_id; room name is joined in for display.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from psycopg2.extensions import cursor as PgCursor

from innkeep.domain.models import (
    PaymentStatus,
    Reservation,
    ReservationStatus,
    status_values,
)

_RESERVATION_SELECT = """
    SELECT r.id, r.room_id, rm.name, r.user_name, r.check_in, r.check_out,
           r.guest_count, r.total_amount, r.status, r.created_at, r.updated_at,
           r.special_requests, r.extra_beds, r.extra_persons
    FROM reservations r
    JOIN rooms rm ON rm.id = r.room_id
"""

# Reservation has at least one completed payment.
_PAID_EXISTS = """
    EXISTS (
        SELECT 1 FROM payments p
        WHERE p.reservation_id = reservations.id AND p.status = %s
    )
"""


def _row_to_reservation(row: tuple) -> Reservation:
    return Reservation(
        id=str(row[0]),
        room_id=str(row[1]),
        room_name=row[2],
        user_name=row[3],
        check_in=row[4],
        check_out=row[5],
        guest_count=row[6],
        total_amount=row[7],
        status=ReservationStatus(row[8]),
        created_at=row[9],
        updated_at=row[10],
        special_requests=row[11] or "",
        extra_beds=row[12],
        extra_persons=row[13],
    )


def get_reservation(
    cur: PgCursor,
    reservation_id: str,
    *,
    lock: bool = False,
) -> Reservation | None:
    """Fetch one reservation.

    Args:
        cur: Database cursor (within transaction when lock=True).
        reservation_id: Reservation UUID.
        lock: If True, locks the reservation row FOR UPDATE.
    """
    suffix = " FOR UPDATE OF r" if lock else ""
    cur.execute(
        f"{_RESERVATION_SELECT} WHERE r.id = %s{suffix}",
        (reservation_id,),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def find_overlapping_reservations(
    cur: PgCursor,
    *,
    room_id: str,
    start: date,
    end: date,
    statuses: Iterable[ReservationStatus],
) -> list[Reservation]:
    """Reservations of a room whose stay intersects [start, end).

    Overlap formula: existing.check_in < end AND existing.check_out > start.
    A stay that ends on ``start`` does not overlap.
    """
    cur.execute(
        f"""
        {_RESERVATION_SELECT}
        WHERE r.room_id = %s
          AND r.status = ANY(%s::reservation_status[])
          AND r.check_in < %s
          AND r.check_out > %s
        ORDER BY r.check_in, r.created_at
        """,
        (room_id, status_values(statuses), end, start),
    )
    return [_row_to_reservation(row) for row in cur.fetchall()]


def insert_reservation(
    cur: PgCursor,
    *,
    room_id: str,
    user_name: str,
    check_in: date,
    check_out: date,
    guest_count: int,
    total_amount: Decimal,
    special_requests: str,
    extra_beds: int | None,
    extra_persons: int | None,
    created_at: datetime,
) -> Reservation:
    """Insert a pending reservation and return it."""
    cur.execute(
        """
        INSERT INTO reservations (
            room_id, user_name, check_in, check_out, guest_count,
            total_amount, special_requests, extra_beds, extra_persons,
            status, created_at, updated_at
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id
        """,
        (
            room_id,
            user_name,
            check_in,
            check_out,
            guest_count,
            total_amount,
            special_requests,
            extra_beds,
            extra_persons,
            ReservationStatus.PENDING.value,
            created_at,
            created_at,
        ),
    )
    reservation_id = str(cur.fetchone()[0])
    return get_reservation(cur, reservation_id)


def set_reservation_status(
    cur: PgCursor,
    reservation_id: str,
    status: ReservationStatus,
    *,
    now: datetime,
) -> Reservation | None:
    cur.execute(
        """
        UPDATE reservations
        SET status = %s, updated_at = %s
        WHERE id = %s
        RETURNING id
        """,
        (status.value, now, reservation_id),
    )
    if cur.fetchone() is None:
        return None
    return get_reservation(cur, reservation_id)


# Columns a details edit may touch. Status and stay dates change only
# through the lifecycle and admission rules.
EDITABLE_FIELDS = (
    "special_requests",
    "guest_count",
    "total_amount",
    "extra_beds",
    "extra_persons",
)


def update_reservation_details(
    cur: PgCursor,
    reservation_id: str,
    fields: dict,
    *,
    now: datetime,
) -> Reservation | None:
    """Apply a partial edit of non-lifecycle fields.

    Raises:
        ValueError: If fields names a column outside EDITABLE_FIELDS.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown reservation fields: {sorted(unknown)}")

    assignments = [f"{column} = %s" for column in fields]
    assignments.append("updated_at = %s")
    params: list = list(fields.values())
    params.extend([now, reservation_id])

    cur.execute(
        f"""
        UPDATE reservations
        SET {", ".join(assignments)}
        WHERE id = %s
        RETURNING id
        """,
        params,
    )
    if cur.fetchone() is None:
        return None
    return get_reservation(cur, reservation_id)


def list_reservations(cur: PgCursor, *, user_name: str | None = None) -> list[Reservation]:
    """List reservations newest first, optionally for one guest."""
    if user_name is None:
        cur.execute(f"{_RESERVATION_SELECT} ORDER BY r.created_at DESC")
    else:
        cur.execute(
            f"{_RESERVATION_SELECT} WHERE r.user_name = %s ORDER BY r.created_at DESC",
            (user_name,),
        )
    return [_row_to_reservation(row) for row in cur.fetchall()]


def auto_checkout_due(cur: PgCursor, *, today: date, now: datetime) -> list[str]:
    """Move paid confirmed stays that ended before today to checked_out.

    Single statement; rows already checked out are not touched, so running
    it again is a no-op.

    Returns:
        IDs of the reservations updated.
    """
    cur.execute(
        f"""
        UPDATE reservations
        SET status = %s, updated_at = %s
        WHERE status = %s
          AND check_out < %s
          AND {_PAID_EXISTS}
        RETURNING id
        """,
        (
            ReservationStatus.CHECKED_OUT.value,
            now,
            ReservationStatus.CONFIRMED.value,
            today,
            PaymentStatus.COMPLETED.value,
        ),
    )
    return [str(row[0]) for row in cur.fetchall()]


def restore_paid_cancellations(cur: PgCursor, *, now: datetime) -> list[str]:
    """Move cancelled reservations that have a completed payment back to pending.

    Returns:
        IDs of the reservations updated.
    """
    cur.execute(
        f"""
        UPDATE reservations
        SET status = %s, updated_at = %s
        WHERE status = %s
          AND {_PAID_EXISTS}
        RETURNING id
        """,
        (
            ReservationStatus.PENDING.value,
            now,
            ReservationStatus.CANCELLED.value,
            PaymentStatus.COMPLETED.value,
        ),
    )
    return [str(row[0]) for row in cur.fetchall()]


def count_by_status(cur: PgCursor) -> dict[ReservationStatus, int]:
    cur.execute("SELECT status, COUNT(*) FROM reservations GROUP BY status")
    counts = {status: 0 for status in ReservationStatus}
    for status, count in cur.fetchall():
        counts[ReservationStatus(status)] = count
    return counts


def count_paid_by_day(
    cur: PgCursor,
    *,
    column: str,
    day: date,
    statuses: Iterable[ReservationStatus],
) -> int:
    """Count paid reservations whose check_in or check_out falls on a day."""
    if column not in ("check_in", "check_out"):
        raise ValueError(f"Unsupported date column: {column}")
    cur.execute(
        f"""
        SELECT COUNT(*)
        FROM reservations
        WHERE {column} = %s
          AND status = ANY(%s::reservation_status[])
          AND {_PAID_EXISTS}
        """,
        (day, status_values(statuses), PaymentStatus.COMPLETED.value),
    )
    return cur.fetchone()[0]


def paid_occupancy_by_room(
    cur: PgCursor,
    *,
    start: date,
    end: date,
    statuses: Iterable[ReservationStatus],
) -> dict[str, int]:
    """Paid reservations overlapping [start, end), counted per room_id."""
    cur.execute(
        f"""
        SELECT room_id, COUNT(*)
        FROM reservations
        WHERE status = ANY(%s::reservation_status[])
          AND check_in < %s
          AND check_out > %s
          AND {_PAID_EXISTS}
        GROUP BY room_id
        """,
        (status_values(statuses), end, start, PaymentStatus.COMPLETED.value),
    )
    return {str(room_id): count for room_id, count in cur.fetchall()}
