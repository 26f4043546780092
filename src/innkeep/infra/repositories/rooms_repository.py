"""Rooms repository - persistence for room inventory records.

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from innkeep.domain.models import Room

_ROOM_COLUMNS = """
    id, name, available, occupied, maintenance, status,
    price, guest_capacity, features
"""

# Columns a partial update may touch.
UPDATABLE_FIELDS = (
    "name",
    "available",
    "occupied",
    "maintenance",
    "status",
    "price",
    "guest_capacity",
    "features",
)


def _row_to_room(row: tuple) -> Room:
    return Room(
        id=str(row[0]),
        name=row[1],
        available=row[2] or 0,
        occupied=row[3] or 0,
        maintenance=bool(row[4]),
        status=row[5] or "available",
        price=row[6],
        guest_capacity=row[7],
        features=list(row[8] or []),
    )


def get_room(cur: PgCursor, room_id: str, *, lock: bool = False) -> Room | None:
    suffix = " FOR UPDATE" if lock else ""
    cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE id = %s{suffix}", (room_id,))
    row = cur.fetchone()
    return _row_to_room(row) if row else None


def get_room_by_name(cur: PgCursor, name: str, *, lock: bool = False) -> Room | None:
    """Resolve a room by its display name.

    Args:
        cur: Database cursor (within transaction when lock=True).
        name: Room name.
        lock: If True, locks the room row FOR UPDATE until commit. Used to
            serialize admissions for the same room.

    Returns:
        Room or None if no room has that name.
    """
    suffix = " FOR UPDATE" if lock else ""
    cur.execute(
        f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE name = %s{suffix}",
        (name,),
    )
    row = cur.fetchone()
    return _row_to_room(row) if row else None


def list_rooms(cur: PgCursor, *, limit: int | None = None) -> list[Room]:
    """Rooms newest first, optionally only the first `limit`."""
    if limit is None:
        cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms ORDER BY created_at DESC")
    else:
        cur.execute(
            f"SELECT {_ROOM_COLUMNS} FROM rooms ORDER BY created_at DESC LIMIT %s",
            (limit,),
        )
    return [_row_to_room(row) for row in cur.fetchall()]


def insert_room(
    cur: PgCursor,
    *,
    name: str,
    price: Decimal,
    guest_capacity: int,
    available: int = 0,
    occupied: int = 0,
    maintenance: bool = False,
    status: str = "available",
    features: list[str] | None = None,
) -> Room:
    cur.execute(
        f"""
        INSERT INTO rooms (
            name, price, guest_capacity, available, occupied,
            maintenance, status, features
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING {_ROOM_COLUMNS}
        """,
        (
            name,
            price,
            guest_capacity,
            available,
            occupied,
            maintenance,
            status,
            list(features or []),
        ),
    )
    return _row_to_room(cur.fetchone())


def update_room(cur: PgCursor, room_id: str, fields: dict[str, Any]) -> Room | None:
    """Apply a partial update to a room.

    Args:
        cur: Database cursor.
        room_id: Room UUID.
        fields: Column -> value; keys outside UPDATABLE_FIELDS are rejected.

    Returns:
        Updated Room, or None if the room does not exist.

    Raises:
        ValueError: If fields names an unknown column.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown room fields: {sorted(unknown)}")

    assignments = [f"{column} = %s" for column in fields]
    assignments.append("updated_at = now()")
    params: list = list(fields.values())
    params.append(room_id)

    cur.execute(
        f"""
        UPDATE rooms
        SET {", ".join(assignments)}
        WHERE id = %s
        RETURNING {_ROOM_COLUMNS}
        """,
        params,
    )
    row = cur.fetchone()
    return _row_to_room(row) if row else None


def room_has_reservations(cur: PgCursor, room_id: str) -> bool:
    """Whether any reservation, in any status, references the room."""
    cur.execute("SELECT 1 FROM reservations WHERE room_id = %s LIMIT 1", (room_id,))
    return cur.fetchone() is not None


def delete_room(cur: PgCursor, room_id: str) -> bool:
    cur.execute("DELETE FROM rooms WHERE id = %s RETURNING id", (room_id,))
    return cur.fetchone() is not None
