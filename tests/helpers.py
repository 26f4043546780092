"""Shared test helper functions for Innkeep tests.

This module contains helper functions that can be imported by individual
test files. These are NOT fixtures - they are regular functions.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

from innkeep.domain.models import Payment, PaymentStatus, Reservation, ReservationStatus, Room

NOW = datetime(2026, 3, 10, 4, 0, tzinfo=timezone.utc)  # 12:00 in Asia/Manila


def make_room(
    name: str = "Deluxe",
    available: int = 1,
    occupied: int = 0,
    maintenance: bool = False,
    status: str = "available",
    room_id: str | None = None,
) -> Room:
    return Room(
        id=room_id or str(uuid4()),
        name=name,
        available=available,
        occupied=occupied,
        maintenance=maintenance,
        status=status,
        price=Decimal("2500.00"),
        guest_capacity=2,
        features=["wifi"],
    )


def make_reservation(
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    user_name: str = "alice",
    check_in: date = date(2026, 3, 10),
    check_out: date = date(2026, 3, 12),
    created_at: datetime = NOW,
    room_id: str = "room-1",
    room_name: str = "Deluxe",
    reservation_id: str | None = None,
) -> Reservation:
    return Reservation(
        id=reservation_id or str(uuid4()),
        room_id=room_id,
        room_name=room_name,
        user_name=user_name,
        check_in=check_in,
        check_out=check_out,
        guest_count=2,
        total_amount=Decimal("5000.00"),
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )


def make_payment(
    reservation_id: str,
    status: PaymentStatus = PaymentStatus.COMPLETED,
    amount: Decimal = Decimal("5000.00"),
) -> Payment:
    return Payment(
        id=str(uuid4()),
        reservation_id=reservation_id,
        amount=amount,
        method="gcash",
        status=status,
        payment_reference="REF-1",
        created_at=NOW,
        transaction_id="REF-1",
        currency="PHP",
    )


def mock_txn(mock_txn_fn: MagicMock) -> MagicMock:
    """Wire a patched txn() so ``with txn() as cur`` yields a MagicMock cursor."""
    cur = MagicMock()
    mock_txn_fn.return_value.__enter__.return_value = cur
    mock_txn_fn.return_value.__exit__.return_value = False
    return cur
