"""Core records and the closed status vocabularies.

Reservations reference rooms by id; ``room_name`` on a Reservation is a
display copy joined from the rooms table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from .errors import InvalidArgumentError


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    CHECKED_OUT = "checked_out"

    @classmethod
    def parse(cls, value: str) -> "ReservationStatus":
        """Parse a client-supplied status.

        Case-insensitive. The legacy labels "checked out" and "completed"
        both mean CHECKED_OUT.

        Raises:
            InvalidArgumentError: For any other value.
        """
        normalized = str(value or "").strip().lower()
        normalized = _STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidArgumentError(f"Unknown reservation status: {value!r}") from None


_STATUS_ALIASES = {
    "checked out": ReservationStatus.CHECKED_OUT.value,
    "checked-out": ReservationStatus.CHECKED_OUT.value,
    "completed": ReservationStatus.CHECKED_OUT.value,
}

# Paid reservations in these statuses hold inventory for availability queries.
OCCUPYING_STATUSES = frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_OUT})

# Statuses considered by the admission capacity check.
ADMISSION_STATUSES = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_OUT}
)

TERMINAL_STATUSES = frozenset(
    {ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED, ReservationStatus.REJECTED}
)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


def status_values(statuses) -> list[str]:
    """Sorted string values, for SQL ``= ANY(%s)`` parameters."""
    return sorted(s.value for s in statuses)


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    available: int = 0
    occupied: int = 0
    maintenance: bool = False
    status: str = "available"
    price: Decimal | None = None
    guest_capacity: int | None = None
    features: list[str] = field(default_factory=list)

    @property
    def capacity(self) -> int:
        """Interchangeable units of this room type; never below 1."""
        units = max(0, self.available) + max(0, self.occupied)
        return units if units > 0 else 1

    @property
    def under_maintenance(self) -> bool:
        return self.maintenance or (self.status or "").strip().lower() == "maintenance"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "capacity": self.guest_capacity,
            "available": self.available,
            "occupied": self.occupied,
            "maintenance": self.maintenance,
            "status": self.status,
            "features": list(self.features),
            "totalUnits": self.capacity,
        }


@dataclass(frozen=True)
class Payment:
    id: str
    reservation_id: str
    amount: Decimal
    method: str
    status: PaymentStatus
    payment_reference: str
    created_at: datetime
    transaction_id: str | None = None
    currency: str = "PHP"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reservation_id": self.reservation_id,
            "amount": self.amount,
            "method": self.method,
            "status": self.status.value,
            "payment_reference": self.payment_reference,
            "transaction_id": self.transaction_id,
            "currency": self.currency,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Reservation:
    id: str
    room_id: str
    room_name: str
    user_name: str
    check_in: date
    check_out: date
    guest_count: int
    total_amount: Decimal
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime | None = None
    special_requests: str = ""
    extra_beds: int | None = None
    extra_persons: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "room_id": self.room_id,
            "room_name": self.room_name,
            "user_name": self.user_name,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "guest_count": self.guest_count,
            "total_amount": self.total_amount,
            "special_requests": self.special_requests,
            "extra_beds": self.extra_beds,
            "extra_persons": self.extra_persons,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
