"""Booking endpoints.

POST /bookings                      → admit a booking as pending (201)
GET  /bookings                      → all bookings with payments
GET  /bookings/customer/{user_name} → one guest's bookings
GET  /bookings/{id}                 → single booking
PUT  /bookings/{id}                 → edit details (not status or dates)
PUT  /bookings/{id}/status          → staff/guest status transition
POST /bookings/{id}/checkout        → idempotent manual check-out
POST /bookings/auto-checkout        → run the auto-checkout sweep now
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Path
from pydantic import BaseModel, ConfigDict, Field

from innkeep.domain.admission import BookingRequest, submit_booking
from innkeep.domain.errors import InvalidArgumentError, ReservationNotFoundError
from innkeep.domain.lifecycle import check_out, update_status
from innkeep.domain.models import Reservation, ReservationStatus
from innkeep.domain.reconciliation import run_auto_checkout
from innkeep.infra.db import txn
from innkeep.infra.repositories.payments_repository import list_payments_for
from innkeep.infra.repositories.reservations_repository import (
    get_reservation,
    list_reservations,
    update_reservation_details,
)
from innkeep.infra.time import utc_now
from innkeep.observability.correlation import get_correlation_id
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class CreateBookingRequest(BaseModel):
    user_name: str = Field(..., min_length=1)
    room_name: str = Field(..., min_length=1)
    # Dates arrive as naive midnight; instants keep their offset so the
    # hotel-local calendar day is derived from them.
    check_in: datetime
    check_out: datetime
    guest_count: int = Field(..., ge=1)
    total_amount: Decimal = Field(..., gt=0)
    special_requests: str | None = None
    extra_beds: int | None = Field(None, ge=0)
    extra_persons: int | None = Field(None, ge=0)


class UpdateStatusRequest(BaseModel):
    status: str = Field(..., min_length=1)


class UpdateBookingRequest(BaseModel):
    """Editable booking details. Status and stay dates are not editable here."""

    model_config = ConfigDict(extra="forbid")

    special_requests: str | None = None
    guest_count: int | None = Field(None, ge=1)
    total_amount: Decimal | None = Field(None, gt=0)
    extra_beds: int | None = Field(None, ge=0)
    extra_persons: int | None = Field(None, ge=0)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _with_payments(reservations: list[Reservation]) -> list[dict]:
    with txn() as cur:
        payments = list_payments_for(cur, [r.id for r in reservations])
    return [
        {**r.to_dict(), "payments": [p.to_dict() for p in payments.get(r.id, [])]}
        for r in reservations
    ]


def _list_bookings(user_name: str | None = None) -> list[dict]:
    with txn() as cur:
        reservations = list_reservations(cur, user_name=user_name)
    return _with_payments(reservations)


# ── Routes ────────────────────────────────────────────────────────────────────


@router.post("", status_code=201)
def create_booking(body: CreateBookingRequest) -> dict:
    """Admit a booking as pending, or reject it with a specific reason."""
    reservation = submit_booking(
        BookingRequest(
            user_name=body.user_name,
            room_name=body.room_name,
            check_in=body.check_in,
            check_out=body.check_out,
            guest_count=body.guest_count,
            total_amount=body.total_amount,
            special_requests=body.special_requests or "",
            extra_beds=body.extra_beds,
            extra_persons=body.extra_persons,
        )
    )
    return {"message": "Booking created successfully", "booking": reservation.to_dict()}


@router.get("")
def list_all_bookings() -> list[dict]:
    """All bookings, newest first, each with its payments."""
    return _list_bookings()


@router.get("/customer/{user_name}")
def list_customer_bookings(
    user_name: str = Path(..., min_length=1, description="Guest user name"),
) -> list[dict]:
    return _list_bookings(user_name)


@router.post("/auto-checkout")
def trigger_auto_checkout() -> dict:
    """Run the auto-checkout sweep on demand.

    Returns {"updated": n}.
    """
    result = run_auto_checkout()
    logger.info(
        "on-demand auto-checkout completed",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), updated=result["updated"]
            )
        },
    )
    return result


@router.get("/{reservation_id}")
def get_booking(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
) -> dict:
    with txn() as cur:
        reservation = get_reservation(cur, str(reservation_id))
    if reservation is None:
        raise ReservationNotFoundError(str(reservation_id))
    return _with_payments([reservation])[0]


@router.put("/{reservation_id}/status")
def update_booking_status(
    body: UpdateStatusRequest,
    reservation_id: UUID = Path(..., description="Reservation UUID"),
) -> dict:
    """Change a booking's status.

    Cancelling is only allowed within the cancellation window after the
    booking was made.
    """
    target = ReservationStatus.parse(body.status)
    reservation = update_status(str(reservation_id), target)
    return {
        "message": "Booking status updated successfully",
        "booking": reservation.to_dict(),
    }


@router.post("/{reservation_id}/checkout")
def checkout_booking(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
) -> dict:
    """Check out a confirmed, paid booking. Repeating the call is harmless."""
    result = check_out(str(reservation_id))
    message = (
        "Already checked out" if result.already_checked_out else "Checked out successfully"
    )
    return {"message": message, "booking": result.reservation.to_dict()}


# Details that may be cleared back to "not given".
_NULLABLE_DETAILS = {"extra_beds", "extra_persons"}


@router.put("/{reservation_id}")
def update_booking(
    body: UpdateBookingRequest,
    reservation_id: UUID = Path(..., description="Reservation UUID"),
) -> dict:
    """Edit booking details such as special requests or guest count.

    Status changes go through PUT /bookings/{id}/status; stay dates cannot
    be edited. Unknown fields, including status and dates, are rejected.
    """
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise InvalidArgumentError("No fields to update")
    nulls = sorted(k for k, v in fields.items() if v is None and k not in _NULLABLE_DETAILS)
    if nulls:
        raise InvalidArgumentError(f"Fields cannot be set to null: {', '.join(nulls)}")

    with txn() as cur:
        reservation = update_reservation_details(
            cur, str(reservation_id), fields, now=utc_now()
        )
    if reservation is None:
        raise ReservationNotFoundError(str(reservation_id))

    logger.info(
        "booking details updated",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                reservation_id=reservation.id,
                fields=sorted(fields),
            )
        },
    )
    return {"message": "Booking updated successfully", "booking": reservation.to_dict()}
