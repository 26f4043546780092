"""Reservation lifecycle - staff and guest driven status transitions.

    pending   -> confirmed | rejected | cancelled
    confirmed -> cancelled | checked_out

Cancellation is only possible within the cancellation window after the
booking was created. Check-out requires a completed payment and is
idempotent. checked_out, cancelled and rejected are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from innkeep.infra.db import txn
from innkeep.infra.repositories.payments_repository import has_completed_payment
from innkeep.infra.repositories.reservations_repository import (
    get_reservation,
    set_reservation_status,
)
from innkeep.infra.settings import Settings, get_settings
from innkeep.infra.time import utc_now
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

from .errors import (
    CancellationWindowExpiredError,
    InvalidTransitionError,
    PaymentRequiredError,
    ReservationNotFoundError,
)
from .models import TERMINAL_STATUSES, Reservation, ReservationStatus

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {
            ReservationStatus.CONFIRMED,
            ReservationStatus.REJECTED,
            ReservationStatus.CANCELLED,
        }
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.CANCELLED, ReservationStatus.CHECKED_OUT}
    ),
    **{status: frozenset() for status in TERMINAL_STATUSES},
}


@dataclass(frozen=True)
class CheckoutResult:
    reservation: Reservation
    already_checked_out: bool


def cancellation_window_open(
    created_at: datetime | None,
    now: datetime,
    window: timedelta,
) -> bool:
    """True while now <= created_at + window. Unknown creation time is closed."""
    if created_at is None:
        return False
    return now - created_at <= window


def update_status(
    reservation_id: str,
    target: ReservationStatus,
    *,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> Reservation:
    """Move a reservation to a new status.

    Setting the current status again is a no-op. A checked_out target is
    handled by check_out().

    Raises:
        ReservationNotFoundError: Unknown reservation.
        InvalidTransitionError: Transition not allowed from current status.
        CancellationWindowExpiredError: Cancelling after the window closed.
        PaymentRequiredError: Checking out without a completed payment.
    """
    if target == ReservationStatus.CHECKED_OUT:
        return check_out(reservation_id, now=now).reservation

    settings = settings or get_settings()
    now = now or utc_now()

    with txn() as cur:
        reservation = get_reservation(cur, reservation_id, lock=True)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)

        current = reservation.status
        if current == target:
            return reservation

        if target not in ALLOWED_TRANSITIONS[current]:
            if target == ReservationStatus.CANCELLED:
                raise InvalidTransitionError(
                    current.value,
                    target.value,
                    "Only pending or confirmed reservations can be cancelled",
                )
            raise InvalidTransitionError(current.value, target.value)

        if target == ReservationStatus.CANCELLED:
            window = timedelta(minutes=settings.cancellation_window_minutes)
            if not cancellation_window_open(reservation.created_at, now, window):
                raise CancellationWindowExpiredError(settings.cancellation_window_minutes)

        updated = set_reservation_status(cur, reservation_id, target, now=now)

    logger.info(
        "reservation status changed",
        extra={
            "extra_fields": safe_log_context(
                reservation_id=reservation_id,
                from_status=current,
                to_status=target,
            )
        },
    )
    return updated


def check_out(reservation_id: str, *, now: datetime | None = None) -> CheckoutResult:
    """Check out a confirmed, paid reservation.

    Idempotent: an already checked-out reservation is returned unchanged.

    Raises:
        ReservationNotFoundError: Unknown reservation.
        InvalidTransitionError: Status is not confirmed.
        PaymentRequiredError: No completed payment exists.
    """
    now = now or utc_now()

    with txn() as cur:
        reservation = get_reservation(cur, reservation_id, lock=True)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)

        if reservation.status == ReservationStatus.CHECKED_OUT:
            return CheckoutResult(reservation=reservation, already_checked_out=True)

        if reservation.status != ReservationStatus.CONFIRMED:
            raise InvalidTransitionError(
                reservation.status.value,
                ReservationStatus.CHECKED_OUT.value,
                "Only confirmed reservations can be checked out",
            )

        if not has_completed_payment(cur, reservation_id):
            raise PaymentRequiredError()

        updated = set_reservation_status(
            cur, reservation_id, ReservationStatus.CHECKED_OUT, now=now
        )

    logger.info(
        "reservation checked out",
        extra={"extra_fields": safe_log_context(reservation_id=reservation_id)},
    )
    return CheckoutResult(reservation=updated, already_checked_out=False)
