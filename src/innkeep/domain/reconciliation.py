"""Reservation reconciliation - time-driven and on-demand status repair.

run_auto_checkout(): the scheduled sweep. Paid confirmed stays whose
check-out day is before today become checked_out. Pending bookings past
their dates are left alone.

normalize_reservations(): on-demand repair of two inconsistency classes:
- cancelled but paid  -> pending
- confirmed, paid and past check-out -> checked_out (missed sweeps)

Both are single bulk UPDATEs guarded on the current status, so re-running
them changes nothing.
"""

from __future__ import annotations

from datetime import date, datetime

from innkeep.infra.db import txn
from innkeep.infra.repositories.reservations_repository import (
    auto_checkout_due,
    restore_paid_cancellations,
)
from innkeep.infra.settings import Settings, get_settings
from innkeep.infra.time import local_today, utc_now
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)


def run_auto_checkout(
    *,
    today: date | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> dict:
    """Check out every paid confirmed reservation whose stay has ended.

    Args:
        today: Local calendar date to compare check_out against.
        now: Timestamp for updated_at.
        settings: Optional settings override.

    Returns:
        {"updated": number of reservations checked out}
    """
    settings = settings or get_settings()
    now = now or utc_now()
    today = today or local_today(settings.hotel_timezone, now)

    with txn() as cur:
        updated_ids = auto_checkout_due(cur, today=today, now=now)

    if updated_ids:
        logger.info(
            "auto-checkout sweep updated reservations",
            extra={
                "extra_fields": safe_log_context(today=today, updated=len(updated_ids))
            },
        )
    return {"updated": len(updated_ids)}


def normalize_reservations(
    *,
    today: date | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> dict:
    """Repair inconsistent reservation statuses in one transaction.

    Returns:
        {"fixedCancelledToPending": int, "fixedAutoCheckedOut": int}
    """
    settings = settings or get_settings()
    now = now or utc_now()
    today = today or local_today(settings.hotel_timezone, now)

    with txn() as cur:
        restored = restore_paid_cancellations(cur, now=now)
        checked_out = auto_checkout_due(cur, today=today, now=now)

    result = {
        "fixedCancelledToPending": len(restored),
        "fixedAutoCheckedOut": len(checked_out),
    }
    logger.info(
        "reservations normalized",
        extra={"extra_fields": safe_log_context(today=today, **result)},
    )
    return result
