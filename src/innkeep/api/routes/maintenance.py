"""Maintenance endpoints.

POST /maintenance/normalize-reservations → repair inconsistent statuses
"""

from fastapi import APIRouter

from innkeep.domain.reconciliation import normalize_reservations
from innkeep.observability.correlation import get_correlation_id
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/normalize-reservations")
def normalize_reservations_route() -> dict:
    """Repair paid cancellations and overdue paid check-outs.

    Safe to re-run; a second call reports zero fixes.
    """
    logger.info(
        "normalize-reservations requested",
        extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
    )
    return normalize_reservations()
