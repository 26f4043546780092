"""Payment endpoints.

POST /payments                   → record a payment (201)
GET  /payments/reservation/{id}  → payments of a reservation, newest first

Recording a payment never changes the reservation's status; staff confirm
explicitly.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field

from innkeep.domain.errors import ReservationNotFoundError
from innkeep.domain.models import PaymentStatus
from innkeep.infra.db import txn
from innkeep.infra.repositories.payments_repository import insert_payment, list_payments
from innkeep.infra.repositories.reservations_repository import get_reservation
from innkeep.observability.correlation import get_correlation_id
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


class CreatePaymentRequest(BaseModel):
    reservation_id: UUID
    amount: Decimal = Field(..., gt=0)
    method: str = Field(..., min_length=1)
    payment_reference: str = Field(..., min_length=1)
    status: PaymentStatus = PaymentStatus.COMPLETED
    transaction_id: str | None = None
    currency: str = Field("PHP", min_length=3, max_length=3)


@router.post("", status_code=201)
def create_payment(body: CreatePaymentRequest) -> dict:
    reservation_id = str(body.reservation_id)
    with txn() as cur:
        if get_reservation(cur, reservation_id) is None:
            raise ReservationNotFoundError(reservation_id)
        payment = insert_payment(
            cur,
            reservation_id=reservation_id,
            amount=body.amount,
            method=body.method.strip(),
            status=body.status,
            payment_reference=body.payment_reference,
            transaction_id=body.transaction_id,
            currency=body.currency.upper(),
        )

    logger.info(
        "payment recorded",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                reservation_id=reservation_id,
                payment_id=payment.id,
                status=payment.status,
            )
        },
    )
    return {"message": "Payment created successfully", "payment": payment.to_dict()}


@router.get("/reservation/{reservation_id}")
def get_reservation_payments(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
) -> list[dict]:
    with txn() as cur:
        payments = list_payments(cur, str(reservation_id))
    return [p.to_dict() for p in payments]
