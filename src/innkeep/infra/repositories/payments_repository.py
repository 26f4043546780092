"""Payments repository - persistence for payment records.

Uses raw SQL with psycopg2 (no ORM). Only completed payments matter to
availability and the reservation lifecycle.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from psycopg2.extensions import cursor as PgCursor

from innkeep.domain.models import Payment, PaymentStatus

_PAYMENT_COLUMNS = """
    id, reservation_id, amount, method, status, payment_reference,
    transaction_id, currency, created_at
"""


def _row_to_payment(row: tuple) -> Payment:
    return Payment(
        id=str(row[0]),
        reservation_id=str(row[1]),
        amount=row[2],
        method=row[3],
        status=PaymentStatus(row[4]),
        payment_reference=row[5],
        transaction_id=row[6],
        currency=row[7],
        created_at=row[8],
    )


def insert_payment(
    cur: PgCursor,
    *,
    reservation_id: str,
    amount: Decimal,
    method: str,
    status: PaymentStatus,
    payment_reference: str,
    transaction_id: str | None = None,
    currency: str = "PHP",
) -> Payment:
    """Insert a payment row.

    transaction_id defaults to payment_reference when not supplied.
    """
    cur.execute(
        f"""
        INSERT INTO payments (
            reservation_id, amount, method, status,
            payment_reference, transaction_id, currency
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING {_PAYMENT_COLUMNS}
        """,
        (
            reservation_id,
            amount,
            method,
            status.value,
            payment_reference,
            transaction_id or payment_reference,
            currency,
        ),
    )
    return _row_to_payment(cur.fetchone())


def list_payments(cur: PgCursor, reservation_id: str) -> list[Payment]:
    """Payments of one reservation, newest first."""
    cur.execute(
        f"""
        SELECT {_PAYMENT_COLUMNS}
        FROM payments
        WHERE reservation_id = %s
        ORDER BY created_at DESC
        """,
        (reservation_id,),
    )
    return [_row_to_payment(row) for row in cur.fetchall()]


def list_payments_for(cur: PgCursor, reservation_ids: Sequence[str]) -> dict[str, list[Payment]]:
    """Payments grouped by reservation id, newest first within each group."""
    grouped: dict[str, list[Payment]] = {rid: [] for rid in reservation_ids}
    if not reservation_ids:
        return grouped
    cur.execute(
        f"""
        SELECT {_PAYMENT_COLUMNS}
        FROM payments
        WHERE reservation_id = ANY(%s::uuid[])
        ORDER BY created_at DESC
        """,
        (list(reservation_ids),),
    )
    for row in cur.fetchall():
        payment = _row_to_payment(row)
        grouped.setdefault(payment.reservation_id, []).append(payment)
    return grouped


def has_completed_payment(cur: PgCursor, reservation_id: str) -> bool:
    cur.execute(
        """
        SELECT 1 FROM payments
        WHERE reservation_id = %s AND status = %s
        LIMIT 1
        """,
        (reservation_id, PaymentStatus.COMPLETED.value),
    )
    return cur.fetchone() is not None


def paid_reservation_ids(cur: PgCursor, reservation_ids: Sequence[str]) -> set[str]:
    """Subset of reservation_ids with at least one completed payment."""
    if not reservation_ids:
        return set()
    cur.execute(
        """
        SELECT DISTINCT reservation_id
        FROM payments
        WHERE reservation_id = ANY(%s::uuid[]) AND status = %s
        """,
        (list(reservation_ids), PaymentStatus.COMPLETED.value),
    )
    return {str(row[0]) for row in cur.fetchall()}


def completed_revenue(cur: PgCursor) -> Decimal:
    cur.execute(
        "SELECT COALESCE(SUM(amount), 0) FROM payments WHERE status = %s",
        (PaymentStatus.COMPLETED.value,),
    )
    return Decimal(cur.fetchone()[0])
