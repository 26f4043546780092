"""Booking core schema: rooms, reservations, payments (SQL-only).

Reservations reference rooms by id. check_in < check_out is enforced by
the database as well as by admission.

Revision ID: 001_booking_core_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from pathlib import Path

from alembic import op


# revision identifiers, used by Alembic.
revision = "001_booking_core_schema"
down_revision = None
branch_labels = None
depends_on = None


def _read_sql() -> str:
    sql_path = Path(__file__).resolve().parents[1] / "sql" / "001_booking_core.sql"
    return sql_path.read_text(encoding="utf-8")


def upgrade() -> None:
    sql = _read_sql()
    # Raw execution to support the DO $$ ... $$ block.
    conn = op.get_bind()
    conn.exec_driver_sql(sql)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payments")
    op.execute("DROP TABLE IF EXISTS reservations")
    op.execute("DROP TABLE IF EXISTS rooms")
    op.execute("DROP TYPE IF EXISTS payment_status")
    op.execute("DROP TYPE IF EXISTS reservation_status")
