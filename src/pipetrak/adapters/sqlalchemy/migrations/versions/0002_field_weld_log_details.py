"""Weld log details on field welds: size, schedule and NDE result.

Revision ID: 0002_field_weld_log_details
Revises: 0001_initial_schema
Create Date: 2026-10-26 10:30:00

"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0002_field_weld_log_details"
down_revision: str | None = "0001_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

NDE_RESULTS = ("PASS", "FAIL", "PENDING")


def upgrade() -> None:
    with op.batch_alter_table("field_welds") as batch_op:
        batch_op.add_column(sa.Column("weld_size", sa.String(), nullable=True))
        batch_op.add_column(sa.Column("schedule", sa.String(), nullable=True))
        batch_op.add_column(
            sa.Column(
                "nde_result",
                sa.Enum(*NDE_RESULTS, name="nderesult", native_enum=False),
                nullable=True,
            )
        )


def downgrade() -> None:
    with op.batch_alter_table("field_welds") as batch_op:
        batch_op.drop_column("nde_result")
        batch_op.drop_column("schedule")
        batch_op.drop_column("weld_size")
