"""Initial schema: projects, reference data, drawings, components and field welds.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

COMPONENT_TYPES = (
    "SPOOL",
    "FIELD_WELD",
    "VALVE",
    "INSTRUMENT",
    "SUPPORT",
    "PIPE",
    "FITTING",
    "FLANGE",
    "TUBING",
    "HOSE",
    "MISC_COMPONENT",
    "THREADED_PIPE",
)
WELD_TYPES = ("BUTT", "SOCKET", "FILLET", "TAPPED")


def _project_fk(table: str) -> sa.Column[sa.Uuid]:
    return sa.Column(
        "project_id",
        sa.Uuid(),
        sa.ForeignKey(
            "projects.id", name=f"fk_{table}_project_id_projects", ondelete="CASCADE"
        ),
        nullable=False,
    )


def _reference_fks(table: str) -> list[sa.Column[sa.Uuid]]:
    return [
        sa.Column(
            "area_id",
            sa.Uuid(),
            sa.ForeignKey("areas.id", name=f"fk_{table}_area_id_areas"),
            nullable=True,
        ),
        sa.Column(
            "system_id",
            sa.Uuid(),
            sa.ForeignKey("systems.id", name=f"fk_{table}_system_id_systems"),
            nullable=True,
        ),
        sa.Column(
            "test_package_id",
            sa.Uuid(),
            sa.ForeignKey("test_packages.id", name=f"fk_{table}_test_package_id_test_packages"),
            nullable=True,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
    )

    for table in ("areas", "systems", "test_packages"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            _project_fk(table),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("description", sa.String(), nullable=True),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
            sa.UniqueConstraint("project_id", "name", name=f"uq_{table}_project_id_name"),
        )

    op.create_table(
        "welders",
        sa.Column("id", sa.Uuid(), nullable=False),
        _project_fk("welders"),
        sa.Column("stencil", sa.String(), nullable=False),
        sa.Column("stencil_norm", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_welders"),
        sa.UniqueConstraint(
            "project_id", "stencil_norm", name="uq_welders_project_id_stencil_norm"
        ),
    )

    op.create_table(
        "drawings",
        sa.Column("id", sa.Uuid(), nullable=False),
        _project_fk("drawings"),
        sa.Column("drawing_no_raw", sa.String(), nullable=False),
        sa.Column("drawing_no_norm", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        *_reference_fks("drawings"),
        sa.PrimaryKeyConstraint("id", name="pk_drawings"),
        sa.UniqueConstraint(
            "project_id", "drawing_no_norm", name="uq_drawings_project_id_drawing_no_norm"
        ),
    )

    op.create_table(
        "components",
        sa.Column("id", sa.Uuid(), nullable=False),
        _project_fk("components"),
        sa.Column(
            "drawing_id",
            sa.Uuid(),
            sa.ForeignKey("drawings.id", name="fk_components_drawing_id_drawings"),
            nullable=True,
        ),
        sa.Column(
            "component_type",
            sa.Enum(*COMPONENT_TYPES, name="componenttype", native_enum=False),
            nullable=False,
        ),
        sa.Column("identity_key", sa.JSON(), nullable=False),
        sa.Column("identity_token", sa.String(), nullable=False),
        *_reference_fks("components"),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("current_milestones", sa.JSON(), nullable=False),
        sa.Column("percent_complete", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_components"),
        sa.UniqueConstraint(
            "project_id",
            "component_type",
            "identity_token",
            name="uq_components_project_id_component_type_identity_token",
        ),
    )
    op.create_index("ix_components_drawing_id", "components", ["drawing_id"])

    op.create_table(
        "field_welds",
        sa.Column("id", sa.Uuid(), nullable=False),
        _project_fk("field_welds"),
        sa.Column(
            "drawing_id",
            sa.Uuid(),
            sa.ForeignKey("drawings.id", name="fk_field_welds_drawing_id_drawings"),
            nullable=False,
        ),
        sa.Column("weld_number", sa.String(), nullable=False),
        sa.Column(
            "weld_type",
            sa.Enum(*WELD_TYPES, name="weldtype", native_enum=False),
            nullable=False,
        ),
        sa.Column("base_metal", sa.String(), nullable=True),
        sa.Column("current_milestones", sa.JSON(), nullable=False),
        sa.Column("percent_complete", sa.Float(), nullable=False),
        sa.Column(
            "welder_id",
            sa.Uuid(),
            sa.ForeignKey("welders.id", name="fk_field_welds_welder_id_welders"),
            nullable=True,
        ),
        sa.Column("date_welded", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_field_welds"),
        sa.UniqueConstraint(
            "project_id",
            "drawing_id",
            "weld_number",
            name="uq_field_welds_project_id_drawing_id_weld_number",
        ),
    )


def downgrade() -> None:
    op.drop_table("field_welds")
    op.drop_index("ix_components_drawing_id", table_name="components")
    op.drop_table("components")
    op.drop_table("drawings")
    op.drop_table("welders")
    for table in ("test_packages", "systems", "areas"):
        op.drop_table(table)
