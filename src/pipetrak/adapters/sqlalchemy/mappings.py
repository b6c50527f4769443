"""SQLAlchemy mapping metadata for the pipetrak domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from pipetrak.domain.model import (
    Area,
    Component,
    ComponentType,
    Drawing,
    FieldWeld,
    MetadataType,
    NdeResult,
    Project,
    System,
    TestPackage,
    Welder,
    WeldType,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Projects and reference data --------------------------------------------------

project_table = Table(
    "projects",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("description", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
)


def _reference_table(name: str) -> Table:
    return Table(
        name,
        mapper_registry.metadata,
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column(
            "project_id",
            UUIDColumnType,
            ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("name", String, nullable=False),
        Column("description", String, nullable=True),
        UniqueConstraint("project_id", "name"),
    )


area_table = _reference_table("areas")
system_table = _reference_table("systems")
test_package_table = _reference_table("test_packages")

REFERENCE_TABLES: Final[dict[MetadataType, Table]] = {
    MetadataType.AREA: area_table,
    MetadataType.SYSTEM: system_table,
    MetadataType.TEST_PACKAGE: test_package_table,
}

welder_table = Table(
    "welders",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "project_id", UUIDColumnType, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    ),
    Column("stencil", String, nullable=False),
    Column("stencil_norm", String, nullable=False),
    Column("name", String, nullable=False),
    UniqueConstraint("project_id", "stencil_norm"),
)

# Drawings and tracked records --------------------------------------------------

drawing_table = Table(
    "drawings",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "project_id", UUIDColumnType, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    ),
    Column("drawing_no_raw", String, nullable=False),
    Column("drawing_no_norm", String, nullable=False),
    Column("title", String, nullable=True),
    Column("area_id", UUIDColumnType, ForeignKey("areas.id"), nullable=True),
    Column("system_id", UUIDColumnType, ForeignKey("systems.id"), nullable=True),
    Column("test_package_id", UUIDColumnType, ForeignKey("test_packages.id"), nullable=True),
    UniqueConstraint("project_id", "drawing_no_norm"),
)

component_table = Table(
    "components",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "project_id", UUIDColumnType, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    ),
    Column("drawing_id", UUIDColumnType, ForeignKey("drawings.id"), nullable=True),
    Column("component_type", Enum(ComponentType, native_enum=False), nullable=False),
    Column("identity_key", JSON, nullable=False),
    Column("identity_token", String, nullable=False),
    Column("area_id", UUIDColumnType, ForeignKey("areas.id"), nullable=True),
    Column("system_id", UUIDColumnType, ForeignKey("systems.id"), nullable=True),
    Column("test_package_id", UUIDColumnType, ForeignKey("test_packages.id"), nullable=True),
    Column("attributes", JSON, nullable=False),
    Column("current_milestones", JSON, nullable=False),
    Column("percent_complete", Float, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("project_id", "component_type", "identity_token"),
    Index(None, "drawing_id"),
)

field_weld_table = Table(
    "field_welds",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "project_id", UUIDColumnType, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    ),
    Column("drawing_id", UUIDColumnType, ForeignKey("drawings.id"), nullable=False),
    Column("weld_number", String, nullable=False),
    Column("weld_type", Enum(WeldType, native_enum=False), nullable=False),
    Column("base_metal", String, nullable=True),
    Column("weld_size", String, nullable=True),
    Column("schedule", String, nullable=True),
    Column("nde_result", Enum(NdeResult, native_enum=False), nullable=True),
    Column("current_milestones", JSON, nullable=False),
    Column("percent_complete", Float, nullable=False),
    Column("welder_id", UUIDColumnType, ForeignKey("welders.id"), nullable=True),
    Column("date_welded", Date, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("project_id", "drawing_id", "weld_number"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Project, project_table)
    mapper_registry.map_imperatively(Area, area_table)
    mapper_registry.map_imperatively(System, system_table)
    mapper_registry.map_imperatively(TestPackage, test_package_table)
    mapper_registry.map_imperatively(Welder, welder_table)
    mapper_registry.map_imperatively(Drawing, drawing_table)
    mapper_registry.map_imperatively(Component, component_table)
    mapper_registry.map_imperatively(FieldWeld, field_weld_table)

    configure_mappers()
    return mapper_registry
