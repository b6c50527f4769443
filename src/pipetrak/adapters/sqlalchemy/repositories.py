"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, Any, Final

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite

from pipetrak.adapters.sqlalchemy.mappings import (
    REFERENCE_TABLES,
    component_table,
    drawing_table,
    field_weld_table,
    project_table,
    welder_table,
)
from pipetrak.domain.model import (
    Component,
    Drawing,
    FieldWeld,
    MetadataType,
    Project,
    ReferenceEntity,
    Welder,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence
    from datetime import date
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.dml import Insert

    from pipetrak.domain.model import ComponentType, Entity
    from pipetrak.domain.model.milestones import MilestonePayload
    from pipetrak.domain.ports.persistence import ComponentNaturalKey, WeldNaturalKey

# Keeps IN lists below the bound-parameter limit of older SQLite builds.
LOOKUP_CHUNK_SIZE: Final[int] = 500


def _insert_or_skip_statement(session: Session, table: Table) -> Insert:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite.insert(table).on_conflict_do_nothing()
    # MySQL and MariaDB
    return insert(table).prefix_with("IGNORE")


def _row(table: Table, entity: Entity) -> dict[str, Any]:
    return {column.key: getattr(entity, column.key) for column in table.columns}


def _chunks[T](values: Iterable[T]) -> Iterable[tuple[T, ...]]:
    return batched(values, LOOKUP_CHUNK_SIZE)


class SqlAlchemyNaturalKeyRepository[TEntity: Entity, TKey]:
    """Shared insert-or-skip write path for project-scoped natural keys."""

    table: Table

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert_or_skip(self, entities: Sequence[TEntity]) -> None:
        if not entities:
            return
        rows = [_row(self.table, entity) for entity in entities]
        self.session.execute(_insert_or_skip_statement(self.session, self.table), rows)


class SqlAlchemyProjectRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, project: Project) -> None:
        self.session.add(project)

    def get(self, project_id: UUID) -> Project | None:
        stmt = select(Project).where(project_table.c.id == project_id)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyReferenceRepository(SqlAlchemyNaturalKeyRepository[ReferenceEntity, str]):
    """Areas, systems and test packages share one table shape, keyed by name."""

    def __init__(
        self, session: Session, metadata_type: MetadataType, entity_cls: type[ReferenceEntity]
    ) -> None:
        super().__init__(session)
        self.metadata_type = metadata_type
        self.table = REFERENCE_TABLES[metadata_type]
        self._entity_cls = entity_cls

    def natural_key(self, entity: ReferenceEntity) -> str:
        return entity.name

    def find_ids(self, project_id: UUID, keys: Collection[str]) -> dict[str, UUID]:
        found: dict[str, UUID] = {}
        for chunk in _chunks(keys):
            stmt = (
                select(self.table.c.name, self.table.c.id)
                .where(self.table.c.project_id == project_id)
                .where(self.table.c.name.in_(chunk))
            )
            found.update({name: id_ for name, id_ in self.session.execute(stmt)})
        return found

    def list_for_project(self, project_id: UUID) -> list[ReferenceEntity]:
        stmt = (
            select(self._entity_cls)
            .where(self.table.c.project_id == project_id)
            .order_by(self.table.c.name)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyWelderRepository(SqlAlchemyNaturalKeyRepository[Welder, str]):
    table = welder_table

    def natural_key(self, entity: Welder) -> str:
        return entity.stencil_norm

    def find_ids(self, project_id: UUID, keys: Collection[str]) -> dict[str, UUID]:
        found: dict[str, UUID] = {}
        for chunk in _chunks(keys):
            stmt = (
                select(welder_table.c.stencil_norm, welder_table.c.id)
                .where(welder_table.c.project_id == project_id)
                .where(welder_table.c.stencil_norm.in_(chunk))
            )
            found.update({stencil: id_ for stencil, id_ in self.session.execute(stmt)})
        return found

    def list_for_project(self, project_id: UUID) -> list[Welder]:
        stmt = select(Welder).where(welder_table.c.project_id == project_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyDrawingRepository(SqlAlchemyNaturalKeyRepository[Drawing, str]):
    table = drawing_table

    def natural_key(self, entity: Drawing) -> str:
        return entity.drawing_no_norm

    def find_ids(self, project_id: UUID, keys: Collection[str]) -> dict[str, UUID]:
        found: dict[str, UUID] = {}
        for chunk in _chunks(keys):
            stmt = (
                select(drawing_table.c.drawing_no_norm, drawing_table.c.id)
                .where(drawing_table.c.project_id == project_id)
                .where(drawing_table.c.drawing_no_norm.in_(chunk))
            )
            found.update({drawing_no: id_ for drawing_no, id_ in self.session.execute(stmt)})
        return found

    def list_for_project(self, project_id: UUID) -> list[Drawing]:
        stmt = (
            select(Drawing)
            .where(drawing_table.c.project_id == project_id)
            .order_by(drawing_table.c.drawing_no_norm)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyComponentRepository(
    SqlAlchemyNaturalKeyRepository[Component, "ComponentNaturalKey"]
):
    table = component_table

    def natural_key(self, entity: Component) -> ComponentNaturalKey:
        return (entity.component_type, entity.identity_token)

    def find_ids(
        self, project_id: UUID, keys: Collection[ComponentNaturalKey]
    ) -> dict[ComponentNaturalKey, UUID]:
        wanted = set(keys)
        found: dict[ComponentNaturalKey, UUID] = {}
        for chunk in _chunks({token for _, token in wanted}):
            stmt = (
                select(
                    component_table.c.component_type,
                    component_table.c.identity_token,
                    component_table.c.id,
                )
                .where(component_table.c.project_id == project_id)
                .where(component_table.c.identity_token.in_(chunk))
            )
            for component_type, token, id_ in self.session.execute(stmt):
                if (component_type, token) in wanted:
                    found[(component_type, token)] = id_
        return found

    def get_many(self, ids: Collection[UUID]) -> list[Component]:
        records: list[Component] = []
        for chunk in _chunks(ids):
            stmt = select(Component).where(component_table.c.id.in_(chunk))
            records.extend(self.session.execute(stmt).scalars())
        return records

    def update_milestones(self, updates: Sequence[tuple[UUID, MilestonePayload, float]]) -> None:
        if not updates:
            return
        self.session.execute(
            update(Component),
            [
                {"id": id_, "current_milestones": milestones, "percent_complete": percent}
                for id_, milestones, percent in updates
            ],
        )

    def list_for_project(
        self, project_id: UUID, component_type: ComponentType | None = None
    ) -> list[Component]:
        stmt = select(Component).where(component_table.c.project_id == project_id)
        if component_type is not None:
            stmt = stmt.where(component_table.c.component_type == component_type)
        stmt = stmt.order_by(component_table.c.component_type, component_table.c.identity_token)
        return list(self.session.execute(stmt).scalars())

    def count(self, project_id: UUID, component_type: ComponentType | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(component_table)
            .where(component_table.c.project_id == project_id)
        )
        if component_type is not None:
            stmt = stmt.where(component_table.c.component_type == component_type)
        return self.session.execute(stmt).scalar_one()


class SqlAlchemyFieldWeldRepository(SqlAlchemyNaturalKeyRepository[FieldWeld, "WeldNaturalKey"]):
    table = field_weld_table

    def natural_key(self, entity: FieldWeld) -> WeldNaturalKey:
        return (entity.drawing_id, entity.weld_number)

    def find_ids(
        self, project_id: UUID, keys: Collection[WeldNaturalKey]
    ) -> dict[WeldNaturalKey, UUID]:
        wanted = set(keys)
        found: dict[WeldNaturalKey, UUID] = {}
        for chunk in _chunks({weld_number for _, weld_number in wanted}):
            stmt = (
                select(
                    field_weld_table.c.drawing_id,
                    field_weld_table.c.weld_number,
                    field_weld_table.c.id,
                )
                .where(field_weld_table.c.project_id == project_id)
                .where(field_weld_table.c.weld_number.in_(chunk))
            )
            for drawing_id, weld_number, id_ in self.session.execute(stmt):
                if (drawing_id, weld_number) in wanted:
                    found[(drawing_id, weld_number)] = id_
        return found

    def get_many(self, ids: Collection[UUID]) -> list[FieldWeld]:
        records: list[FieldWeld] = []
        for chunk in _chunks(ids):
            stmt = select(FieldWeld).where(field_weld_table.c.id.in_(chunk))
            records.extend(self.session.execute(stmt).scalars())
        return records

    def update_milestones(self, updates: Sequence[tuple[UUID, MilestonePayload, float]]) -> None:
        if not updates:
            return
        self.session.execute(
            update(FieldWeld),
            [
                {"id": id_, "current_milestones": milestones, "percent_complete": percent}
                for id_, milestones, percent in updates
            ],
        )

    def assign_welders(
        self, assignments: Sequence[tuple[UUID, UUID | None, date | None]]
    ) -> None:
        if not assignments:
            return
        self.session.execute(
            update(FieldWeld),
            [
                {"id": weld_id, "welder_id": welder_id, "date_welded": welded_on}
                for weld_id, welder_id, welded_on in assignments
            ],
        )

    def list_for_project(self, project_id: UUID) -> list[FieldWeld]:
        stmt = (
            select(FieldWeld)
            .where(field_weld_table.c.project_id == project_id)
            .order_by(field_weld_table.c.drawing_id, field_weld_table.c.weld_number)
        )
        return list(self.session.execute(stmt).scalars())
