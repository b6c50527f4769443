"""Ports for persisting the records an import produces.

The write stage only needs three capabilities from storage: batch lookup of
identifiers by natural key, insert-or-skip guarded by a uniqueness constraint,
and bulk updates of progress columns. Nothing here deletes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pipetrak.domain.model import (
    Component,
    ComponentType,
    Drawing,
    FieldWeld,
    Project,
    ReferenceEntity,
    Welder,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import date
    from uuid import UUID

    from pipetrak.domain.model import MetadataType
    from pipetrak.domain.model.milestones import MilestonePayload

type ComponentNaturalKey = tuple[ComponentType, str]
type WeldNaturalKey = tuple[UUID, str]


@runtime_checkable
class NaturalKeyRepository[TEntity, TKey](Protocol):
    """Insert-or-skip store addressed by a natural key within a project."""

    def natural_key(self, entity: TEntity) -> TKey: ...

    def find_ids(self, project_id: UUID, keys: Collection[TKey]) -> dict[TKey, UUID]: ...

    def insert_or_skip(self, entities: Sequence[TEntity]) -> None: ...


@runtime_checkable
class ProjectRepository(Protocol):
    def add(self, project: Project) -> None: ...

    def get(self, project_id: UUID) -> Project | None: ...


@runtime_checkable
class ReferenceRepository(NaturalKeyRepository[ReferenceEntity, str], Protocol):
    """Areas, systems or test packages keyed by name."""

    def list_for_project(self, project_id: UUID) -> list[ReferenceEntity]: ...


@runtime_checkable
class ReferenceLookup(Protocol):
    """Read-only name lookup across all reference types."""

    def find_reference_ids(
        self, project_id: UUID, metadata_type: MetadataType, names: Collection[str]
    ) -> dict[str, UUID]: ...


@runtime_checkable
class WelderRepository(NaturalKeyRepository[Welder, str], Protocol):
    def list_for_project(self, project_id: UUID) -> list[Welder]: ...


@runtime_checkable
class DrawingRepository(NaturalKeyRepository[Drawing, str], Protocol):
    def list_for_project(self, project_id: UUID) -> list[Drawing]: ...


@runtime_checkable
class ComponentRepository(NaturalKeyRepository[Component, ComponentNaturalKey], Protocol):
    def get_many(self, ids: Collection[UUID]) -> list[Component]: ...

    def update_milestones(
        self, updates: Sequence[tuple[UUID, MilestonePayload, float]]
    ) -> None: ...

    def list_for_project(
        self, project_id: UUID, component_type: ComponentType | None = None
    ) -> list[Component]: ...

    def count(self, project_id: UUID, component_type: ComponentType | None = None) -> int: ...


@runtime_checkable
class FieldWeldRepository(NaturalKeyRepository[FieldWeld, WeldNaturalKey], Protocol):
    def get_many(self, ids: Collection[UUID]) -> list[FieldWeld]: ...

    def update_milestones(
        self, updates: Sequence[tuple[UUID, MilestonePayload, float]]
    ) -> None: ...

    def assign_welders(
        self, assignments: Sequence[tuple[UUID, UUID | None, date | None]]
    ) -> None: ...

    def list_for_project(self, project_id: UUID) -> list[FieldWeld]: ...
