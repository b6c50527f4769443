"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pipetrak.domain.model import MetadataType

if TYPE_CHECKING:
    from collections.abc import Collection
    from types import TracebackType
    from uuid import UUID

    from pipetrak.domain.ports.persistence import (
        ComponentRepository,
        DrawingRepository,
        FieldWeldRepository,
        ProjectRepository,
        ReferenceRepository,
        WelderRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ImportRepositories(RepositoryCollection):
    """Repositories required by the bulk import write stage."""

    projects: ProjectRepository
    areas: ReferenceRepository
    systems: ReferenceRepository
    test_packages: ReferenceRepository
    welders: WelderRepository
    drawings: DrawingRepository
    components: ComponentRepository
    field_welds: FieldWeldRepository

    def references(self, metadata_type: MetadataType) -> ReferenceRepository:
        if metadata_type is MetadataType.AREA:
            return self.areas
        if metadata_type is MetadataType.SYSTEM:
            return self.systems
        return self.test_packages

    def find_reference_ids(
        self, project_id: UUID, metadata_type: MetadataType, names: Collection[str]
    ) -> dict[str, UUID]:
        return self.references(metadata_type).find_ids(project_id, names)


type ImportUnitOfWork = UnitOfWork[ImportRepositories]
