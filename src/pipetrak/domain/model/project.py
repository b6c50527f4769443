"""Projects and the reference entities rows point at by name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from pipetrak.domain.model.base import Entity, ProjectScopedEntity, utcnow
from pipetrak.domain.model.enums import EntityType, MetadataType

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Project(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROJECT

    name: str
    description: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class ReferenceEntity(ProjectScopedEntity):
    """Named lookup record; ``(project_id, name)`` is its natural key."""

    METADATA_TYPE: ClassVar[MetadataType]

    name: str
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class Area(ReferenceEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.AREA
    METADATA_TYPE: ClassVar[MetadataType] = MetadataType.AREA


@dataclass(eq=False, kw_only=True)
class System(ReferenceEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYSTEM
    METADATA_TYPE: ClassVar[MetadataType] = MetadataType.SYSTEM


@dataclass(eq=False, kw_only=True)
class TestPackage(ReferenceEntity):
    __test__ = False  # keep pytest from collecting the domain class

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TEST_PACKAGE
    METADATA_TYPE: ClassVar[MetadataType] = MetadataType.TEST_PACKAGE


REFERENCE_CLASSES: dict[MetadataType, type[ReferenceEntity]] = {
    MetadataType.AREA: Area,
    MetadataType.SYSTEM: System,
    MetadataType.TEST_PACKAGE: TestPackage,
}


def normalize_stencil(stencil: str) -> str:
    return stencil.strip().upper()


@dataclass(eq=False, kw_only=True)
class Welder(ProjectScopedEntity):
    """Welder identified by stencil; ``stencil_norm`` is the natural key."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.WELDER

    stencil: str
    name: str
    stencil_norm: str = ""

    def __post_init__(self) -> None:
        if not self.stencil_norm:
            self.stencil_norm = normalize_stencil(self.stencil)
