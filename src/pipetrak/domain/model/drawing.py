"""Drawings: the anchor every component and field weld resolves against."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from pipetrak.domain.model.base import ProjectScopedEntity
from pipetrak.domain.model.enums import EntityType
from pipetrak.domain.normalization import normalize_drawing

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Drawing(ProjectScopedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.DRAWING

    drawing_no_raw: str
    drawing_no_norm: str = ""
    title: str | None = None
    area_id: UUID | None = None
    system_id: UUID | None = None
    test_package_id: UUID | None = None

    def __post_init__(self) -> None:
        if not self.drawing_no_norm:
            self.drawing_no_norm = normalize_drawing(self.drawing_no_raw)
