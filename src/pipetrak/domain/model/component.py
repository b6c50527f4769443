"""Progress-tracked records: components and field welds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from pipetrak.domain.model.base import ProjectScopedEntity, utcnow
from pipetrak.domain.model.enums import ComponentType, EntityType, NdeResult, WeldType
from pipetrak.domain.model.identity import identity_key_from_payload
from pipetrak.domain.model.milestones import MilestoneState, template_for

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from pipetrak.domain.model.identity import IdentityKey, IdentityPayload
    from pipetrak.domain.model.milestones import MilestonePayload


@dataclass(eq=False, kw_only=True)
class Component(ProjectScopedEntity):
    """One trackable item; unique per ``(project, component_type, identity token)``.

    ``current_milestones`` stays empty until milestone initialisation has run for
    the record, which lets an interrupted import resume that step on retry.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMPONENT

    component_type: ComponentType
    identity_key: IdentityPayload
    identity_token: str = ""
    drawing_id: UUID | None = None
    area_id: UUID | None = None
    system_id: UUID | None = None
    test_package_id: UUID | None = None
    attributes: dict[str, Any] = field(default_factory=dict[str, Any])
    current_milestones: MilestonePayload = field(default_factory=dict)
    percent_complete: float = 0.0
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.identity_token:
            self.identity_token = self.key.token()

    @property
    def key(self) -> IdentityKey:
        return identity_key_from_payload(self.component_type, self.identity_key)

    @property
    def milestones_initialized(self) -> bool:
        return bool(self.current_milestones)

    def milestone_state(self) -> MilestoneState:
        return MilestoneState.from_payload(
            template_for(self.component_type), self.current_milestones
        )


@dataclass(eq=False, kw_only=True)
class FieldWeld(ProjectScopedEntity):
    """Weld on a drawing; unique per ``(project, drawing, weld_number)``."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FIELD_WELD

    drawing_id: UUID
    weld_number: str
    weld_type: WeldType = WeldType.BUTT
    base_metal: str | None = None
    weld_size: str | None = None
    schedule: str | None = None
    nde_result: NdeResult | None = None
    current_milestones: MilestonePayload = field(default_factory=dict)
    percent_complete: float = 0.0
    welder_id: UUID | None = None
    date_welded: date | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def milestones_initialized(self) -> bool:
        return bool(self.current_milestones)

    def milestone_state(self) -> MilestoneState:
        return MilestoneState.from_payload(
            template_for(ComponentType.FIELD_WELD), self.current_milestones
        )
