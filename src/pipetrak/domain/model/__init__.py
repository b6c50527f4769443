"""Public domain model surface."""

from __future__ import annotations

from pipetrak.domain.model.base import Entity, ProjectScopedEntity, new_id
from pipetrak.domain.model.component import Component, FieldWeld
from pipetrak.domain.model.drawing import Drawing
from pipetrak.domain.model.enums import (
    ComponentType,
    EntityType,
    MetadataType,
    MilestoneKind,
    NdeResult,
    WeldType,
)
from pipetrak.domain.model.identity import (
    IdentityKey,
    IdentityKeyError,
    SpoolKey,
    StandardKey,
    ThreadedPipeKey,
    WeldKey,
    build_identity_key,
    identity_key_from_payload,
)
from pipetrak.domain.model.milestones import (
    MilestoneDefinition,
    MilestoneError,
    MilestoneSequenceError,
    MilestoneState,
    ProgressTemplate,
    template_for,
)
from pipetrak.domain.model.project import (
    REFERENCE_CLASSES,
    Area,
    Project,
    ReferenceEntity,
    System,
    TestPackage,
    Welder,
    normalize_stencil,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "ProjectScopedEntity",
    "new_id",
    # enums
    "ComponentType",
    "EntityType",
    "MetadataType",
    "MilestoneKind",
    "NdeResult",
    "WeldType",
    # project and reference entities
    "Project",
    "ReferenceEntity",
    "Area",
    "System",
    "TestPackage",
    "Welder",
    "REFERENCE_CLASSES",
    "normalize_stencil",
    # drawings and tracked records
    "Drawing",
    "Component",
    "FieldWeld",
    # identity keys
    "IdentityKey",
    "IdentityKeyError",
    "SpoolKey",
    "StandardKey",
    "ThreadedPipeKey",
    "WeldKey",
    "build_identity_key",
    "identity_key_from_payload",
    # milestones
    "MilestoneDefinition",
    "MilestoneError",
    "MilestoneSequenceError",
    "MilestoneState",
    "ProgressTemplate",
    "template_for",
]
