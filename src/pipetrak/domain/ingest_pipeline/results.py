"""Outcome of one write invocation, in the shape the presentation layer displays."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pipetrak.domain.model import MetadataType

if TYPE_CHECKING:
    from pipetrak.domain.ingest_pipeline.context import WriteCounters


@dataclass(frozen=True, slots=True)
class WriteIssue:
    row: int | None
    issue: str
    drawing: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"row": self.row, "issue": self.issue}
        if self.drawing is not None:
            payload["drawing"] = self.drawing
        return payload


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Counts of what was written; on failure, of what completed before it."""

    success: bool
    drawings_created: int = 0
    drawings_reused: int = 0
    components_created: int = 0
    components_by_type: dict[str, int] = field(default_factory=dict[str, int])
    metadata_created: dict[MetadataType, int] = field(default_factory=dict[MetadataType, int])
    welds_created: int = 0
    welders_created: int = 0
    milestones_initialized: int = 0
    welders_assigned: int = 0
    duration_ms: int = 0
    error: str | None = None
    details: tuple[WriteIssue, ...] = ()

    @classmethod
    def from_counters(
        cls,
        counters: WriteCounters,
        *,
        duration_ms: int,
        error: str | None = None,
        details: tuple[WriteIssue, ...] = (),
    ) -> WriteResult:
        return cls(
            success=error is None,
            drawings_created=counters.drawings_created,
            drawings_reused=counters.drawings_reused,
            components_created=counters.components_created,
            components_by_type={
                component_type.value: count
                for component_type, count in sorted(counters.components_by_type.items())
            },
            metadata_created={
                metadata_type: counters.metadata_created[metadata_type]
                for metadata_type in MetadataType
            },
            welds_created=counters.welds_created,
            welders_created=counters.welders_created,
            milestones_initialized=counters.milestones_initialized,
            welders_assigned=counters.welders_assigned,
            duration_ms=duration_ms,
            error=error,
            details=details,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "drawingsCreated": self.drawings_created,
            "drawingsUpdated": self.drawings_reused,
            "componentsCreated": self.components_created,
            "componentsByType": dict(self.components_by_type),
            "metadataCreated": {
                "areas": self.metadata_created.get(MetadataType.AREA, 0),
                "systems": self.metadata_created.get(MetadataType.SYSTEM, 0),
                "testPackages": self.metadata_created.get(MetadataType.TEST_PACKAGE, 0),
            },
            "weldsCreated": self.welds_created,
            "weldersCreated": self.welders_created,
            "duration_ms": self.duration_ms,
        }
        if self.error is not None:
            payload["error"] = self.error
        if self.details:
            payload["details"] = [issue.to_payload() for issue in self.details]
        return payload
