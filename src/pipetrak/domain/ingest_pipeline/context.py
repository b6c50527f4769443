"""Shared state threaded through the write phases of one invocation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from pipetrak.config.imports import DEFAULT_BATCH_SIZE
from pipetrak.domain.errors import UnresolvedReferenceError
from pipetrak.domain.ingest_pipeline.idempotency import IdempotencyGuard
from pipetrak.domain.model import ComponentType, MetadataType
from pipetrak.domain.normalization import normalize_drawing

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from pipetrak.domain.ports import ComponentNaturalKey, ImportUnitOfWork, WeldNaturalKey


def _today() -> date:
    return datetime.now(UTC).date()


@dataclass(slots=True)
class ResolutionContext:
    """Natural key -> identifier maps, filled phase by phase.

    Built fresh per invocation from the store's answers, so it always holds both
    records created now and records that already existed.
    """

    project_id: UUID
    references: dict[MetadataType, dict[str, UUID]] = field(
        default_factory=lambda: {metadata_type: {} for metadata_type in MetadataType}
    )
    welders: dict[str, UUID] = field(default_factory=dict)
    drawings: dict[str, UUID] = field(default_factory=dict)
    components: dict[ComponentNaturalKey, UUID] = field(default_factory=dict)
    welds: dict[WeldNaturalKey, UUID] = field(default_factory=dict)

    def reference_id(
        self, metadata_type: MetadataType, name: str | None, *, row: int | None = None
    ) -> UUID | None:
        if not name:
            return None
        try:
            return self.references[metadata_type][name]
        except KeyError:
            raise UnresolvedReferenceError(
                f"Unresolved {metadata_type.value} reference: {name}", row=row
            ) from None

    def drawing_id(self, drawing_no: str, *, row: int | None = None) -> UUID:
        key = normalize_drawing(drawing_no)
        try:
            return self.drawings[key]
        except KeyError:
            raise UnresolvedReferenceError(
                f"Drawing {key} could not be resolved", row=row, drawing=key
            ) from None


@dataclass(slots=True)
class WriteCounters:
    drawings_created: int = 0
    drawings_reused: int = 0
    components_created: int = 0
    components_by_type: Counter[ComponentType] = field(default_factory=Counter[ComponentType])
    metadata_created: Counter[MetadataType] = field(default_factory=Counter[MetadataType])
    welds_created: int = 0
    welders_created: int = 0
    milestones_initialized: int = 0
    welders_assigned: int = 0
    already_present: int = 0


@dataclass(slots=True)
class PipelineContext:
    """Mutable context shared across write phases."""

    resolution: ResolutionContext
    unit_of_work_factory: Callable[[], ImportUnitOfWork]
    counters: WriteCounters = field(default_factory=WriteCounters)
    guard: IdempotencyGuard = field(default_factory=IdempotencyGuard)
    batch_size: int = DEFAULT_BATCH_SIZE
    today: date = field(default_factory=_today)
