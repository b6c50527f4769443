from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest

from pipetrak.domain.errors import UnresolvedReferenceError
from pipetrak.domain.ingest_pipeline import (
    BulkWritePipeline,
    ImportPlan,
    PipelineContext,
    ResolutionContext,
    WriteCounters,
    WriteResult,
    run_bulk_write,
)
from pipetrak.domain.model import ComponentType, MetadataType

if TYPE_CHECKING:
    from pipetrak.domain.ports import ImportUnitOfWork


def _no_unit_of_work() -> ImportUnitOfWork:
    raise AssertionError("unit of work should not be requested")


@dataclass(slots=True)
class _RecordingPhase:
    name: str
    calls: list[str]

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        _ = (plan, context)
        self.calls.append(self.name)


@dataclass(slots=True)
class _CountingPhase:
    name: str = "counting"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        _ = plan
        context.counters.components_created += 3
        context.counters.components_by_type[ComponentType.VALVE] += 3


@dataclass(slots=True)
class _FailingPhase:
    error: Exception
    name: str = "failing"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        _ = (plan, context)
        raise self.error


def test_pipeline_runs_phases_in_order() -> None:
    calls: list[str] = []
    pipeline = BulkWritePipeline().with_phase(_RecordingPhase("first", calls)).extend(
        [_RecordingPhase("second", calls)]
    )
    context = PipelineContext(
        resolution=ResolutionContext(project_id=uuid.uuid4()),
        unit_of_work_factory=_no_unit_of_work,
    )

    pipeline.run(ImportPlan(project_id=uuid.uuid4()), context=context)

    assert calls == ["first", "second"]


def test_failure_keeps_counts_of_completed_phases() -> None:
    pipeline = BulkWritePipeline(phases=(_CountingPhase(), _FailingPhase(RuntimeError("disk"))))

    result = run_bulk_write(
        ImportPlan(project_id=uuid.uuid4()),
        unit_of_work_factory=_no_unit_of_work,
        pipeline=pipeline,
    )

    assert not result.success
    assert result.error == "disk"
    assert result.components_created == 3
    assert result.components_by_type == {"valve": 3}


def test_unresolved_reference_is_reported_with_row_details() -> None:
    error = UnresolvedReferenceError("Drawing P-9 could not be resolved", row=4, drawing="P-9")
    pipeline = BulkWritePipeline(phases=(_FailingPhase(error),))

    result = run_bulk_write(
        ImportPlan(project_id=uuid.uuid4()),
        unit_of_work_factory=_no_unit_of_work,
        pipeline=pipeline,
    )

    assert result.to_payload()["details"] == [
        {"row": 4, "issue": "Drawing P-9 could not be resolved", "drawing": "P-9"}
    ]


def test_resolution_context_raises_for_unknown_keys() -> None:
    resolution = ResolutionContext(project_id=uuid.uuid4())
    drawing_id = uuid.uuid4()
    resolution.drawings["P-001"] = drawing_id

    assert resolution.drawing_id(" p-001 ") == drawing_id
    assert resolution.reference_id(MetadataType.AREA, None) is None
    with pytest.raises(UnresolvedReferenceError) as excinfo:
        resolution.reference_id(MetadataType.AREA, "B-68", row=3)
    assert excinfo.value.row == 3
    with pytest.raises(UnresolvedReferenceError):
        resolution.drawing_id("P-404")


def test_result_payload_uses_presentation_keys() -> None:
    counters = WriteCounters(drawings_created=2, drawings_reused=1, welds_created=5)
    counters.metadata_created[MetadataType.TEST_PACKAGE] += 4

    payload = WriteResult.from_counters(counters, duration_ms=12).to_payload()

    assert payload == {
        "success": True,
        "drawingsCreated": 2,
        "drawingsUpdated": 1,
        "componentsCreated": 0,
        "componentsByType": {},
        "metadataCreated": {"areas": 0, "systems": 0, "testPackages": 4},
        "weldsCreated": 5,
        "weldersCreated": 0,
        "duration_ms": 12,
    }
