"""Entry points for running the bulk write stage."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

from pipetrak.config.imports import DEFAULT_BATCH_SIZE
from pipetrak.domain.errors import UnresolvedReferenceError

from .context import PipelineContext, ResolutionContext
from .orchestrator import BulkWritePipeline
from .phases import (
    ComponentPhase,
    DrawingPhase,
    FieldWeldPhase,
    MilestoneInitializationPhase,
    ReferenceEntityPhase,
    WelderAssignmentPhase,
)
from .results import WriteIssue, WriteResult

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from pipetrak.domain.ports import ImportUnitOfWork

    from .plan import ImportPlan

log = getLogger(__name__)


def default_write_pipeline() -> BulkWritePipeline:
    return BulkWritePipeline(
        phases=(
            ReferenceEntityPhase(),
            DrawingPhase(),
            ComponentPhase(),
            FieldWeldPhase(),
            MilestoneInitializationPhase(),
            WelderAssignmentPhase(),
        )
    )


def run_bulk_write(
    plan: ImportPlan,
    *,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    batch_size: int = DEFAULT_BATCH_SIZE,
    today: date | None = None,
    pipeline: BulkWritePipeline | None = None,
) -> WriteResult:
    """Persist ``plan`` and report counts.

    Failures do not roll back committed batches. They are logged and returned
    as an unsuccessful result carrying the counts of what completed, so the
    caller can retry the same plan and only the remainder gets written.
    """

    started = time.perf_counter()
    context = PipelineContext(
        resolution=ResolutionContext(project_id=plan.project_id),
        unit_of_work_factory=unit_of_work_factory,
        batch_size=batch_size,
    )
    if today is not None:
        context.today = today
    active_pipeline = pipeline or default_write_pipeline()
    log.info(
        "Starting bulk write for project %s: drawings=%s, components=%s, welds=%s",
        plan.project_id,
        len(plan.drawings),
        len(plan.components),
        len(plan.welds),
    )

    try:
        active_pipeline.run(plan, context=context)
    except UnresolvedReferenceError as exc:
        log.exception("Bulk write stopped on an unresolved reference")
        return WriteResult.from_counters(
            context.counters,
            duration_ms=_elapsed_ms(started),
            error=str(exc),
            details=(WriteIssue(row=exc.row, issue=str(exc), drawing=exc.drawing),),
        )
    except Exception as exc:  # noqa: BLE001
        log.exception("Bulk write failed; committed batches are kept for retry")
        return WriteResult.from_counters(
            context.counters, duration_ms=_elapsed_ms(started), error=str(exc)
        )

    result = WriteResult.from_counters(context.counters, duration_ms=_elapsed_ms(started))
    log.info(
        "Finished bulk write: drawings_created=%s, components_created=%s, welds_created=%s, "
        "already_present=%s, duration_ms=%s",
        result.drawings_created,
        result.components_created,
        result.welds_created,
        context.counters.already_present,
        result.duration_ms,
    )
    return result


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
