"""Phase-based orchestrator for the bulk write stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pipetrak.domain.ingest_pipeline.context import PipelineContext
    from pipetrak.domain.ingest_pipeline.plan import ImportPlan

log = getLogger(__name__)


class WritePhase(Protocol):
    """Contract implemented by each write phase."""

    name: str

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class BulkWritePipeline:
    """Compose and execute the ordered write phases.

    Each phase owns its units of work and commits before returning, so a
    failure leaves the batches of earlier phases in place for a retry to reuse.
    """

    phases: Sequence[WritePhase] = field(default_factory=tuple)

    def with_phase(self, phase: WritePhase) -> BulkWritePipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return BulkWritePipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[WritePhase]) -> BulkWritePipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return BulkWritePipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> ImportPlan:
        """Execute the configured phases in-order against ``plan``."""

        for phase in self.phases:
            log.debug("Running write phase %s", phase.name)
            phase.run(plan, context=context)
        return plan
