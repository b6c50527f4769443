"""Natural-key resolving bulk writer with idempotent, phase-by-phase commits."""

from __future__ import annotations

from .context import PipelineContext, ResolutionContext, WriteCounters
from .idempotency import GuardOutcome, IdempotencyError, IdempotencyGuard
from .orchestrator import BulkWritePipeline, WritePhase
from .phases import (
    ComponentPhase,
    DrawingPhase,
    FieldWeldPhase,
    MilestoneInitializationPhase,
    ReferenceEntityPhase,
    WelderAssignmentPhase,
)
from .plan import ImportPlan, PlannedComponent, PlannedDrawing, PlannedWeld, PlannedWelder
from .planning import plan_takeoff_import, plan_weld_log_import, planned_record_count
from .results import WriteIssue, WriteResult
from .runner import default_write_pipeline, run_bulk_write

__all__ = [
    "BulkWritePipeline",
    "ComponentPhase",
    "DrawingPhase",
    "FieldWeldPhase",
    "GuardOutcome",
    "IdempotencyError",
    "IdempotencyGuard",
    "ImportPlan",
    "MilestoneInitializationPhase",
    "PipelineContext",
    "PlannedComponent",
    "PlannedDrawing",
    "PlannedWeld",
    "PlannedWelder",
    "ReferenceEntityPhase",
    "ResolutionContext",
    "WelderAssignmentPhase",
    "WriteCounters",
    "WriteIssue",
    "WritePhase",
    "WriteResult",
    "default_write_pipeline",
    "plan_takeoff_import",
    "plan_weld_log_import",
    "planned_record_count",
    "run_bulk_write",
]
