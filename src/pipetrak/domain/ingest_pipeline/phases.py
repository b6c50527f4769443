"""Write phases, in dependency order: references, drawings, components, welds,
milestone initialisation and welder assignment.

Every phase resolves foreign keys through the :class:`ResolutionContext`, writes
through the :class:`IdempotencyGuard` and commits per batch.
"""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from pipetrak.domain.errors import UnresolvedReferenceError
from pipetrak.domain.model import (
    REFERENCE_CLASSES,
    Component,
    ComponentType,
    Drawing,
    FieldWeld,
    MetadataType,
    MilestoneState,
    Welder,
    normalize_stencil,
    template_for,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import date
    from uuid import UUID

    from pipetrak.domain.ingest_pipeline.context import PipelineContext
    from pipetrak.domain.ingest_pipeline.plan import ImportPlan, PlannedComponent, PlannedWeld
    from pipetrak.domain.model.milestones import MilestonePayload, MilestoneValue

log = getLogger(__name__)


class ReferenceEntityPhase:
    """Insert-or-skip areas, systems, test packages and welders."""

    name = "references"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        project_id = context.resolution.project_id
        for metadata_type in MetadataType:
            names = plan.references[metadata_type]
            if not names:
                continue
            entity_cls = REFERENCE_CLASSES[metadata_type]
            entities = [entity_cls(project_id=project_id, name=name) for name in names]
            with context.unit_of_work_factory() as uow:
                outcome = context.guard.write(
                    uow.repositories.references(metadata_type),
                    project_id=project_id,
                    entities=entities,
                )
                uow.commit()
            context.resolution.references[metadata_type].update(outcome.ids)
            context.counters.metadata_created[metadata_type] += len(outcome.created)
            context.counters.already_present += len(outcome.skipped)
            log.info(
                "Resolved %s %s reference(s): created=%s",
                len(outcome.ids),
                metadata_type.value,
                len(outcome.created),
            )

        if not plan.welders:
            return
        welders = [
            Welder(project_id=project_id, stencil=welder.stencil, name=welder.name)
            for welder in plan.welders
        ]
        with context.unit_of_work_factory() as uow:
            outcome = context.guard.write(
                uow.repositories.welders, project_id=project_id, entities=welders
            )
            uow.commit()
        context.resolution.welders.update(outcome.ids)
        context.counters.welders_created += len(outcome.created)
        context.counters.already_present += len(outcome.skipped)


class DrawingPhase:
    """Create or reuse drawings keyed by normalised drawing number."""

    name = "drawings"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        if not plan.drawings:
            return
        resolution = context.resolution
        drawings = [
            Drawing(
                project_id=resolution.project_id,
                drawing_no_raw=planned.drawing_no,
                title=planned.title,
                area_id=resolution.reference_id(MetadataType.AREA, planned.area),
                system_id=resolution.reference_id(MetadataType.SYSTEM, planned.system),
                test_package_id=resolution.reference_id(
                    MetadataType.TEST_PACKAGE, planned.test_package
                ),
            )
            for planned in plan.drawings
        ]
        with context.unit_of_work_factory() as uow:
            outcome = context.guard.write(
                uow.repositories.drawings, project_id=resolution.project_id, entities=drawings
            )
            uow.commit()
        resolution.drawings.update(outcome.ids)
        context.counters.drawings_created += len(outcome.created)
        context.counters.drawings_reused += len(outcome.skipped)
        log.info(
            "Resolved %s drawing(s): created=%s, reused=%s",
            len(outcome.ids),
            len(outcome.created),
            len(outcome.skipped),
        )


class ComponentPhase:
    """Insert-or-skip components in batches of ``context.batch_size``."""

    name = "components"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        for batch_number, batch in enumerate(plan.component_batches(context.batch_size), 1):
            components = [self._build(planned, context=context) for planned in batch]
            with context.unit_of_work_factory() as uow:
                outcome = context.guard.write(
                    uow.repositories.components,
                    project_id=context.resolution.project_id,
                    entities=components,
                )
                uow.commit()
            context.resolution.components.update(outcome.ids)
            context.counters.components_created += len(outcome.created)
            context.counters.components_by_type.update(
                component_type for component_type, _ in outcome.created
            )
            context.counters.already_present += len(outcome.skipped)
            log.info(
                "Component batch %s: created=%s, already present=%s",
                batch_number,
                len(outcome.created),
                len(outcome.skipped),
            )

    @staticmethod
    def _build(planned: PlannedComponent, *, context: PipelineContext) -> Component:
        resolution = context.resolution
        row = planned.source_row
        drawing_id = (
            resolution.drawing_id(planned.drawing_no, row=row) if planned.drawing_no else None
        )
        return Component(
            project_id=resolution.project_id,
            component_type=planned.component_type,
            identity_key=planned.identity.to_payload(),
            identity_token=planned.identity.token(),
            drawing_id=drawing_id,
            area_id=resolution.reference_id(MetadataType.AREA, planned.area, row=row),
            system_id=resolution.reference_id(MetadataType.SYSTEM, planned.system, row=row),
            test_package_id=resolution.reference_id(
                MetadataType.TEST_PACKAGE, planned.test_package, row=row
            ),
            attributes=dict(planned.attributes),
        )


class FieldWeldPhase:
    """Insert-or-skip field welds keyed by drawing and weld number."""

    name = "field_welds"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        resolution = context.resolution
        for batch in plan.weld_batches(context.batch_size):
            welds = [
                FieldWeld(
                    project_id=resolution.project_id,
                    drawing_id=resolution.drawing_id(planned.drawing_no, row=planned.source_row),
                    weld_number=planned.weld_number,
                    weld_type=planned.weld_type,
                    base_metal=planned.base_metal,
                    weld_size=planned.weld_size,
                    schedule=planned.schedule,
                    nde_result=planned.nde_result,
                )
                for planned in batch
            ]
            with context.unit_of_work_factory() as uow:
                outcome = context.guard.write(
                    uow.repositories.field_welds, project_id=resolution.project_id, entities=welds
                )
                uow.commit()
            resolution.welds.update(outcome.ids)
            context.counters.welds_created += len(outcome.created)
            context.counters.already_present += len(outcome.skipped)
        if plan.welds:
            log.info("Field welds created: %s", context.counters.welds_created)


def _weld_id(planned: PlannedWeld, context: PipelineContext) -> UUID:
    resolution = context.resolution
    drawing_id = resolution.drawing_id(planned.drawing_no, row=planned.source_row)
    return resolution.welds[(drawing_id, planned.weld_number)]


def _accepts_progress(
    record: Component | FieldWeld, progress: Mapping[str, MilestoneValue]
) -> bool:
    """Empty state, or initialised state with nothing started and progress to seed."""

    if not record.milestones_initialized:
        return True
    if not progress:
        return False
    state = record.milestone_state()
    return not any(state.is_started(name) for name in state.template.names)


class MilestoneInitializationPhase:
    """Seed milestone state for records that carry no progress yet.

    Planned progress is replayed earliest-first through :class:`MilestoneState`,
    so a record can never be stored with a later milestone started ahead of an
    earlier one. Records with any milestone started are left untouched, which
    keeps progress recorded by a previous run or by hand.
    """

    name = "milestones"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        for batch in plan.component_batches(context.batch_size):
            ids = [context.resolution.components[planned.key] for planned in batch]
            with context.unit_of_work_factory() as uow:
                repository = uow.repositories.components
                by_id = {record.id: record for record in repository.get_many(ids)}
                updates = [
                    self._initial_state(record_id, planned.component_type, planned.progress)
                    for record_id, planned in zip(ids, batch, strict=True)
                    if _accepts_progress(by_id[record_id], planned.progress)
                ]
                if updates:
                    repository.update_milestones(updates)
                uow.commit()
            context.counters.milestones_initialized += len(updates)

        for batch in plan.weld_batches(context.batch_size):
            ids = [_weld_id(planned, context) for planned in batch]
            with context.unit_of_work_factory() as uow:
                repository = uow.repositories.field_welds
                by_id = {record.id: record for record in repository.get_many(ids)}
                updates = [
                    self._initial_state(record_id, ComponentType.FIELD_WELD, planned.progress)
                    for record_id, planned in zip(ids, batch, strict=True)
                    if _accepts_progress(by_id[record_id], planned.progress)
                ]
                if updates:
                    repository.update_milestones(updates)
                uow.commit()
            context.counters.milestones_initialized += len(updates)

        log.info(
            "Initialised milestones for %s record(s)", context.counters.milestones_initialized
        )

    @staticmethod
    def _initial_state(
        record_id: UUID,
        component_type: ComponentType,
        progress: Mapping[str, MilestoneValue],
    ) -> tuple[UUID, MilestonePayload, float]:
        state = MilestoneState.from_payload(template_for(component_type), progress)
        return (record_id, state.to_payload(), state.percent_complete)


class WelderAssignmentPhase:
    """Record who made each weld and when.

    A planned weld carrying its own stencil or date gets exactly those. With
    ``plan.auto_assign_welders`` the other welds whose welder-gated milestone is
    complete get the planned welders round-robin, dated over the 30 days before
    ``today``. The round-robin index counts every eligible weld in plan order,
    including welds assigned by an earlier run, so a retry reproduces the same
    distribution. Stored welds that already have a welder or a date are never
    changed.
    """

    name = "welder_assignment"

    def run(self, plan: ImportPlan, *, context: PipelineContext) -> None:
        if not plan.welds:
            return
        assignees = self._assignees(plan, context) if plan.auto_assign_welders else []
        if plan.auto_assign_welders and not assignees:
            log.info("No welders available; skipping round-robin assignment")

        trigger = next(
            milestone.name
            for milestone in template_for(ComponentType.FIELD_WELD).milestones
            if milestone.requires_welder
        )
        index = 0
        for batch in plan.weld_batches(context.batch_size):
            ids = [_weld_id(planned, context) for planned in batch]
            assignments: list[tuple[UUID, UUID | None, date | None]] = []
            with context.unit_of_work_factory() as uow:
                repository = uow.repositories.field_welds
                by_id = {record.id: record for record in repository.get_many(ids)}
                for record_id, planned in zip(ids, batch, strict=True):
                    record = by_id[record_id]
                    recorded = record.welder_id is not None or record.date_welded is not None
                    if planned.welder_stencil or planned.date_welded:
                        if not recorded:
                            assignments.append(
                                (record_id, self._stencil_id(planned, context), planned.date_welded)
                            )
                        continue
                    if not assignees or not record.milestone_state().is_complete(trigger):
                        continue
                    if not recorded:
                        welded_on = context.today - timedelta(days=(index % 30) + 1)
                        assignments.append(
                            (record_id, assignees[index % len(assignees)], welded_on)
                        )
                    index += 1
                if assignments:
                    repository.assign_welders(assignments)
                uow.commit()
            context.counters.welders_assigned += sum(
                1 for _, welder_id, _ in assignments if welder_id is not None
            )
        log.info("Assigned welders to %s weld(s)", context.counters.welders_assigned)

    @staticmethod
    def _stencil_id(planned: PlannedWeld, context: PipelineContext) -> UUID | None:
        if not planned.welder_stencil:
            return None
        key = normalize_stencil(planned.welder_stencil)
        try:
            return context.resolution.welders[key]
        except KeyError:
            raise UnresolvedReferenceError(
                f"Unresolved welder stencil: {planned.welder_stencil}", row=planned.source_row
            ) from None

    @staticmethod
    def _assignees(plan: ImportPlan, context: PipelineContext) -> Sequence[UUID]:
        if plan.welders:
            return [context.resolution.welders[welder.key] for welder in plan.welders]
        with context.unit_of_work_factory() as uow:
            welders = uow.repositories.welders.list_for_project(context.resolution.project_id)
        return [welder.id for welder in sorted(welders, key=lambda welder: welder.stencil_norm)]
