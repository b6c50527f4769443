"""Turn validated take-off and weld log rows into write plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pipetrak.domain.errors import ImportLimitError
from pipetrak.domain.ingest_pipeline.plan import (
    ImportPlan,
    PlannedComponent,
    PlannedDrawing,
    PlannedWeld,
    PlannedWelder,
)
from pipetrak.domain.model import (
    ComponentType,
    StandardKey,
    ThreadedPipeKey,
    WeldType,
    build_identity_key,
)
from pipetrak.domain.model.milestones import FIT_UP, WELD_MADE

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from pipetrak.domain.takeoff import TakeoffRow
    from pipetrak.domain.weld_log import WeldLogRow

log = getLogger(__name__)

WELD_TYPE_COLUMNS: Final[tuple[str, ...]] = ("WELD TYPE", "WELD_TYPE", "WELDTYPE")

# One component per row regardless of quantity.
_SINGLE_UNIT_TYPES: Final[frozenset[ComponentType]] = frozenset(
    {ComponentType.SPOOL, ComponentType.INSTRUMENT}
)
# Rows that plan exactly one record whatever their quantity.
_ONE_RECORD_PER_ROW: Final[frozenset[ComponentType]] = _SINGLE_UNIT_TYPES | frozenset(
    {ComponentType.FIELD_WELD, ComponentType.THREADED_PIPE}
)

AUTO_CREATED_WELDER_NAME: Final[str] = "Auto-created from import"


@dataclass(slots=True)
class _ThreadedPipeAggregate:
    first_row: TakeoffRow
    total_linear_feet: float = 0.0
    line_numbers: list[int] = field(default_factory=list[int])


def _quantity_value(quantity: float) -> int | float:
    return int(quantity) if quantity.is_integer() else quantity


def _attributes(row: TakeoffRow) -> dict[str, Any]:
    attributes: dict[str, Any] = {
        "spec": row.spec,
        "description": row.description,
        "size": row.size,
        "cmdty_code": row.commodity_code,
        "comments": row.comments,
        "original_qty": _quantity_value(row.quantity),
    }
    attributes.update(row.unmapped_fields)
    return attributes


def _weld_type(row: TakeoffRow) -> WeldType:
    for header, value in row.unmapped_fields.items():
        if header.strip().upper() in WELD_TYPE_COLUMNS:
            parsed = WeldType.from_label(value)
            if parsed is not None:
                return parsed
    return WeldType.BUTT


def planned_record_count(rows: Iterable[TakeoffRow]) -> int:
    """Upper bound on the components and welds :func:`plan_takeoff_import` builds."""

    return sum(
        1 if row.component_type in _ONE_RECORD_PER_ROW else row.unit_count for row in rows
    )


def plan_takeoff_import(
    project_id: UUID, rows: Sequence[TakeoffRow], *, max_records: int | None = None
) -> ImportPlan:
    """Build the write plan for validated take-off rows.

    Unit-counted types explode into one component per unit (``seq`` 1..qty),
    spools and instruments stay one component per row, field weld rows become
    field welds on their drawing, and threaded pipe rows sharing a drawing,
    size and commodity code collapse into one aggregate carrying the summed
    linear feet.

    Raises :class:`ImportLimitError` before expanding anything when the rows
    would plan more than ``max_records`` records.
    """

    if max_records is not None:
        planned = planned_record_count(rows)
        if planned > max_records:
            raise ImportLimitError(
                f"Too many components: {planned} would be created (max {max_records})"
            )

    plan = ImportPlan(project_id=project_id)
    aggregates: dict[str, _ThreadedPipeAggregate] = {}

    for row in rows:
        plan.add_drawing(
            PlannedDrawing(
                drawing_no=row.drawing,
                area=row.area,
                system=row.system,
                test_package=row.test_package,
            )
        )

        if row.component_type is ComponentType.FIELD_WELD:
            plan.add_weld(
                PlannedWeld(
                    drawing_no=row.drawing,
                    weld_number=row.commodity_code,
                    weld_type=_weld_type(row),
                    base_metal=row.spec,
                    source_row=row.row_number,
                )
            )
            continue

        if row.component_type is ComponentType.THREADED_PIPE:
            key = ThreadedPipeKey.for_line(
                drawing_norm=row.drawing, size=row.size, commodity_code=row.commodity_code
            )
            aggregate = aggregates.setdefault(key.pipe_id, _ThreadedPipeAggregate(first_row=row))
            aggregate.total_linear_feet += row.quantity
            aggregate.line_numbers.append(row.row_number)
            continue

        if row.component_type in _SINGLE_UNIT_TYPES:
            identities = [
                build_identity_key(
                    row.component_type,
                    drawing_norm=row.drawing,
                    commodity_code=row.commodity_code,
                    size=row.size,
                )
            ]
        else:
            identities = [
                StandardKey(
                    drawing_norm=row.drawing,
                    commodity_code=row.commodity_code,
                    size=row.size,
                    seq=seq,
                )
                for seq in range(1, row.unit_count + 1)
            ]
        attributes = _attributes(row)
        for identity in identities:
            plan.add_component(
                PlannedComponent(
                    component_type=row.component_type,
                    identity=identity,
                    drawing_no=row.drawing,
                    area=row.area,
                    system=row.system,
                    test_package=row.test_package,
                    attributes=attributes,
                    source_row=row.row_number,
                )
            )

    for pipe_id, aggregate in aggregates.items():
        first = aggregate.first_row
        attributes = _attributes(first)
        attributes["original_qty"] = _quantity_value(aggregate.total_linear_feet)
        attributes["total_linear_feet"] = round(aggregate.total_linear_feet, 4)
        attributes["line_numbers"] = list(aggregate.line_numbers)
        plan.add_component(
            PlannedComponent(
                component_type=ComponentType.THREADED_PIPE,
                identity=ThreadedPipeKey(pipe_id=pipe_id),
                drawing_no=first.drawing,
                area=first.area,
                system=first.system,
                test_package=first.test_package,
                attributes=attributes,
                source_row=first.row_number,
            )
        )

    log.info(
        "Planned %s drawing(s), %s component(s), %s field weld(s)",
        len(plan.drawings),
        len(plan.components),
        len(plan.welds),
    )
    return plan


def plan_weld_log_import(project_id: UUID, rows: Iterable[WeldLogRow]) -> ImportPlan:
    """Build the write plan for validated weld log rows.

    Every stencil becomes a welder (reused when the project already has it).
    A weld with a date or a final NDE result is planned with Fit-Up and Weld
    Made complete.
    """

    plan = ImportPlan(project_id=project_id)
    for row in rows:
        plan.add_drawing(PlannedDrawing(drawing_no=row.drawing))
        if row.welder_stencil:
            plan.add_welder(
                PlannedWelder(stencil=row.welder_stencil, name=AUTO_CREATED_WELDER_NAME)
            )
        plan.add_weld(
            PlannedWeld(
                drawing_no=row.drawing,
                weld_number=row.weld_number,
                weld_type=row.weld_type,
                base_metal=row.base_metal,
                weld_size=row.weld_size,
                schedule=row.schedule,
                nde_result=row.nde_result,
                welder_stencil=row.welder_stencil,
                date_welded=row.date_welded,
                progress={FIT_UP: True, WELD_MADE: True} if row.is_welded else {},
                source_row=row.row_number,
            )
        )

    log.info(
        "Planned %s weld(s) and %s welder(s) from the weld log",
        len(plan.welds),
        len(plan.welders),
    )
    return plan
