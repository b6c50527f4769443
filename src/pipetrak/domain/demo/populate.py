"""Generate the demo project as a write plan.

Counts: 20 drawings, 40 spools, 80 supports (two per spool), 50 valves,
20 flanges (one per drawing), 10 instruments and 120 field welds (three per
spool). Milestone progress and welder eligibility are drawn from the injected
:class:`SeededRandom`, always earliest milestone first.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pipetrak.domain.ingest_pipeline.plan import (
    ImportPlan,
    PlannedComponent,
    PlannedDrawing,
    PlannedWeld,
    PlannedWelder,
)
from pipetrak.domain.model import ComponentType, MetadataType, SpoolKey, StandardKey, WeldType
from pipetrak.domain.model.milestones import (
    CONNECT,
    ERECT,
    FIT_UP,
    INSTALL,
    PUNCH,
    RECEIVE,
    WELD_MADE,
)
from pipetrak.domain.normalization import normalize_size

from .generator import SeededRandom
from .seed_data import (
    AREAS,
    COMMODITY_CODES,
    DRAWINGS,
    INSTRUMENT_COUNT,
    SIZES,
    SPOOL_COMMODITY,
    SPOOL_COUNT,
    SPOOL_SPEC,
    SUPPORTS_PER_SPOOL,
    SYSTEMS,
    TEST_PACKAGES,
    VALVE_COUNT,
    WELD_MATERIAL,
    WELDERS,
    WELDS_PER_SPOOL,
    DemoDrawing,
)

if TYPE_CHECKING:
    from uuid import UUID

    from pipetrak.domain.model.milestones import MilestoneValue

log = getLogger(__name__)

_WELD_TYPES = (WeldType.BUTT, WeldType.SOCKET, WeldType.BUTT)


def _component_progress(
    component_type: ComponentType, rng: SeededRandom
) -> dict[str, MilestoneValue]:
    progress: dict[str, MilestoneValue] = {}
    if not rng.chance(0.95):
        return progress
    progress[RECEIVE] = True
    if component_type is ComponentType.SPOOL:
        if not rng.chance(0.70):
            return progress
        progress[ERECT] = True
        if not rng.chance(0.50):
            return progress
        progress[CONNECT] = True
    else:
        if not rng.chance(0.70):
            return progress
        progress[INSTALL] = True
    if rng.chance(0.30):
        progress[PUNCH] = True
    return progress


def _weld_progress(rng: SeededRandom) -> dict[str, MilestoneValue]:
    progress: dict[str, MilestoneValue] = {}
    if not rng.chance(0.90):
        return progress
    progress[FIT_UP] = True
    if not rng.chance(0.65):
        return progress
    progress[WELD_MADE] = True
    if rng.chance(0.25):
        progress[PUNCH] = True
    return progress


def _standard(
    component_type: ComponentType,
    drawing: DemoDrawing,
    *,
    tag: str,
    commodity_code: str,
    size: str,
    seq: int,
    test_package: str | None,
    rng: SeededRandom,
) -> PlannedComponent:
    size_norm = normalize_size(size)
    return PlannedComponent(
        component_type=component_type,
        identity=StandardKey(
            drawing_norm=drawing.drawing_no,
            commodity_code=commodity_code,
            size=size_norm,
            seq=seq,
        ),
        drawing_no=drawing.drawing_no,
        area=drawing.area,
        system=drawing.system,
        test_package=test_package,
        attributes={"tag": tag, "cmdty_code": commodity_code, "size": size},
        progress=_component_progress(component_type, rng),
    )


def build_demo_plan(project_id: UUID, rng: SeededRandom) -> ImportPlan:
    """Return the complete demo dataset for ``project_id`` drawn from ``rng``."""

    plan = ImportPlan(project_id=project_id, auto_assign_welders=True)
    for name in AREAS:
        plan.add_reference(MetadataType.AREA, name)
    for name in SYSTEMS:
        plan.add_reference(MetadataType.SYSTEM, name)
    for name in TEST_PACKAGES:
        plan.add_reference(MetadataType.TEST_PACKAGE, name)
    for welder in WELDERS:
        plan.add_welder(PlannedWelder(stencil=welder.stencil, name=welder.name))
    for drawing in DRAWINGS:
        plan.add_drawing(
            PlannedDrawing(
                drawing_no=drawing.drawing_no,
                title=drawing.title,
                area=drawing.area,
                system=drawing.system,
            )
        )

    support_codes = COMMODITY_CODES[ComponentType.SUPPORT]
    for spool_number in range(1, SPOOL_COUNT + 1):
        drawing = DRAWINGS[(spool_number - 1) // 2]
        package = TEST_PACKAGES[(spool_number - 1) % len(TEST_PACKAGES)]
        size = SIZES[(spool_number - 1) % len(SIZES)]
        spool_id = f"SP-{spool_number:03d}"
        plan.add_component(
            PlannedComponent(
                component_type=ComponentType.SPOOL,
                identity=SpoolKey(spool_id=spool_id),
                drawing_no=drawing.drawing_no,
                area=drawing.area,
                system=drawing.system,
                test_package=package,
                attributes={"cmdty_code": SPOOL_COMMODITY, "size": size, "spec": SPOOL_SPEC},
                progress=_component_progress(ComponentType.SPOOL, rng),
            )
        )
        for offset in range(SUPPORTS_PER_SPOOL):
            support_number = (spool_number - 1) * SUPPORTS_PER_SPOOL + offset + 1
            plan.add_component(
                _standard(
                    ComponentType.SUPPORT,
                    drawing,
                    tag=f"SUP-{support_number:03d}",
                    commodity_code=support_codes[(support_number - 1) % len(support_codes)],
                    size=size,
                    seq=((support_number - 1) % SUPPORTS_PER_SPOOL) + 1,
                    test_package=package,
                    rng=rng,
                )
            )

    valve_codes = COMMODITY_CODES[ComponentType.VALVE]
    for valve_number in range(1, VALVE_COUNT + 1):
        drawing = DRAWINGS[(valve_number - 1) * len(DRAWINGS) // VALVE_COUNT]
        plan.add_component(
            _standard(
                ComponentType.VALVE,
                drawing,
                tag=f"VLV-{valve_number:03d}",
                commodity_code=valve_codes[(valve_number - 1) % len(valve_codes)],
                size=SIZES[(valve_number - 1) % len(SIZES)],
                seq=(valve_number - 1) // len(DRAWINGS) + 1,
                test_package=None,
                rng=rng,
            )
        )

    flange_codes = COMMODITY_CODES[ComponentType.FLANGE]
    for flange_number, drawing in enumerate(DRAWINGS, 1):
        plan.add_component(
            _standard(
                ComponentType.FLANGE,
                drawing,
                tag=f"FLG-{flange_number:03d}",
                commodity_code=flange_codes[(flange_number - 1) % len(flange_codes)],
                size=SIZES[(flange_number - 1) % len(SIZES)],
                seq=1,
                test_package=None,
                rng=rng,
            )
        )

    instrument_codes = COMMODITY_CODES[ComponentType.INSTRUMENT]
    for instrument_number in range(1, INSTRUMENT_COUNT + 1):
        drawing = DRAWINGS[(instrument_number - 1) * 2]
        plan.add_component(
            _standard(
                ComponentType.INSTRUMENT,
                drawing,
                tag=f"INST-{instrument_number:03d}",
                commodity_code=instrument_codes[(instrument_number - 1) % len(instrument_codes)],
                size="1",
                seq=1,
                test_package=None,
                rng=rng,
            )
        )

    for weld_number in range(1, SPOOL_COUNT * WELDS_PER_SPOOL + 1):
        drawing = DRAWINGS[((weld_number - 1) // WELDS_PER_SPOOL) // 2]
        plan.add_weld(
            PlannedWeld(
                drawing_no=drawing.drawing_no,
                weld_number=f"W-{weld_number:03d}",
                weld_type=_WELD_TYPES[(weld_number - 1) % len(_WELD_TYPES)],
                base_metal=WELD_MATERIAL,
                progress=_weld_progress(rng),
            )
        )

    log.info(
        "Built demo plan: %s drawings, %s components, %s welds",
        len(plan.drawings),
        len(plan.components),
        len(plan.welds),
    )
    return plan
