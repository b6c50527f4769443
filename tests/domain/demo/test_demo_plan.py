from __future__ import annotations

import uuid
from collections import Counter

from pipetrak.domain.demo import SeededRandom, build_demo_plan
from pipetrak.domain.model import ComponentType, MetadataType, MilestoneState, template_for


def test_seeded_random_is_deterministic_per_instance() -> None:
    first = SeededRandom(7)
    second = SeededRandom(7)

    values = [first.random() for _ in range(5)]

    assert values == [second.random() for _ in range(5)]
    assert all(0 <= value <= 1 for value in values)
    assert SeededRandom(8).random() != SeededRandom(7).random()


def test_seeded_random_follows_the_lcg_recurrence() -> None:
    rng = SeededRandom(1)

    rng.random()

    assert rng.seed == (1 * 1103515245 + 12345) & 0x7FFFFFFF


def test_demo_plan_counts() -> None:
    plan = build_demo_plan(uuid.uuid4(), SeededRandom(42))

    counts = Counter(component.component_type for component in plan.components)
    assert counts == {
        ComponentType.SPOOL: 40,
        ComponentType.SUPPORT: 80,
        ComponentType.VALVE: 50,
        ComponentType.FLANGE: 20,
        ComponentType.INSTRUMENT: 10,
    }
    assert len(plan.components) == 200
    assert len(plan.drawings) == 20
    assert len(plan.welds) == 120
    assert len(plan.welders) == 4
    assert len(plan.references[MetadataType.AREA]) == 5
    assert len(plan.references[MetadataType.SYSTEM]) == 5
    assert len(plan.references[MetadataType.TEST_PACKAGE]) == 10


def test_every_support_sits_on_its_spools_drawing() -> None:
    plan = build_demo_plan(uuid.uuid4(), SeededRandom(42))
    spools = [c for c in plan.components if c.component_type is ComponentType.SPOOL]
    supports = [c for c in plan.components if c.component_type is ComponentType.SUPPORT]

    for index, spool in enumerate(spools):
        pair = supports[index * 2 : index * 2 + 2]
        assert [support.drawing_no for support in pair] == [spool.drawing_no] * 2
        assert [support.area for support in pair] == [spool.area] * 2
        assert [support.system for support in pair] == [spool.system] * 2


def test_same_seed_same_plan() -> None:
    project_id = uuid.uuid4()

    first = build_demo_plan(project_id, SeededRandom(42))
    second = build_demo_plan(project_id, SeededRandom(42))

    assert [c.progress for c in first.components] == [c.progress for c in second.components]
    assert [w.progress for w in first.welds] == [w.progress for w in second.welds]


def test_different_seed_changes_progress_only() -> None:
    project_id = uuid.uuid4()

    first = build_demo_plan(project_id, SeededRandom(42))
    second = build_demo_plan(project_id, SeededRandom(1234))

    assert [c.key for c in first.components] == [c.key for c in second.components]
    assert [c.progress for c in first.components] != [c.progress for c in second.components]


def test_planned_progress_respects_milestone_order() -> None:
    plan = build_demo_plan(uuid.uuid4(), SeededRandom(42))

    for component in plan.components:
        MilestoneState.from_payload(template_for(component.component_type), component.progress)
    for weld in plan.welds:
        MilestoneState.from_payload(template_for(ComponentType.FIELD_WELD), weld.progress)
