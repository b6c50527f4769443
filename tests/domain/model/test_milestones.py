from __future__ import annotations

import pytest

from pipetrak.domain.model import ComponentType
from pipetrak.domain.model.milestones import (
    CONNECT,
    ERECT,
    FABRICATE,
    FIELD_WELD_TEMPLATE,
    INSTALL,
    PUNCH,
    RECEIVE,
    SPOOL_TEMPLATE,
    STANDARD_TEMPLATE,
    THREADED_PIPE_TEMPLATE,
    WELD_MADE,
    MilestoneDefinition,
    MilestoneError,
    MilestoneSequenceError,
    MilestoneState,
    ProgressTemplate,
    template_for,
)


@pytest.mark.parametrize(
    "template",
    [SPOOL_TEMPLATE, FIELD_WELD_TEMPLATE, STANDARD_TEMPLATE, THREADED_PIPE_TEMPLATE],
)
def test_template_weights_sum_to_one_hundred(template: ProgressTemplate) -> None:
    assert sum(milestone.weight for milestone in template.milestones) == 100


def test_template_with_bad_weights_is_rejected() -> None:
    with pytest.raises(MilestoneError):
        ProgressTemplate(name="broken", milestones=(MilestoneDefinition(name="Only", weight=90),))


def test_template_for_falls_back_to_standard() -> None:
    assert template_for(ComponentType.SPOOL) is SPOOL_TEMPLATE
    assert template_for(ComponentType.VALVE) is STANDARD_TEMPLATE
    assert template_for(ComponentType.PIPE) is STANDARD_TEMPLATE


def test_only_weld_made_requires_a_welder() -> None:
    gated = [m.name for m in FIELD_WELD_TEMPLATE.milestones if m.requires_welder]

    assert gated == [WELD_MADE]


def test_later_milestone_cannot_start_before_earlier_completes() -> None:
    state = STANDARD_TEMPLATE.initial_state()

    with pytest.raises(MilestoneSequenceError, match="Receive"):
        state.complete(INSTALL)

    state.complete(RECEIVE)
    state.complete(INSTALL)
    assert state.is_complete(INSTALL)


def test_milestone_cannot_reopen_while_later_is_started() -> None:
    state = MilestoneState.from_payload(STANDARD_TEMPLATE, {RECEIVE: True, INSTALL: True})

    with pytest.raises(MilestoneSequenceError, match="reopen"):
        state.set(RECEIVE, value=False)


def test_percent_complete_is_weighted() -> None:
    state = MilestoneState.from_payload(SPOOL_TEMPLATE, {RECEIVE: True, ERECT: True})

    assert state.percent_complete == 45.0
    state.complete(CONNECT)
    state.complete(PUNCH)
    assert state.percent_complete == 90.0


def test_partial_milestones_count_fractionally() -> None:
    state = THREADED_PIPE_TEMPLATE.initial_state()
    state.set(FABRICATE, 50)

    assert state.is_started(FABRICATE)
    assert not state.is_complete(FABRICATE)
    assert state.percent_complete == 8.0


def test_partial_milestone_must_complete_before_next_starts() -> None:
    state = THREADED_PIPE_TEMPLATE.initial_state()
    state.set(FABRICATE, 50)

    with pytest.raises(MilestoneSequenceError):
        state.set(INSTALL, 10)


def test_from_payload_rejects_out_of_order_progress() -> None:
    with pytest.raises(MilestoneSequenceError):
        MilestoneState.from_payload(STANDARD_TEMPLATE, {INSTALL: True})


def test_from_payload_rejects_unknown_milestones() -> None:
    with pytest.raises(MilestoneError, match="Unknown"):
        MilestoneState.from_payload(STANDARD_TEMPLATE, {"Paint": True})


def test_value_shape_is_checked() -> None:
    state = STANDARD_TEMPLATE.initial_state()

    with pytest.raises(MilestoneError):
        state.set(RECEIVE, 50)
    with pytest.raises(MilestoneError):
        THREADED_PIPE_TEMPLATE.initial_state().set(FABRICATE, 150)


def test_payload_lists_every_milestone_in_template_order() -> None:
    state = MilestoneState.from_payload(FIELD_WELD_TEMPLATE, {"Fit-Up": True})

    assert state.to_payload() == {
        "Fit-Up": True,
        "Weld Made": False,
        "Punch": False,
        "Test": False,
        "Restore": False,
    }
