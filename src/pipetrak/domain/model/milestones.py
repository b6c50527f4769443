"""Progress templates and the sequencing-aware milestone state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from pipetrak.domain.model.enums import ComponentType, MilestoneKind

if TYPE_CHECKING:
    from collections.abc import Mapping

type MilestoneValue = bool | int
type MilestonePayload = dict[str, MilestoneValue]

RECEIVE: Final[str] = "Receive"
INSTALL: Final[str] = "Install"
ERECT: Final[str] = "Erect"
CONNECT: Final[str] = "Connect"
PUNCH: Final[str] = "Punch"
TEST: Final[str] = "Test"
RESTORE: Final[str] = "Restore"
FIT_UP: Final[str] = "Fit-Up"
WELD_MADE: Final[str] = "Weld Made"
FABRICATE: Final[str] = "Fabricate"
SUPPORT: Final[str] = "Support"


class MilestoneError(ValueError):
    """Raised for unknown milestones or values of the wrong shape."""


class MilestoneSequenceError(MilestoneError):
    """Raised when a change would start a milestone before its predecessors complete."""


@dataclass(frozen=True, slots=True)
class MilestoneDefinition:
    name: str
    weight: int
    kind: MilestoneKind = MilestoneKind.DISCRETE
    requires_welder: bool = False


@dataclass(frozen=True, slots=True)
class ProgressTemplate:
    """Ordered milestone sequence for one component type; weights sum to 100."""

    name: str
    milestones: tuple[MilestoneDefinition, ...]

    def __post_init__(self) -> None:
        total = sum(milestone.weight for milestone in self.milestones)
        if total != 100:
            raise MilestoneError(f"Template {self.name} weights sum to {total}, expected 100")
        names = [milestone.name for milestone in self.milestones]
        if len(set(names)) != len(names):
            raise MilestoneError(f"Template {self.name} repeats a milestone name")

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(milestone.name for milestone in self.milestones)

    def index_of(self, name: str) -> int:
        for index, milestone in enumerate(self.milestones):
            if milestone.name == name:
                return index
        raise MilestoneError(f"Template {self.name} has no milestone {name!r}")

    def definition(self, name: str) -> MilestoneDefinition:
        return self.milestones[self.index_of(name)]

    def initial_state(self) -> MilestoneState:
        return MilestoneState(template=self)


def _discrete(name: str, weight: int, *, requires_welder: bool = False) -> MilestoneDefinition:
    return MilestoneDefinition(name=name, weight=weight, requires_welder=requires_welder)


def _partial(name: str, weight: int) -> MilestoneDefinition:
    return MilestoneDefinition(name=name, weight=weight, kind=MilestoneKind.PARTIAL)


SPOOL_TEMPLATE: Final[ProgressTemplate] = ProgressTemplate(
    name="spool",
    milestones=(
        _discrete(RECEIVE, 5),
        _discrete(ERECT, 40),
        _discrete(CONNECT, 40),
        _discrete(PUNCH, 5),
        _discrete(TEST, 5),
        _discrete(RESTORE, 5),
    ),
)

FIELD_WELD_TEMPLATE: Final[ProgressTemplate] = ProgressTemplate(
    name="field_weld",
    milestones=(
        _discrete(FIT_UP, 10),
        _discrete(WELD_MADE, 60, requires_welder=True),
        _discrete(PUNCH, 10),
        _discrete(TEST, 15),
        _discrete(RESTORE, 5),
    ),
)

STANDARD_TEMPLATE: Final[ProgressTemplate] = ProgressTemplate(
    name="standard",
    milestones=(
        _discrete(RECEIVE, 10),
        _discrete(INSTALL, 60),
        _discrete(PUNCH, 10),
        _discrete(TEST, 15),
        _discrete(RESTORE, 5),
    ),
)

THREADED_PIPE_TEMPLATE: Final[ProgressTemplate] = ProgressTemplate(
    name="threaded_pipe",
    milestones=(
        _partial(FABRICATE, 16),
        _partial(INSTALL, 16),
        _partial(ERECT, 16),
        _partial(CONNECT, 16),
        _partial(SUPPORT, 16),
        _discrete(PUNCH, 5),
        _discrete(TEST, 10),
        _discrete(RESTORE, 5),
    ),
)

_TEMPLATES: Final[dict[ComponentType, ProgressTemplate]] = {
    ComponentType.SPOOL: SPOOL_TEMPLATE,
    ComponentType.FIELD_WELD: FIELD_WELD_TEMPLATE,
    ComponentType.THREADED_PIPE: THREADED_PIPE_TEMPLATE,
}


def template_for(component_type: ComponentType) -> ProgressTemplate:
    return _TEMPLATES.get(component_type, STANDARD_TEMPLATE)


@dataclass(slots=True)
class MilestoneState:
    """Current progress of one record against its template.

    Every mutation goes through :meth:`set`, which refuses to start a milestone
    while an earlier one is incomplete and refuses to reopen a milestone while a
    later one is started.
    """

    template: ProgressTemplate
    values: dict[str, MilestoneValue] = field(default_factory=dict[str, MilestoneValue])

    def __post_init__(self) -> None:
        for milestone in self.template.milestones:
            self.values.setdefault(
                milestone.name, 0 if milestone.kind is MilestoneKind.PARTIAL else False
            )

    @classmethod
    def from_payload(
        cls, template: ProgressTemplate, payload: Mapping[str, MilestoneValue]
    ) -> MilestoneState:
        """Replay a stored payload earliest-first so out-of-order data is rejected."""

        state = template.initial_state()
        unknown = set(payload) - set(template.names)
        if unknown:
            raise MilestoneError(f"Unknown milestones for {template.name}: {sorted(unknown)}")
        for name in template.names:
            if name in payload:
                state.set(name, payload[name])
        return state

    def is_complete(self, name: str) -> bool:
        definition = self.template.definition(name)
        value = self.values[name]
        if definition.kind is MilestoneKind.PARTIAL:
            return value == 100
        return value is True

    def is_started(self, name: str) -> bool:
        self.template.index_of(name)
        value = self.values[name]
        return value is True or (not isinstance(value, bool) and value > 0)

    def complete(self, name: str) -> None:
        definition = self.template.definition(name)
        self.set(name, 100 if definition.kind is MilestoneKind.PARTIAL else True)

    def set(self, name: str, value: MilestoneValue) -> None:
        index = self.template.index_of(name)
        definition = self.template.milestones[index]
        coerced = self._coerce(definition, value)
        starting = coerced is True or (not isinstance(coerced, bool) and coerced > 0)

        if starting:
            blocking = [
                earlier.name
                for earlier in self.template.milestones[:index]
                if not self.is_complete(earlier.name)
            ]
            if blocking:
                raise MilestoneSequenceError(
                    f"Cannot start {name!r} before completing {', '.join(blocking)}"
                )
        finishing = coerced is True or coerced == 100
        if not finishing:
            later = [
                following.name
                for following in self.template.milestones[index + 1 :]
                if self.is_started(following.name)
            ]
            if later:
                raise MilestoneSequenceError(
                    f"Cannot reopen {name!r} while {', '.join(later)} is started"
                )
        self.values[name] = coerced

    @property
    def percent_complete(self) -> float:
        total = 0.0
        for milestone in self.template.milestones:
            value = self.values[milestone.name]
            if milestone.kind is MilestoneKind.PARTIAL:
                total += milestone.weight * int(value) / 100
            elif value is True:
                total += milestone.weight
        return round(total, 2)

    def to_payload(self) -> MilestonePayload:
        return {name: self.values[name] for name in self.template.names}

    @staticmethod
    def _coerce(definition: MilestoneDefinition, value: MilestoneValue) -> MilestoneValue:
        if definition.kind is MilestoneKind.DISCRETE:
            if not isinstance(value, bool):
                raise MilestoneError(f"{definition.name} is discrete; expected a boolean")
            return value
        if isinstance(value, bool) or not 0 <= value <= 100:
            raise MilestoneError(f"{definition.name} is partial; expected 0-100, got {value!r}")
        return int(value)
