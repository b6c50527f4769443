"""Write plan: every record one invocation intends to persist, keyed naturally."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pipetrak.domain.model import MetadataType, WeldType, normalize_stencil
from pipetrak.domain.normalization import normalize_drawing

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from datetime import date
    from uuid import UUID

    from pipetrak.domain.model import ComponentType, IdentityKey, NdeResult
    from pipetrak.domain.model.milestones import MilestoneValue


@dataclass(frozen=True, slots=True)
class PlannedDrawing:
    drawing_no: str
    title: str | None = None
    area: str | None = None
    system: str | None = None
    test_package: str | None = None

    @property
    def key(self) -> str:
        return normalize_drawing(self.drawing_no)


@dataclass(frozen=True, slots=True)
class PlannedComponent:
    """A component to create; ``progress`` is applied in template order after insert."""

    component_type: ComponentType
    identity: IdentityKey
    drawing_no: str | None
    area: str | None = None
    system: str | None = None
    test_package: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict[str, Any])
    progress: Mapping[str, MilestoneValue] = field(default_factory=dict)
    source_row: int | None = None

    @property
    def key(self) -> tuple[ComponentType, str]:
        return (self.component_type, self.identity.token())


@dataclass(frozen=True, slots=True)
class PlannedWeld:
    """A weld to create; welder and date only fill a stored weld that has neither."""

    drawing_no: str
    weld_number: str
    weld_type: WeldType = WeldType.BUTT
    base_metal: str | None = None
    weld_size: str | None = None
    schedule: str | None = None
    nde_result: NdeResult | None = None
    welder_stencil: str | None = None
    date_welded: date | None = None
    progress: Mapping[str, MilestoneValue] = field(default_factory=dict)
    source_row: int | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (normalize_drawing(self.drawing_no), self.weld_number)


@dataclass(frozen=True, slots=True)
class PlannedWelder:
    stencil: str
    name: str

    @property
    def key(self) -> str:
        return normalize_stencil(self.stencil)


@dataclass(slots=True)
class ImportPlan:
    """Container for everything a single write invocation persists.

    Collections keep insertion order and ignore repeated natural keys (first
    occurrence wins), so planners can add freely while walking their source.
    With ``auto_assign_welders`` set, welds that carry no stencil of their own
    get the planned welders round-robin once their welder-gated milestone is
    complete.
    """

    project_id: UUID
    auto_assign_welders: bool = False
    references: dict[MetadataType, list[str]] = field(
        default_factory=lambda: {metadata_type: [] for metadata_type in MetadataType}
    )
    welders: list[PlannedWelder] = field(default_factory=list[PlannedWelder])
    drawings: list[PlannedDrawing] = field(default_factory=list[PlannedDrawing])
    components: list[PlannedComponent] = field(default_factory=list[PlannedComponent])
    welds: list[PlannedWeld] = field(default_factory=list[PlannedWeld])

    _drawing_keys: set[str] = field(default_factory=set, init=False, repr=False)
    _component_keys: set[tuple[ComponentType, str]] = field(
        default_factory=set, init=False, repr=False
    )
    _weld_keys: set[tuple[str, str]] = field(default_factory=set, init=False, repr=False)
    _welder_keys: set[str] = field(default_factory=set, init=False, repr=False)

    def add_reference(self, metadata_type: MetadataType, name: str | None) -> None:
        if name and name not in self.references[metadata_type]:
            self.references[metadata_type].append(name)

    def add_welder(self, welder: PlannedWelder) -> None:
        if welder.key not in self._welder_keys:
            self._welder_keys.add(welder.key)
            self.welders.append(welder)

    def add_drawing(self, drawing: PlannedDrawing) -> None:
        if drawing.key in self._drawing_keys:
            return
        self._drawing_keys.add(drawing.key)
        self.drawings.append(drawing)
        self.add_reference(MetadataType.AREA, drawing.area)
        self.add_reference(MetadataType.SYSTEM, drawing.system)
        self.add_reference(MetadataType.TEST_PACKAGE, drawing.test_package)

    def add_component(self, component: PlannedComponent) -> bool:
        """Add ``component``; return ``False`` when its identity key was already planned."""

        if component.key in self._component_keys:
            return False
        self._component_keys.add(component.key)
        self.components.append(component)
        self.add_reference(MetadataType.AREA, component.area)
        self.add_reference(MetadataType.SYSTEM, component.system)
        self.add_reference(MetadataType.TEST_PACKAGE, component.test_package)
        return True

    def add_weld(self, weld: PlannedWeld) -> bool:
        if weld.key in self._weld_keys:
            return False
        self._weld_keys.add(weld.key)
        self.welds.append(weld)
        return True

    def component_batches(self, size: int) -> Iterator[list[PlannedComponent]]:
        for start in range(0, len(self.components), size):
            yield self.components[start : start + size]

    def weld_batches(self, size: int) -> Iterator[list[PlannedWeld]]:
        for start in range(0, len(self.welds), size):
            yield self.welds[start : start + size]

    @property
    def is_empty(self) -> bool:
        return not (self.drawings or self.components or self.welds)
