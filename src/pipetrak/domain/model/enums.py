"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator for persisted entities, used in logs and result payloads."""

    PROJECT = "project"
    AREA = "area"
    SYSTEM = "system"
    TEST_PACKAGE = "test_package"
    WELDER = "welder"
    DRAWING = "drawing"
    COMPONENT = "component"
    FIELD_WELD = "field_weld"


class ComponentType(StrEnum):
    SPOOL = "spool"
    FIELD_WELD = "field_weld"
    VALVE = "valve"
    INSTRUMENT = "instrument"
    SUPPORT = "support"
    PIPE = "pipe"
    FITTING = "fitting"
    FLANGE = "flange"
    TUBING = "tubing"
    HOSE = "hose"
    MISC_COMPONENT = "misc_component"
    THREADED_PIPE = "threaded_pipe"

    @classmethod
    def from_label(cls, label: str) -> ComponentType | None:
        """Parse a spreadsheet type label such as ``"Field_Weld"`` or ``"Threaded Pipe"``."""

        candidate = "_".join(label.strip().lower().split())
        try:
            return cls(candidate)
        except ValueError:
            return None


class MetadataType(StrEnum):
    """Reference entities implicitly referenced by imported rows."""

    AREA = "area"
    SYSTEM = "system"
    TEST_PACKAGE = "test_package"


class MilestoneKind(StrEnum):
    DISCRETE = "discrete"
    PARTIAL = "partial"


class WeldType(StrEnum):
    BUTT = "BW"
    SOCKET = "SW"
    FILLET = "FW"
    TAPPED = "TW"

    @classmethod
    def from_label(cls, label: str | None) -> WeldType | None:
        if not label:
            return None
        text = label.strip().upper()
        for weld_type in cls:
            if text in {weld_type.value, weld_type.name}:
                return weld_type
        return None


class NdeResult(StrEnum):
    PASS = "PASS"
    FAIL = "FAIL"
    PENDING = "PENDING"

    @classmethod
    def from_label(cls, label: str | None) -> NdeResult | None:
        """Unrecognised results are dropped rather than rejected."""

        if not label:
            return None
        try:
            return cls(label.strip().upper())
        except ValueError:
            return None

    @property
    def implies_welded(self) -> bool:
        return self is not NdeResult.PENDING
