"""Fixed skeleton of the demo project: reference data, drawings and commodity codes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from pipetrak.domain.model import ComponentType


@dataclass(frozen=True, slots=True)
class DemoDrawing:
    drawing_no: str
    title: str
    area: str
    system: str


@dataclass(frozen=True, slots=True)
class DemoWelder:
    stencil: str
    name: str


AREAS: Final[tuple[str, ...]] = (
    "Pipe Rack",
    "ISBL",
    "Containment Area",
    "Water Process",
    "Cooling Tower",
)

SYSTEMS: Final[tuple[str, ...]] = ("Air", "Nitrogen", "Steam", "Process", "Condensate")

TEST_PACKAGES: Final[tuple[str, ...]] = tuple(f"TP-{number:02d}" for number in range(1, 11))

WELDERS: Final[tuple[DemoWelder, ...]] = (
    DemoWelder(stencil="JD-123", name="John Davis"),
    DemoWelder(stencil="SM-456", name="Sarah Miller"),
    DemoWelder(stencil="TR-789", name="Tom Rodriguez"),
    DemoWelder(stencil="KL-012", name="Kim Lee"),
)


def _drawings(prefix: str, area: str, systems: tuple[str, ...]) -> tuple[DemoDrawing, ...]:
    return tuple(
        DemoDrawing(
            drawing_no=f"ISO-{prefix}-{number:03d}",
            title=f"{area} {system} Isometric {number}",
            area=area,
            system=system,
        )
        for number, system in enumerate(systems, 1)
    )


DRAWINGS: Final[tuple[DemoDrawing, ...]] = (
    *_drawings(
        "PR", "Pipe Rack", ("Steam", "Process", "Air", "Nitrogen", "Condensate", "Steam")
    ),
    *_drawings("ISBL", "ISBL", ("Process", "Steam", "Air", "Nitrogen", "Condensate")),
    *_drawings("CA", "Containment Area", ("Process", "Steam", "Air")),
    *_drawings("WP", "Water Process", ("Process", "Condensate", "Steam")),
    *_drawings("CT", "Cooling Tower", ("Process", "Condensate", "Air")),
)

COMMODITY_CODES: Final[dict[ComponentType, tuple[str, ...]]] = {
    ComponentType.VALVE: (
        "VBALP-DICBFLR01M-024",
        "VBALU-PFCBFLF00M-001",
        "VCHKU-SECBFEQ00Q-008",
        "VGATU-SECBFLR02F-025",
    ),
    ComponentType.SUPPORT: (
        "G4G-1412-05AA-001-1-1",
        "G4G-1412-05AA-001-6-6",
        "G4G-1430-05AB",
    ),
    ComponentType.FLANGE: ("FBLABLDRA3399531", "FBLABLDRAWF0261", "FBLAG2DFA2351215"),
    ComponentType.INSTRUMENT: ("FE-55403", "ME-55403", "PIT-55402", "PIT-55406"),
}

SIZES: Final[tuple[str, ...]] = ("1", "1.5", "2", "3", "4", "6", "8")

SPOOL_COUNT: Final[int] = 40
SUPPORTS_PER_SPOOL: Final[int] = 2
VALVE_COUNT: Final[int] = 50
INSTRUMENT_COUNT: Final[int] = 10
WELDS_PER_SPOOL: Final[int] = 3

SPOOL_COMMODITY: Final[str] = "SPOOL"
SPOOL_SPEC: Final[str] = "A106-B"
WELD_MATERIAL: Final[str] = "CS"
