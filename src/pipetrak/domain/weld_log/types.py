"""Value types for weld log sheets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from pipetrak.domain.model import NdeResult, WeldType
    from pipetrak.domain.takeoff import MatchTier


class WeldLogField(StrEnum):
    WELD_NUMBER = "Weld ID Number"
    DRAWING = "Drawing / Isometric Number"
    WELD_TYPE = "Weld Type"
    WELD_SIZE = "Weld Size"
    SCHEDULE = "Schedule"
    BASE_METAL = "Base Metal"
    WELDER_STENCIL = "Welder Stencil"
    DATE_WELDED = "Date Welded"
    NDE_RESULT = "NDE Result"

    @property
    def required(self) -> bool:
        return self in WELD_LOG_REQUIRED_FIELDS


WELD_LOG_REQUIRED_FIELDS: frozenset[WeldLogField] = frozenset(
    {WeldLogField.WELD_NUMBER, WeldLogField.DRAWING, WeldLogField.WELD_TYPE}
)


@dataclass(frozen=True, slots=True)
class WeldLogColumnMapping:
    input_column: str
    field: WeldLogField
    match_tier: MatchTier

    @property
    def confidence(self) -> int:
        return int(self.match_tier.confidence)


@dataclass(frozen=True, slots=True)
class WeldLogMappingResult:
    mappings: tuple[WeldLogColumnMapping, ...]
    unmapped_columns: tuple[str, ...]
    missing_required_fields: tuple[WeldLogField, ...]

    @property
    def has_all_required_fields(self) -> bool:
        return not self.missing_required_fields

    def column_for(self, weld_log_field: WeldLogField) -> str | None:
        for mapping in self.mappings:
            if mapping.field is weld_log_field:
                return mapping.input_column
        return None


@dataclass(frozen=True, slots=True)
class WeldLogRow:
    """A validated weld log line; ``drawing`` is already normalised."""

    row_number: int
    drawing: str
    weld_number: str
    weld_type: WeldType
    weld_size: str | None = None
    schedule: str | None = None
    base_metal: str | None = None
    welder_stencil: str | None = None
    date_welded: date | None = None
    nde_result: NdeResult | None = None

    @property
    def is_welded(self) -> bool:
        return self.date_welded is not None or (
            self.nde_result is not None and self.nde_result.implies_welded
        )
