"""Value types shared by the column mapper, row validator and metadata discovery."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

    from pipetrak.domain.model import ComponentType, MetadataType

type RawRow = Mapping[str, str]


class ExpectedField(StrEnum):
    DRAWING = "DRAWING"
    TYPE = "TYPE"
    QTY = "QTY"
    CMDTY_CODE = "CMDTY CODE"
    SIZE = "SIZE"
    SPEC = "SPEC"
    DESCRIPTION = "DESCRIPTION"
    COMMENTS = "COMMENTS"
    AREA = "AREA"
    SYSTEM = "SYSTEM"
    TEST_PACKAGE = "TEST_PACKAGE"

    @property
    def required(self) -> bool:
        return self in REQUIRED_FIELDS


REQUIRED_FIELDS: frozenset[ExpectedField] = frozenset(
    {ExpectedField.DRAWING, ExpectedField.TYPE, ExpectedField.QTY, ExpectedField.CMDTY_CODE}
)


class MatchTier(StrEnum):
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    SYNONYM = "synonym"

    @property
    def confidence(self) -> Confidence:
        return _CONFIDENCE_BY_TIER[self]


class Confidence(IntEnum):
    EXACT = 100
    CASE_INSENSITIVE = 95
    SYNONYM = 85


_CONFIDENCE_BY_TIER: dict[MatchTier, Confidence] = {
    MatchTier.EXACT: Confidence.EXACT,
    MatchTier.CASE_INSENSITIVE: Confidence.CASE_INSENSITIVE,
    MatchTier.SYNONYM: Confidence.SYNONYM,
}


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    input_column: str
    expected_field: ExpectedField
    match_tier: MatchTier

    @property
    def confidence(self) -> int:
        return int(self.match_tier.confidence)


@dataclass(frozen=True, slots=True)
class ColumnMappingResult:
    mappings: tuple[ColumnMapping, ...]
    unmapped_columns: tuple[str, ...]
    missing_required_fields: tuple[ExpectedField, ...]

    @property
    def has_all_required_fields(self) -> bool:
        return not self.missing_required_fields

    @property
    def lookup(self) -> dict[str, ExpectedField]:
        """Input header -> expected field."""

        return {mapping.input_column: mapping.expected_field for mapping in self.mappings}

    def column_for(self, expected_field: ExpectedField) -> str | None:
        for mapping in self.mappings:
            if mapping.expected_field is expected_field:
                return mapping.input_column
        return None


class ValidationStatus(StrEnum):
    VALID = "valid"
    SKIPPED = "skipped"
    ERROR = "error"


class ValidationCategory(StrEnum):
    UNSUPPORTED_TYPE = "unsupported_type"
    ZERO_QUANTITY = "zero_quantity"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    DUPLICATE_IDENTITY_KEY = "duplicate_identity_key"
    EMPTY_DRAWING = "empty_drawing"
    INVALID_QUANTITY = "invalid_quantity"
    MALFORMED_DATA = "malformed_data"
    MISSING_REQUIRED_COLUMNS = "missing_required_columns"
    INVALID_WELD_TYPE = "invalid_weld_type"
    INVALID_DATE = "invalid_date"
    DRAWING_NOT_FOUND = "drawing_not_found"


@dataclass(frozen=True, slots=True)
class TakeoffRow:
    """A validated take-off line with normalised natural-key parts."""

    row_number: int
    drawing: str
    component_type: ComponentType
    quantity: float
    commodity_code: str
    size: str
    spec: str | None = None
    description: str | None = None
    comments: str | None = None
    area: str | None = None
    system: str | None = None
    test_package: str | None = None
    unmapped_fields: Mapping[str, str] = field(default_factory=dict[str, str])

    @property
    def unit_count(self) -> int:
        return int(self.quantity)

    def reference(self, metadata_type: MetadataType) -> str | None:
        return getattr(self, metadata_type.value)


@dataclass(frozen=True, slots=True)
class ValidationResult[TRow]:
    row_number: int
    status: ValidationStatus
    data: TRow | None = None
    reason: str | None = None
    category: ValidationCategory | None = None


@dataclass(frozen=True, slots=True)
class MetadataDiscoveryItem:
    type: MetadataType
    value: str
    exists: bool
    record_id: UUID | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "value": self.value,
            "exists": self.exists,
            "recordId": str(self.record_id) if self.record_id else None,
        }
