"""Classify mapped take-off rows as valid, skipped or error.

Skips (zero quantity, unsupported type) never block an import; any error row
blocks the whole batch so the source file gets fixed once instead of producing
partial imports.
"""

from __future__ import annotations

import math
import re
from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pipetrak.domain.model import ComponentType, build_identity_key
from pipetrak.domain.normalization import clean_optional, normalize_drawing, normalize_size
from pipetrak.domain.takeoff.types import (
    ExpectedField,
    TakeoffRow,
    ValidationCategory,
    ValidationResult,
    ValidationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pipetrak.domain.takeoff.types import ColumnMappingResult, RawRow

log = getLogger(__name__)

_NUMBER: Final[re.Pattern[str]] = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_NUMBER: Final[re.Pattern[str]] = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

# Quantities of these types are linear feet rather than unit counts.
_FRACTIONAL_QUANTITY_TYPES: Final[frozenset[ComponentType]] = frozenset(
    {ComponentType.THREADED_PIPE}
)


@dataclass(slots=True)
class ValidationReport[TRow]:
    """Per-row outcomes of one validation pass, in input order."""

    results: list[ValidationResult[TRow]] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.results)

    @property
    def valid_count(self) -> int:
        return self._count(ValidationStatus.VALID)

    @property
    def skipped_count(self) -> int:
        return self._count(ValidationStatus.SKIPPED)

    @property
    def error_count(self) -> int:
        return self._count(ValidationStatus.ERROR)

    @property
    def can_import(self) -> bool:
        return self.error_count == 0

    @property
    def results_by_status(self) -> dict[ValidationStatus, list[ValidationResult[TRow]]]:
        grouped: dict[ValidationStatus, list[ValidationResult[TRow]]] = {
            status: [] for status in ValidationStatus
        }
        for result in self.results:
            grouped[result.status].append(result)
        return grouped

    @property
    def results_by_category(self) -> dict[ValidationCategory, list[ValidationResult[TRow]]]:
        grouped: defaultdict[ValidationCategory, list[ValidationResult[TRow]]] = defaultdict(list)
        for result in self.results:
            if result.category is not None:
                grouped[result.category].append(result)
        return dict(grouped)

    def valid_rows(self) -> list[TRow]:
        return [result.data for result in self.results if result.data is not None]

    def error_details(self) -> list[dict[str, Any]]:
        return [
            {"row": result.row_number, "issue": result.reason}
            for result in self.results
            if result.status is ValidationStatus.ERROR
        ]

    def summary(self) -> dict[str, Any]:
        return {
            "totalRows": self.total_rows,
            "validCount": self.valid_count,
            "skippedCount": self.skipped_count,
            "errorCount": self.error_count,
            "canImport": self.can_import,
            "resultsByStatus": {
                status.value: len(results) for status, results in self.results_by_status.items()
            },
            "resultsByCategory": {
                category.value: len(results)
                for category, results in self.results_by_category.items()
            },
        }

    def _count(self, status: ValidationStatus) -> int:
        return sum(1 for result in self.results if result.status is status)


def _error(
    row_number: int, category: ValidationCategory, reason: str
) -> ValidationResult[TakeoffRow]:
    return ValidationResult(
        row_number=row_number, status=ValidationStatus.ERROR, reason=reason, category=category
    )


def _skip(
    row_number: int, category: ValidationCategory, reason: str
) -> ValidationResult[TakeoffRow]:
    return ValidationResult(
        row_number=row_number, status=ValidationStatus.SKIPPED, reason=reason, category=category
    )


class RowValidator:
    """Stateful per batch: remembers identity keys already seen."""

    def __init__(self, mapping: ColumnMappingResult) -> None:
        self._columns = {
            expected: mapping.column_for(expected) for expected in ExpectedField
        }
        self._mapped_headers = set(mapping.lookup)
        self._seen_keys: set[tuple[ComponentType, str]] = set()

    def validate(self, rows: Sequence[RawRow]) -> ValidationReport[TakeoffRow]:
        report: ValidationReport[TakeoffRow] = ValidationReport()
        for index, row in enumerate(rows):
            report.results.append(self.validate_row(row, row_number=index + 1))
        log.info(
            "Validated %s rows: valid=%s, skipped=%s, errors=%s",
            report.total_rows,
            report.valid_count,
            report.skipped_count,
            report.error_count,
        )
        return report

    def validate_row(self, row: RawRow, *, row_number: int) -> ValidationResult[TakeoffRow]:
        drawing = self._value(row, ExpectedField.DRAWING)
        type_label = self._value(row, ExpectedField.TYPE)
        commodity_code = self._value(row, ExpectedField.CMDTY_CODE)
        quantity_text = self._value(row, ExpectedField.QTY)

        if not drawing:
            return _error(
                row_number, ValidationCategory.EMPTY_DRAWING, "Required field DRAWING is empty"
            )
        for expected, value in (
            (ExpectedField.TYPE, type_label),
            (ExpectedField.CMDTY_CODE, commodity_code),
            (ExpectedField.QTY, quantity_text),
        ):
            if not value:
                return _error(
                    row_number,
                    ValidationCategory.MISSING_REQUIRED_FIELD,
                    f"Required field {expected.value} is empty",
                )

        component_type = ComponentType.from_label(type_label)
        quantity_or_error = self._parse_quantity(quantity_text, component_type, row_number)
        if isinstance(quantity_or_error, ValidationResult):
            return quantity_or_error
        quantity = quantity_or_error

        if quantity == 0:
            return _skip(row_number, ValidationCategory.ZERO_QUANTITY, "Component quantity is 0")
        if component_type is None:
            return _skip(
                row_number,
                ValidationCategory.UNSUPPORTED_TYPE,
                f"Unsupported component type: {type_label}",
            )

        drawing_norm = normalize_drawing(drawing)
        size = normalize_size(self._value(row, ExpectedField.SIZE))
        key = build_identity_key(
            component_type, drawing_norm=drawing_norm, commodity_code=commodity_code, size=size
        )
        seen = (component_type, key.token())
        if component_type is not ComponentType.THREADED_PIPE:
            if seen in self._seen_keys:
                return _error(
                    row_number,
                    ValidationCategory.DUPLICATE_IDENTITY_KEY,
                    f"Duplicate identity key: {key.label()}",
                )
            self._seen_keys.add(seen)

        data = TakeoffRow(
            row_number=row_number,
            drawing=drawing_norm,
            component_type=component_type,
            quantity=quantity,
            commodity_code=commodity_code,
            size=size,
            spec=clean_optional(self._value(row, ExpectedField.SPEC)),
            description=clean_optional(self._value(row, ExpectedField.DESCRIPTION)),
            comments=clean_optional(self._value(row, ExpectedField.COMMENTS)),
            area=clean_optional(self._value(row, ExpectedField.AREA)),
            system=clean_optional(self._value(row, ExpectedField.SYSTEM)),
            test_package=clean_optional(self._value(row, ExpectedField.TEST_PACKAGE)),
            unmapped_fields={
                header: value
                for header, value in row.items()
                if header not in self._mapped_headers and value and value.strip()
            },
        )
        return ValidationResult(row_number=row_number, status=ValidationStatus.VALID, data=data)

    def _value(self, row: RawRow, expected: ExpectedField) -> str:
        column = self._columns[expected]
        if column is None:
            return ""
        value = row.get(column)
        return value.strip() if value else ""

    @staticmethod
    def _parse_quantity(
        text: str, component_type: ComponentType | None, row_number: int
    ) -> float | ValidationResult[TakeoffRow]:
        if not _NUMBER.fullmatch(text):
            if _LEADING_NUMBER.match(text):
                return _error(
                    row_number,
                    ValidationCategory.MALFORMED_DATA,
                    f"QTY is malformed: {text!r}",
                )
            return _error(row_number, ValidationCategory.INVALID_QUANTITY, "QTY must be a number")
        quantity = float(text)
        if not math.isfinite(quantity):
            return _error(row_number, ValidationCategory.INVALID_QUANTITY, "QTY must be a number")
        if quantity < 0:
            return _error(row_number, ValidationCategory.INVALID_QUANTITY, "QTY must be >= 0")
        if not quantity.is_integer() and component_type not in _FRACTIONAL_QUANTITY_TYPES:
            return _error(
                row_number, ValidationCategory.INVALID_QUANTITY, "QTY must be an integer"
            )
        return quantity


def validate_rows(
    rows: Sequence[RawRow], mapping: ColumnMappingResult
) -> ValidationReport[TakeoffRow]:
    """Validate one batch; duplicate detection spans exactly this call."""

    return RowValidator(mapping).validate(rows)
