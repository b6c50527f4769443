"""Validate weld log rows against their mapping and the project's drawings."""

from __future__ import annotations

from datetime import date, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pipetrak.domain.model import NdeResult, WeldType
from pipetrak.domain.normalization import clean_optional, normalize_drawing
from pipetrak.domain.takeoff import (
    ValidationCategory,
    ValidationReport,
    ValidationResult,
    ValidationStatus,
)
from pipetrak.domain.weld_log.types import WeldLogField, WeldLogRow

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from pipetrak.domain.takeoff import RawRow
    from pipetrak.domain.weld_log.types import WeldLogMappingResult

log = getLogger(__name__)

DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d-%b-%Y",
)
MAX_SIMILAR_DRAWINGS: Final[int] = 5


def parse_weld_date(text: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def similar_drawings(drawing: str, known: Collection[str]) -> list[str]:
    """Known drawings sharing ``drawing``'s prefix, e.g. sheets of the same isometric."""

    prefix = drawing.split("-", 1)[0] + "-"
    return sorted(key for key in known if key.startswith(prefix))[:MAX_SIMILAR_DRAWINGS]


def _error(
    row_number: int, category: ValidationCategory, reason: str
) -> ValidationResult[WeldLogRow]:
    return ValidationResult(
        row_number=row_number, status=ValidationStatus.ERROR, reason=reason, category=category
    )


class WeldLogValidator:
    """Stateful per batch: a weld number may appear once per drawing.

    With ``known_drawings`` set, rows on drawings outside it are errors; weld
    logs only record welds on drawings the take-off already created.
    """

    def __init__(
        self, mapping: WeldLogMappingResult, *, known_drawings: Collection[str] | None = None
    ) -> None:
        self._columns = {
            weld_log_field: mapping.column_for(weld_log_field) for weld_log_field in WeldLogField
        }
        self._known_drawings = known_drawings
        self._seen: set[tuple[str, str]] = set()

    def validate(self, rows: Sequence[RawRow]) -> ValidationReport[WeldLogRow]:
        report: ValidationReport[WeldLogRow] = ValidationReport()
        for index, row in enumerate(rows):
            report.results.append(self.validate_row(row, row_number=index + 1))
        log.info(
            "Validated %s weld log rows: valid=%s, errors=%s",
            report.total_rows,
            report.valid_count,
            report.error_count,
        )
        return report

    def validate_row(self, row: RawRow, *, row_number: int) -> ValidationResult[WeldLogRow]:
        drawing_text = self._value(row, WeldLogField.DRAWING)
        weld_number = self._value(row, WeldLogField.WELD_NUMBER)
        weld_type_text = self._value(row, WeldLogField.WELD_TYPE)

        if not drawing_text:
            return _error(
                row_number,
                ValidationCategory.EMPTY_DRAWING,
                f"Required field {WeldLogField.DRAWING.value} is empty",
            )
        for weld_log_field, value in (
            (WeldLogField.WELD_NUMBER, weld_number),
            (WeldLogField.WELD_TYPE, weld_type_text),
        ):
            if not value:
                return _error(
                    row_number,
                    ValidationCategory.MISSING_REQUIRED_FIELD,
                    f"Required field {weld_log_field.value} is empty",
                )

        weld_type = WeldType.from_label(weld_type_text)
        if weld_type is None:
            return _error(
                row_number,
                ValidationCategory.INVALID_WELD_TYPE,
                f"Unknown weld type {weld_type_text!r} (expected BW, SW, FW or TW)",
            )

        date_text = self._value(row, WeldLogField.DATE_WELDED)
        date_welded = parse_weld_date(date_text) if date_text else None
        if date_text and date_welded is None:
            return _error(
                row_number,
                ValidationCategory.INVALID_DATE,
                f"Date Welded is invalid: {date_text!r}",
            )

        drawing = normalize_drawing(drawing_text)
        if self._known_drawings is not None and drawing not in self._known_drawings:
            similar = similar_drawings(drawing, self._known_drawings)
            hint = (
                f"found similar: {', '.join(similar)}" if similar else f"normalized: {drawing}"
            )
            return _error(
                row_number,
                ValidationCategory.DRAWING_NOT_FOUND,
                f"Drawing not found: {drawing_text} ({hint})",
            )

        if (drawing, weld_number) in self._seen:
            return _error(
                row_number,
                ValidationCategory.DUPLICATE_IDENTITY_KEY,
                f"Duplicate weld {weld_number} on drawing {drawing}",
            )
        self._seen.add((drawing, weld_number))

        data = WeldLogRow(
            row_number=row_number,
            drawing=drawing,
            weld_number=weld_number,
            weld_type=weld_type,
            weld_size=clean_optional(self._value(row, WeldLogField.WELD_SIZE)),
            schedule=clean_optional(self._value(row, WeldLogField.SCHEDULE)),
            base_metal=clean_optional(self._value(row, WeldLogField.BASE_METAL)),
            welder_stencil=clean_optional(self._value(row, WeldLogField.WELDER_STENCIL)),
            date_welded=date_welded,
            nde_result=NdeResult.from_label(self._value(row, WeldLogField.NDE_RESULT)),
        )
        return ValidationResult(row_number=row_number, status=ValidationStatus.VALID, data=data)

    def _value(self, row: RawRow, weld_log_field: WeldLogField) -> str:
        column = self._columns[weld_log_field]
        if column is None:
            return ""
        value = row.get(column)
        return value.strip() if value else ""


def validate_weld_log_rows(
    rows: Sequence[RawRow],
    mapping: WeldLogMappingResult,
    *,
    known_drawings: Collection[str] | None = None,
) -> ValidationReport[WeldLogRow]:
    return WeldLogValidator(mapping, known_drawings=known_drawings).validate(rows)
