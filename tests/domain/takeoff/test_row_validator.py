from __future__ import annotations

import pytest

from pipetrak.domain.model import ComponentType
from pipetrak.domain.takeoff import (
    RowValidator,
    ValidationCategory,
    ValidationStatus,
    map_columns,
)
from tests.support.takeoff import HEADERS, make_row, validate


def _single(row: dict[str, str]) -> tuple[ValidationStatus, ValidationCategory | None]:
    result = validate([row]).results[0]
    return result.status, result.category


def test_empty_drawing_is_an_error() -> None:
    row = {"Drawing": "", "Type": "Valve", "Qty": "2", "Cmdty Code": "X"}

    result = validate([row], headers=list(row)).results[0]

    assert result.status is ValidationStatus.ERROR
    assert result.category is ValidationCategory.EMPTY_DRAWING


def test_unsupported_type_is_skipped_and_import_proceeds() -> None:
    gasket = {"Drawing": "P-1", "Type": "Gasket", "Qty": "1", "Cmdty Code": "X"}
    valve = {"Drawing": "P-1", "Type": "Valve", "Qty": "1", "Cmdty Code": "Y"}

    report = validate([gasket, valve], headers=list(gasket))

    assert report.results[0].status is ValidationStatus.SKIPPED
    assert report.results[0].category is ValidationCategory.UNSUPPORTED_TYPE
    assert report.can_import
    assert report.valid_count == 1


def test_zero_quantity_is_skipped() -> None:
    assert _single(make_row(qty="0")) == (
        ValidationStatus.SKIPPED,
        ValidationCategory.ZERO_QUANTITY,
    )


@pytest.mark.parametrize("field", ["Type", "Qty", "Cmdty Code"])
def test_missing_required_value_is_an_error(field: str) -> None:
    row = dict(make_row())
    row[field] = "  "

    assert _single(row) == (ValidationStatus.ERROR, ValidationCategory.MISSING_REQUIRED_FIELD)


@pytest.mark.parametrize(
    ("qty", "category"),
    [
        ("abc", ValidationCategory.INVALID_QUANTITY),
        ("-1", ValidationCategory.INVALID_QUANTITY),
        ("1.5", ValidationCategory.INVALID_QUANTITY),
        ("nan", ValidationCategory.INVALID_QUANTITY),
        ("12abc", ValidationCategory.MALFORMED_DATA),
    ],
)
def test_bad_quantities(qty: str, category: ValidationCategory) -> None:
    assert _single(make_row(qty=qty)) == (ValidationStatus.ERROR, category)


def test_threaded_pipe_accepts_decimal_linear_feet() -> None:
    result = validate([make_row(component_type="Threaded Pipe", qty="12.5")]).results[0]

    assert result.status is ValidationStatus.VALID
    assert result.data is not None
    assert result.data.component_type is ComponentType.THREADED_PIPE
    assert result.data.quantity == 12.5


def test_duplicate_identity_key_within_batch_is_an_error() -> None:
    rows = [
        make_row(component_type="Spool", cmdty_code="SP-001"),
        make_row(drawing="P-002", component_type="Spool", cmdty_code="SP-001"),
    ]

    report = validate(rows)

    assert report.results[0].status is ValidationStatus.VALID
    assert report.results[1].category is ValidationCategory.DUPLICATE_IDENTITY_KEY
    assert not report.can_import
    assert report.error_details() == [
        {"row": 2, "issue": "Duplicate identity key: SP-001"},
    ]


def test_same_key_for_different_types_is_not_a_duplicate() -> None:
    rows = [
        make_row(component_type="Valve", cmdty_code="X-1"),
        make_row(component_type="Flange", cmdty_code="X-1"),
    ]

    assert validate(rows).valid_count == 2


def test_threaded_pipe_lines_sharing_a_key_are_not_duplicates() -> None:
    rows = [
        make_row(component_type="Threaded_Pipe", qty="10", cmdty_code="PIPE-1"),
        make_row(component_type="Threaded_Pipe", qty="4.5", cmdty_code="PIPE-1"),
    ]

    assert validate(rows).valid_count == 2


def test_valid_row_carries_normalised_values() -> None:
    row = make_row(drawing=" p-001  a ", size='1/2"', Vendor="Acme", Notes="")
    headers = [*HEADERS, "Vendor", "Notes"]

    result = RowValidator(map_columns(headers)).validate_row(row, row_number=7)

    assert result.status is ValidationStatus.VALID
    assert result.data is not None
    assert result.data.row_number == 7
    assert result.data.drawing == "P-001 A"
    assert result.data.size == "1X2"
    assert result.data.area == "B-68"
    assert result.data.unmapped_fields == {"Vendor": "Acme"}


def test_summary_counts_by_status_and_category() -> None:
    report = validate(
        [
            make_row(cmdty_code="A"),
            make_row(qty="0", cmdty_code="B"),
            make_row(component_type="Gasket", cmdty_code="C"),
            make_row(drawing="", cmdty_code="D"),
        ]
    )

    summary = report.summary()

    assert summary["totalRows"] == 4
    assert summary["validCount"] == 1
    assert summary["skippedCount"] == 2
    assert summary["errorCount"] == 1
    assert summary["canImport"] is False
    assert summary["resultsByCategory"] == {
        "zero_quantity": 1,
        "unsupported_type": 1,
        "empty_drawing": 1,
    }
    assert summary["resultsByStatus"] == {"valid": 1, "skipped": 2, "error": 1}


def test_results_by_status_groups_rows_in_input_order() -> None:
    report = validate(
        [
            make_row(qty="0", cmdty_code="A"),
            make_row(cmdty_code="B"),
            make_row(qty="0", cmdty_code="C"),
        ]
    )

    grouped = report.results_by_status

    assert [result.row_number for result in grouped[ValidationStatus.SKIPPED]] == [1, 3]
    assert [result.row_number for result in grouped[ValidationStatus.VALID]] == [2]
    assert grouped[ValidationStatus.ERROR] == []


def test_huge_integer_quantity_is_valid_at_row_level() -> None:
    result = validate([make_row(component_type="Valve", qty="1e9")]).results[0]

    assert result.status is ValidationStatus.VALID
    assert result.data is not None
    assert result.data.unit_count == 1_000_000_000
