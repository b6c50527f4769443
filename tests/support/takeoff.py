"""Builders for take-off rows and sheets used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pipetrak.domain.takeoff import map_columns, validate_rows

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pipetrak.domain.takeoff import RawRow, TakeoffRow, ValidationReport

HEADERS: tuple[str, ...] = (
    "Drawing",
    "Type",
    "Qty",
    "Cmdty Code",
    "Size",
    "Spec",
    "Area",
    "System",
    "Test Package",
)


def make_row(
    drawing: str = "P-001",
    component_type: str = "Valve",
    qty: str = "1",
    cmdty_code: str = "VBALU-001",
    *,
    size: str = '2"',
    spec: str = "ES-03",
    area: str = "B-68",
    system: str = "Steam",
    test_package: str = "TP-01",
    **extra: str,
) -> RawRow:
    row = {
        "Drawing": drawing,
        "Type": component_type,
        "Qty": qty,
        "Cmdty Code": cmdty_code,
        "Size": size,
        "Spec": spec,
        "Area": area,
        "System": system,
        "Test Package": test_package,
    }
    row.update(extra)
    return row


def validate(rows: Sequence[RawRow], headers: Sequence[str] = HEADERS) -> ValidationReport:
    return validate_rows(rows, map_columns(headers))


def valid_rows(rows: Sequence[RawRow], headers: Sequence[str] = HEADERS) -> list[TakeoffRow]:
    return validate(rows, headers).valid_rows()


def standard_rows(count: int, *, drawings: int = 10) -> list[RawRow]:
    """``count`` single-unit valve rows spread over ``drawings`` drawings."""

    return [
        make_row(
            drawing=f"P-{(index % drawings) + 1:03d}",
            cmdty_code=f"VBALU-{index:04d}",
        )
        for index in range(count)
    ]
