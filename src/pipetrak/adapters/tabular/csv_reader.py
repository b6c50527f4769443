"""Read take-off spreadsheets exported as CSV."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pipetrak.config.imports import BYTES_PER_MB, ImportLimits
from pipetrak.domain.errors import ImportLimitError

if TYPE_CHECKING:
    from pathlib import Path

    from pipetrak.domain.takeoff import RawRow

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TakeoffSheet:
    headers: list[str]
    rows: list[RawRow]


def read_takeoff_csv(path: Path, *, limits: ImportLimits | None = None) -> TakeoffSheet:
    """Load ``path`` into header names and raw rows.

    Cells are stripped and fully blank lines are dropped. Files over the byte
    limit are rejected before reading; the row limit counts data rows only.
    """

    active_limits = limits or ImportLimits()
    size = path.stat().st_size
    if size > active_limits.max_file_bytes:
        raise ImportLimitError(
            f"File too large: {size / BYTES_PER_MB:.2f}MB (max {active_limits.max_file_mb}MB)"
        )

    # utf-8-sig drops the BOM spreadsheet tools like to prepend
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        headers = [header.strip() for header in reader.fieldnames or []]
        rows: list[RawRow] = []
        for record in reader:
            row = {
                header.strip(): (value or "").strip()
                for header, value in record.items()
                if header is not None and isinstance(value, str | None)
            }
            if not any(row.values()):
                continue
            rows.append(row)
            if len(rows) > active_limits.max_rows:
                raise ImportLimitError(
                    f"Too many rows: more than {active_limits.max_rows} in {path.name}"
                )

    log.info("Read %s row(s) with %s column(s) from %s", len(rows), len(headers), path)
    return TakeoffSheet(headers=headers, rows=rows)
