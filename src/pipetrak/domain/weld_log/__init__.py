"""Weld log sheets: welder stencils, weld dates and NDE results per field weld."""

from __future__ import annotations

from .column_mapper import WELD_LOG_SYNONYMS, map_weld_log_columns
from .types import (
    WELD_LOG_REQUIRED_FIELDS,
    WeldLogColumnMapping,
    WeldLogField,
    WeldLogMappingResult,
    WeldLogRow,
)
from .validator import (
    WeldLogValidator,
    parse_weld_date,
    similar_drawings,
    validate_weld_log_rows,
)

__all__ = [
    "WELD_LOG_REQUIRED_FIELDS",
    "WELD_LOG_SYNONYMS",
    "WeldLogColumnMapping",
    "WeldLogField",
    "WeldLogMappingResult",
    "WeldLogRow",
    "WeldLogValidator",
    "map_weld_log_columns",
    "parse_weld_date",
    "similar_drawings",
    "validate_weld_log_rows",
]
