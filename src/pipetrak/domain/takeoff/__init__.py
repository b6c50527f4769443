"""Pure stages that turn raw take-off rows into validated, mapped data."""

from __future__ import annotations

from .column_mapper import SYNONYMS, map_columns
from .metadata_discovery import MetadataDiscoveryResult, discover_metadata, referenced_names
from .row_validator import RowValidator, ValidationReport, validate_rows
from .types import (
    REQUIRED_FIELDS,
    ColumnMapping,
    ColumnMappingResult,
    ExpectedField,
    MatchTier,
    MetadataDiscoveryItem,
    RawRow,
    TakeoffRow,
    ValidationCategory,
    ValidationResult,
    ValidationStatus,
)

__all__ = [
    "REQUIRED_FIELDS",
    "SYNONYMS",
    "ColumnMapping",
    "ColumnMappingResult",
    "ExpectedField",
    "MatchTier",
    "MetadataDiscoveryItem",
    "MetadataDiscoveryResult",
    "RawRow",
    "RowValidator",
    "TakeoffRow",
    "ValidationCategory",
    "ValidationReport",
    "ValidationResult",
    "ValidationStatus",
    "discover_metadata",
    "map_columns",
    "referenced_names",
    "validate_rows",
]
