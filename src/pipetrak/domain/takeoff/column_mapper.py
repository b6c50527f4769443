"""Map arbitrary spreadsheet headers onto the expected take-off fields."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from pipetrak.domain.takeoff.types import (
    ColumnMapping,
    ColumnMappingResult,
    ExpectedField,
    MatchTier,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

log = getLogger(__name__)

SYNONYMS: Final[dict[ExpectedField, frozenset[str]]] = {
    ExpectedField.DRAWING: frozenset(
        {"DRAWINGS", "DRAWING NUMBER", "DWG", "DWG NO", "DWG NUM"}
    ),
    ExpectedField.CMDTY_CODE: frozenset(
        {"COMMODITY CODE", "CMDTY", "COMMODITY", "CODE", "PART CODE"}
    ),
    ExpectedField.AREA: frozenset({"AREAS", "LOCATION", "ZONE"}),
    ExpectedField.SYSTEM: frozenset({"SYSTEMS", "SYS"}),
    ExpectedField.TEST_PACKAGE: frozenset({"TEST PACKAGE", "TEST PKG", "PKG", "PACKAGE"}),
    ExpectedField.SIZE: frozenset({"NOM SIZE", "NOMINAL SIZE", "NOMSIZE"}),
    ExpectedField.QTY: frozenset({"QUANTITY", "COUNT", "CNT"}),
    ExpectedField.SPEC: frozenset({"SPECIFICATION", "MATERIAL SPEC", "MAT SPEC"}),
    ExpectedField.COMMENTS: frozenset({"COMMENT", "NOTES", "NOTE", "REMARKS"}),
}


def _exact(header: str, expected: ExpectedField) -> bool:
    return header == expected.value


def _case_insensitive(header: str, expected: ExpectedField) -> bool:
    return header.strip().upper() == expected.value


def _synonym(header: str, expected: ExpectedField) -> bool:
    return header.strip().upper() in SYNONYMS.get(expected, frozenset())


_TIERS: Final[tuple[tuple[MatchTier, Callable[[str, ExpectedField], bool]], ...]] = (
    (MatchTier.EXACT, _exact),
    (MatchTier.CASE_INSENSITIVE, _case_insensitive),
    (MatchTier.SYNONYM, _synonym),
)


def map_columns(headers: Sequence[str]) -> ColumnMappingResult:
    """Return the best mapping for ``headers``.

    Fields are visited in declaration order and each tries the tiers strongest
    first; the first unclaimed header matching a tier wins and is never offered
    to another field. Missing required fields are reported, never raised.
    """

    claimed: set[str] = set()
    mappings: list[ColumnMapping] = []
    missing: list[ExpectedField] = []

    for expected in ExpectedField:
        mapping = _match_field(expected, headers, claimed)
        if mapping is None:
            if expected.required:
                missing.append(expected)
            continue
        claimed.add(mapping.input_column)
        mappings.append(mapping)

    unmapped = tuple(header for header in headers if header not in claimed)
    result = ColumnMappingResult(
        mappings=tuple(mappings),
        unmapped_columns=unmapped,
        missing_required_fields=tuple(missing),
    )
    log.debug(
        "Mapped %s of %s columns (missing required: %s)",
        len(mappings),
        len(headers),
        [field.value for field in missing],
    )
    return result


def _match_field(
    expected: ExpectedField, headers: Sequence[str], claimed: set[str]
) -> ColumnMapping | None:
    for tier, matches in _TIERS:
        for header in headers:
            if header in claimed:
                continue
            if matches(header, expected):
                return ColumnMapping(input_column=header, expected_field=expected, match_tier=tier)
    return None
