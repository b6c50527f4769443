"""Map weld log headers onto :class:`WeldLogField` with the take-off match tiers."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pipetrak.domain.takeoff import MatchTier
from pipetrak.domain.weld_log.types import (
    WeldLogColumnMapping,
    WeldLogField,
    WeldLogMappingResult,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)

WELD_LOG_SYNONYMS: Final[dict[WeldLogField, frozenset[str]]] = {
    WeldLogField.WELD_NUMBER: frozenset(
        {"WELD #", "WLD #", "WELD NO", "WELD NUMBER", "WELD ID", "WELD"}
    ),
    WeldLogField.DRAWING: frozenset(
        {"ISO", "ISOMETRIC", "ISO NUMBER", "DRAWING", "DRAWING NUMBER", "DWG", "DWG NO"}
    ),
    WeldLogField.WELD_TYPE: frozenset({"TYPE", "WELD_TYPE", "WELDTYPE"}),
    WeldLogField.WELD_SIZE: frozenset({"SIZE", "WELD_SIZE"}),
    WeldLogField.SCHEDULE: frozenset({"SCH", "SCHED"}),
    WeldLogField.BASE_METAL: frozenset({"MATERIAL", "BASE MATERIAL"}),
    WeldLogField.WELDER_STENCIL: frozenset({"STENCIL", "WELDER", "WELDER ID"}),
    WeldLogField.DATE_WELDED: frozenset({"WELD DATE", "DATE", "WELDED"}),
    WeldLogField.NDE_RESULT: frozenset({"STATUS", "NDE STATUS", "RESULT"}),
}

_SLASH: Final[re.Pattern[str]] = re.compile(r"\s*/\s*")


def _spacing(header: str) -> str:
    """``"Drawing/Isometric  Number"`` -> ``"Drawing / Isometric Number"``."""

    return " ".join(_SLASH.sub(" / ", header.strip()).split())


def _tier(header: str, weld_log_field: WeldLogField) -> MatchTier | None:
    spaced = _spacing(header)
    if spaced == weld_log_field.value:
        return MatchTier.EXACT
    if spaced.upper() == weld_log_field.value.upper():
        return MatchTier.CASE_INSENSITIVE
    if spaced.upper() in WELD_LOG_SYNONYMS.get(weld_log_field, frozenset()):
        return MatchTier.SYNONYM
    return None


def map_weld_log_columns(headers: Sequence[str]) -> WeldLogMappingResult:
    """Match every weld log field to at most one header, strongest tier first.

    Spacing around slashes is ignored, so ``Drawing/Isometric Number`` is an
    exact match. Blank headers are neither mapped nor reported as unmapped.
    """

    candidates = [header for header in headers if header.strip()]
    claimed: set[str] = set()
    mappings: list[WeldLogColumnMapping] = []
    missing: list[WeldLogField] = []

    for weld_log_field in WeldLogField:
        best: WeldLogColumnMapping | None = None
        for tier in MatchTier:
            best = next(
                (
                    WeldLogColumnMapping(
                        input_column=header, field=weld_log_field, match_tier=tier
                    )
                    for header in candidates
                    if header not in claimed and _tier(header, weld_log_field) is tier
                ),
                None,
            )
            if best is not None:
                break
        if best is None:
            if weld_log_field.required:
                missing.append(weld_log_field)
            continue
        claimed.add(best.input_column)
        mappings.append(best)

    log.debug(
        "Mapped %s of %s weld log columns (missing required: %s)",
        len(mappings),
        len(candidates),
        [weld_log_field.value for weld_log_field in missing],
    )
    return WeldLogMappingResult(
        mappings=tuple(mappings),
        unmapped_columns=tuple(header for header in candidates if header not in claimed),
        missing_required_fields=tuple(missing),
    )
