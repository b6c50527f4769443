"""JSON import payload schema."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pipetrak.config.imports import BYTES_PER_MB, ImportLimits
from pipetrak.domain.errors import ImportLimitError, InvalidPayloadError, PayloadTooLargeError

if TYPE_CHECKING:
    from pipetrak.domain.takeoff import RawRow

log = logging.getLogger(__name__)

type CellValue = str | int | float | bool | None


class ImportPayload(BaseModel):
    """Body of a take-off import submitted as JSON.

    ``headers`` preserves the spreadsheet column order. When absent it is
    rebuilt from the row keys in first-seen order.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    project_id: UUID = Field(alias="projectId")
    headers: list[str] | None = None
    rows: list[dict[str, CellValue]]

    @field_validator("headers")
    @classmethod
    def _strip_headers(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [header.strip() for header in value]

    def column_headers(self) -> list[str]:
        if self.headers is not None:
            return list(self.headers)
        seen: dict[str, None] = {}
        for row in self.rows:
            for key in row:
                seen.setdefault(key.strip(), None)
        return list(seen)

    def raw_rows(self) -> list[RawRow]:
        return [
            {key.strip(): _cell_text(value) for key, value in row.items()} for row in self.rows
        ]


def _cell_text(value: CellValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_import_payload(raw: bytes | str, *, limits: ImportLimits | None = None) -> ImportPayload:
    """Validate a serialized payload, rejecting oversized bodies before parsing."""

    active_limits = limits or ImportLimits()
    body = raw.encode("utf-8") if isinstance(raw, str) else raw
    if len(body) > active_limits.max_payload_bytes:
        size_mb = len(body) / BYTES_PER_MB
        raise PayloadTooLargeError(
            f"Payload too large: {size_mb:.2f}MB (max {active_limits.max_payload_mb}MB)"
        )

    try:
        payload = ImportPayload.model_validate_json(body)
    except ValidationError as exc:
        log.warning("Rejected import payload: %s validation error(s)", exc.error_count())
        raise InvalidPayloadError(f"Invalid import payload: {exc}") from exc

    if len(payload.rows) > active_limits.max_rows:
        raise ImportLimitError(
            f"Too many rows: {len(payload.rows)} (max {active_limits.max_rows})"
        )
    return payload
