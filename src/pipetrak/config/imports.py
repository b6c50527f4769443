"""Limits applied to bulk imports before and during the write stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_float, env_int

DEFAULT_BATCH_SIZE: Final[int] = 1000
DEFAULT_MAX_ROWS: Final[int] = 10_000
DEFAULT_MAX_FILE_MB: Final[float] = 5.0
DEFAULT_MAX_PAYLOAD_MB: Final[float] = 5.5
# Per-unit expansion turns one row into QTY records; this caps the total.
DEFAULT_MAX_COMPONENTS: Final[int] = 100_000

BYTES_PER_MB: Final[int] = 1024 * 1024


@dataclass(frozen=True, slots=True)
class ImportLimits:
    """Size guards for one import invocation."""

    batch_size: int = DEFAULT_BATCH_SIZE
    max_rows: int = DEFAULT_MAX_ROWS
    max_file_mb: float = DEFAULT_MAX_FILE_MB
    max_payload_mb: float = DEFAULT_MAX_PAYLOAD_MB
    max_components: int = DEFAULT_MAX_COMPONENTS

    @property
    def max_file_bytes(self) -> int:
        return int(self.max_file_mb * BYTES_PER_MB)

    @property
    def max_payload_bytes(self) -> int:
        return int(self.max_payload_mb * BYTES_PER_MB)


def get_import_limits() -> ImportLimits:
    return ImportLimits(
        batch_size=env_int("PIPETRAK_IMPORT_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        max_rows=env_int("PIPETRAK_IMPORT_MAX_ROWS", DEFAULT_MAX_ROWS),
        max_file_mb=env_float("PIPETRAK_IMPORT_MAX_FILE_MB", DEFAULT_MAX_FILE_MB),
        max_payload_mb=env_float("PIPETRAK_IMPORT_MAX_PAYLOAD_MB", DEFAULT_MAX_PAYLOAD_MB),
        max_components=env_int("PIPETRAK_IMPORT_MAX_COMPONENTS", DEFAULT_MAX_COMPONENTS),
    )
