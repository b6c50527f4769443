"""Errors raised by the import pipeline and the application services around it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence


class PipetrakError(Exception):
    """Base class for domain-level failures."""


class ImportBlockedError(PipetrakError):
    """Raised when mapping or validation results forbid writing the batch."""

    def __init__(
        self,
        message: str,
        *,
        category: str,
        details: Sequence[dict[str, Any]] = (),
    ) -> None:
        super().__init__(message)
        self.category = category
        self.details = list(details)


class ImportLimitError(PipetrakError):
    """Raised when an input exceeds the configured row or byte limits."""


class PayloadTooLargeError(ImportLimitError):
    """Raised before parsing when a serialized payload is over the byte threshold."""


class InvalidPayloadError(PipetrakError):
    """Raised when a serialized import payload does not match the expected shape."""


class ProjectNotFoundError(PipetrakError):
    """Raised when an operation references a project that does not exist."""


class UnresolvedReferenceError(PipetrakError):
    """Raised when a write phase cannot resolve a natural key to an identifier."""

    def __init__(self, message: str, *, row: int | None = None, drawing: str | None = None):
        super().__init__(message)
        self.row = row
        self.drawing = drawing
