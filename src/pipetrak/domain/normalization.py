"""Normalisation of the natural-key parts typed by humans into spreadsheets."""

from __future__ import annotations

from typing import Final

NO_SIZE: Final[str] = "NOSIZE"


def normalize_drawing(value: str) -> str:
    """Uppercase, trim and collapse internal whitespace: ``" p-001  a "`` -> ``"P-001 A"``."""

    return " ".join(value.strip().upper().split())


def normalize_size(value: str | None) -> str:
    """Canonical size token; ``1/2"`` -> ``1X2``, blank -> ``NOSIZE``."""

    if value is None or not value.strip():
        return NO_SIZE
    cleaned = value.strip().replace('"', "").replace("'", "")
    cleaned = "".join(cleaned.split())
    return cleaned.replace("/", "X").upper()


def clean_optional(value: str | None) -> str | None:
    """Trimmed text or ``None`` for blank cells."""

    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
