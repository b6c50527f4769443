"""Tabular input adapters: CSV take-off files and JSON import payloads."""

from __future__ import annotations

from .csv_reader import TakeoffSheet, read_takeoff_csv
from .schema import ImportPayload, parse_import_payload

__all__ = [
    "ImportPayload",
    "TakeoffSheet",
    "parse_import_payload",
    "read_takeoff_csv",
]
