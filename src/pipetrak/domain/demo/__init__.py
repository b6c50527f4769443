"""Demo project generation."""

from __future__ import annotations

from .generator import DEFAULT_SEED, SeededRandom
from .populate import build_demo_plan

__all__ = ["DEFAULT_SEED", "SeededRandom", "build_demo_plan"]
