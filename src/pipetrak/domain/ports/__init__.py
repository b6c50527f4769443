"""Persistence ports used by the import pipeline."""

from __future__ import annotations

from .persistence import (
    ComponentNaturalKey,
    ComponentRepository,
    DrawingRepository,
    FieldWeldRepository,
    NaturalKeyRepository,
    ProjectRepository,
    ReferenceLookup,
    ReferenceRepository,
    WelderRepository,
    WeldNaturalKey,
)
from .unit_of_work import ImportRepositories, ImportUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "ComponentNaturalKey",
    "ComponentRepository",
    "DrawingRepository",
    "FieldWeldRepository",
    "ImportRepositories",
    "ImportUnitOfWork",
    "NaturalKeyRepository",
    "ProjectRepository",
    "ReferenceLookup",
    "ReferenceRepository",
    "RepositoryCollection",
    "UnitOfWork",
    "WeldNaturalKey",
    "WelderRepository",
]
