"""SQLAlchemy adapter package for pipetrak."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyComponentRepository,
    SqlAlchemyDrawingRepository,
    SqlAlchemyFieldWeldRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyReferenceRepository,
    SqlAlchemyWelderRepository,
)
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyComponentRepository",
    "SqlAlchemyDrawingRepository",
    "SqlAlchemyFieldWeldRepository",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyProjectRepository",
    "SqlAlchemyReferenceRepository",
    "SqlAlchemyWelderRepository",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
