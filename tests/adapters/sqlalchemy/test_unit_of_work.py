from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pipetrak.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from pipetrak.domain.model import MetadataType, Project

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def _reset_adapter() -> None:
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyImportUnitOfWork()


def test_startup_refuses_to_reconfigure_without_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine)
    try:
        assert is_started()
        assert configured_engine() is sqlite_engine
        with pytest.raises(StartupError):
            startup(engine=sqlite_engine)
        startup(engine=sqlite_engine, force=True)
    finally:
        shutdown()

    assert not is_started()
    assert configured_engine() is None


def test_repositories_unavailable_outside_context(
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_project(
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
) -> None:
    project = Project(name="Unit 4 Revamp")

    with sqlite_unit_of_work() as uow:
        uow.repositories.projects.add(project)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.projects.get(project.id)

    assert loaded is not None
    assert loaded.name == "Unit 4 Revamp"


def test_exception_rolls_back_uncommitted_work(
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
) -> None:
    project = Project(name="Discarded")

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.projects.add(project)
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.projects.get(project.id) is None


def test_reference_repositories_dispatch_by_metadata_type(
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        assert repositories.references(MetadataType.AREA) is repositories.areas
        assert repositories.references(MetadataType.SYSTEM) is repositories.systems
        assert repositories.references(MetadataType.TEST_PACKAGE) is repositories.test_packages
