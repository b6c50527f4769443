from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pipetrak.adapters.sqlalchemy import start_mappers
from pipetrak.adapters.sqlalchemy.migrations import upgrade_head
from pipetrak.adapters.sqlalchemy.unit_of_work import SqlAlchemyImportUnitOfWork
from pipetrak.app import create_project, populate_demo_project, submit_demo_population
from pipetrak.domain.errors import ProjectNotFoundError
from pipetrak.domain.model import ComponentType, MetadataType
from pipetrak.domain.model.milestones import WELD_MADE

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path
    from uuid import UUID

    from pipetrak.domain.model import Project

    UowFactory = Callable[[], SqlAlchemyImportUnitOfWork]

TODAY = date(2024, 6, 1)


@pytest.fixture
def file_unit_of_work(tmp_path: Path) -> Iterator[UowFactory]:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'demo.db'}", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def factory() -> SqlAlchemyImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork(session_factory)

    try:
        yield factory
    finally:
        engine.dispose()


def test_populates_full_demo_dataset(sqlite_unit_of_work: UowFactory, project: Project) -> None:
    result = populate_demo_project(
        project.id, unit_of_work_factory=sqlite_unit_of_work, today=TODAY
    )

    assert result.success, result.error
    assert result.components_created == 200
    assert result.components_by_type == {
        "flange": 20,
        "instrument": 10,
        "spool": 40,
        "support": 80,
        "valve": 50,
    }
    assert result.welds_created == 120
    assert result.drawings_created == 20
    assert result.welders_created == 4
    assert result.metadata_created == {
        MetadataType.AREA: 5,
        MetadataType.SYSTEM: 5,
        MetadataType.TEST_PACKAGE: 10,
    }
    assert result.milestones_initialized == 320


def test_supports_share_their_spools_drawing(
    sqlite_unit_of_work: UowFactory, project: Project
) -> None:
    populate_demo_project(project.id, unit_of_work_factory=sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        components = uow.repositories.components
        spool_drawings = {
            spool.drawing_id
            for spool in components.list_for_project(project.id, ComponentType.SPOOL)
        }
        supports = components.list_for_project(project.id, ComponentType.SUPPORT)

    assert len(supports) == 80
    assert {support.drawing_id for support in supports} <= spool_drawings
    assert None not in spool_drawings


def test_welders_assigned_to_welded_joints(
    sqlite_unit_of_work: UowFactory, project: Project
) -> None:
    populate_demo_project(project.id, unit_of_work_factory=sqlite_unit_of_work, today=TODAY)

    with sqlite_unit_of_work() as uow:
        welds = uow.repositories.field_welds.list_for_project(project.id)
        welder_ids = {w.id for w in uow.repositories.welders.list_for_project(project.id)}

    welded = [weld for weld in welds if weld.current_milestones.get(WELD_MADE) is True]
    assert welded
    for weld in welded:
        assert weld.welder_id in welder_ids
        assert weld.date_welded is not None
        assert TODAY - timedelta(days=30) <= weld.date_welded < TODAY
    for weld in welds:
        if weld.current_milestones.get(WELD_MADE) is not True:
            assert weld.welder_id is None
            assert weld.date_welded is None


def test_second_run_changes_nothing(sqlite_unit_of_work: UowFactory, project: Project) -> None:
    populate_demo_project(project.id, unit_of_work_factory=sqlite_unit_of_work, today=TODAY)
    with sqlite_unit_of_work() as uow:
        before = {
            w.id: (w.welder_id, w.date_welded, dict(w.current_milestones))
            for w in uow.repositories.field_welds.list_for_project(project.id)
        }

    again = populate_demo_project(
        project.id, unit_of_work_factory=sqlite_unit_of_work, today=TODAY + timedelta(days=3)
    )

    assert again.success
    assert again.components_created == 0
    assert again.welds_created == 0
    assert again.milestones_initialized == 0
    assert again.welders_assigned == 0
    with sqlite_unit_of_work() as uow:
        after = {
            w.id: (w.welder_id, w.date_welded, dict(w.current_milestones))
            for w in uow.repositories.field_welds.list_for_project(project.id)
        }
    assert after == before


def test_same_seed_same_progress_across_projects(sqlite_unit_of_work: UowFactory) -> None:
    first = create_project("First", unit_of_work_factory=sqlite_unit_of_work)
    second = create_project("Second", unit_of_work_factory=sqlite_unit_of_work)

    populate_demo_project(first.id, seed=7, unit_of_work_factory=sqlite_unit_of_work)
    populate_demo_project(second.id, seed=7, unit_of_work_factory=sqlite_unit_of_work)

    def progress(project_id: UUID) -> list[tuple[str, float]]:
        with sqlite_unit_of_work() as uow:
            records = uow.repositories.components.list_for_project(project_id)
        return [(record.identity_token, record.percent_complete) for record in records]

    assert progress(first.id) == progress(second.id)


def test_unknown_project(sqlite_unit_of_work: UowFactory) -> None:
    with pytest.raises(ProjectNotFoundError):
        populate_demo_project(uuid.UUID(int=0), unit_of_work_factory=sqlite_unit_of_work)


def test_background_population(file_unit_of_work: UowFactory) -> None:
    project = create_project("Background", unit_of_work_factory=file_unit_of_work)

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = submit_demo_population(
            project.id, unit_of_work_factory=file_unit_of_work, executor=executor
        )
        result = future.result(timeout=120)

    assert result.success, result.error
    assert result.components_created == 200
    with file_unit_of_work() as uow:
        assert uow.repositories.components.count(project.id) == 200


def test_background_failure_is_logged(
    file_unit_of_work: UowFactory, caplog: pytest.LogCaptureFixture
) -> None:
    missing = uuid.UUID(int=0)

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = submit_demo_population(
            missing, unit_of_work_factory=file_unit_of_work, executor=executor
        )
        with pytest.raises(ProjectNotFoundError):
            future.result(timeout=120)

    assert "Background demo population failed" in caplog.text
