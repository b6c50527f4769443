from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect
from sqlalchemy.orm import sessionmaker

from pipetrak.adapters.sqlalchemy import (
    SqlAlchemyComponentRepository,
    SqlAlchemyDrawingRepository,
    SqlAlchemyFieldWeldRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyReferenceRepository,
    SqlAlchemyWelderRepository,
)
from pipetrak.domain.model import (
    Area,
    Component,
    ComponentType,
    Drawing,
    FieldWeld,
    MetadataType,
    NdeResult,
    Project,
    StandardKey,
    Welder,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


@pytest.fixture
def project_id(sqlite_session: Session) -> UUID:
    project = Project(name="Unit 4 Revamp")
    SqlAlchemyProjectRepository(sqlite_session).add(project)
    sqlite_session.commit()
    return project.id


def _valve(project_id: UUID, drawing_id: UUID | None, seq: int = 1) -> Component:
    key = StandardKey(drawing_norm="P-001", commodity_code="VBALU-001", size="2", seq=seq)
    return Component(
        project_id=project_id,
        component_type=ComponentType.VALVE,
        identity_key=key.to_payload(),
        drawing_id=drawing_id,
    )


def test_schema_contains_expected_tables(sqlite_engine: Engine) -> None:
    tables = set(inspect(sqlite_engine).get_table_names())

    assert {
        "projects",
        "areas",
        "systems",
        "test_packages",
        "welders",
        "drawings",
        "components",
        "field_welds",
    } <= tables


def test_migrations_add_weld_log_columns(sqlite_engine: Engine) -> None:
    columns = {column["name"] for column in inspect(sqlite_engine).get_columns("field_welds")}

    assert {"weld_size", "schedule", "nde_result", "welder_id", "date_welded"} <= columns


def test_project_round_trip(sqlite_session: Session, project_id: UUID) -> None:
    repository = SqlAlchemyProjectRepository(sqlite_session)

    loaded = repository.get(project_id)

    assert loaded is not None
    assert loaded.name == "Unit 4 Revamp"
    assert loaded.created_at.tzinfo is not None


def test_reference_insert_or_skip_keeps_first_record(
    sqlite_session: Session, project_id: UUID
) -> None:
    repository = SqlAlchemyReferenceRepository(sqlite_session, MetadataType.AREA, Area)
    first = Area(project_id=project_id, name="B-68")
    second = Area(project_id=project_id, name="B-68")

    repository.insert_or_skip([first])
    repository.insert_or_skip([second])
    sqlite_session.commit()

    assert repository.find_ids(project_id, ["B-68", "B-70"]) == {"B-68": first.id}
    assert [area.name for area in repository.list_for_project(project_id)] == ["B-68"]


def test_reference_names_are_scoped_per_project(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)
    first, second = Project(name="A"), Project(name="B")
    projects.add(first)
    projects.add(second)
    sqlite_session.flush()
    repository = SqlAlchemyReferenceRepository(sqlite_session, MetadataType.AREA, Area)

    repository.insert_or_skip(
        [Area(project_id=first.id, name="B-68"), Area(project_id=second.id, name="B-68")]
    )
    sqlite_session.commit()

    assert set(repository.find_ids(first.id, ["B-68"])) == {"B-68"}
    assert repository.find_ids(first.id, ["B-68"]) != repository.find_ids(second.id, ["B-68"])


def test_welders_keyed_by_normalised_stencil(sqlite_session: Session, project_id: UUID) -> None:
    repository = SqlAlchemyWelderRepository(sqlite_session)
    welder = Welder(project_id=project_id, stencil=" jd42 ", name="John Doe")

    repository.insert_or_skip([welder])
    repository.insert_or_skip([Welder(project_id=project_id, stencil="JD42", name="Dupe")])
    sqlite_session.commit()

    assert repository.natural_key(welder) == "JD42"
    assert repository.find_ids(project_id, ["JD42"]) == {"JD42": welder.id}
    assert [w.name for w in repository.list_for_project(project_id)] == ["John Doe"]


def test_drawings_keyed_by_normalised_number(sqlite_session: Session, project_id: UUID) -> None:
    repository = SqlAlchemyDrawingRepository(sqlite_session)
    drawing = Drawing(project_id=project_id, drawing_no_raw="p-001")

    repository.insert_or_skip([drawing])
    repository.insert_or_skip([Drawing(project_id=project_id, drawing_no_raw="P-001")])
    sqlite_session.commit()

    assert repository.find_ids(project_id, ["P-001"]) == {"P-001": drawing.id}
    stored = repository.list_for_project(project_id)
    assert [(d.drawing_no_raw, d.drawing_no_norm) for d in stored] == [("p-001", "P-001")]


def test_component_insert_or_skip_and_lookup(sqlite_session: Session, project_id: UUID) -> None:
    repository = SqlAlchemyComponentRepository(sqlite_session)
    first = _valve(project_id, None, seq=1)
    second = _valve(project_id, None, seq=2)
    duplicate = _valve(project_id, None, seq=1)

    repository.insert_or_skip([first, second])
    repository.insert_or_skip([duplicate])
    sqlite_session.commit()

    keys = [repository.natural_key(first), repository.natural_key(second)]
    assert repository.find_ids(project_id, keys) == {keys[0]: first.id, keys[1]: second.id}
    assert repository.count(project_id) == 2
    assert repository.count(project_id, ComponentType.SPOOL) == 0


def test_component_lookup_matches_type_and_token(
    sqlite_session: Session, project_id: UUID
) -> None:
    repository = SqlAlchemyComponentRepository(sqlite_session)
    valve = _valve(project_id, None)
    repository.insert_or_skip([valve])
    sqlite_session.commit()

    flange_key = (ComponentType.FLANGE, valve.identity_token)

    assert repository.find_ids(project_id, [flange_key]) == {}


def test_component_round_trips_identity_and_attributes(
    sqlite_session: Session, project_id: UUID
) -> None:
    repository = SqlAlchemyComponentRepository(sqlite_session)
    valve = _valve(project_id, None)
    valve.attributes = {"spec": "ES-03", "original_qty": 1}
    repository.insert_or_skip([valve])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    (loaded,) = repository.get_many([valve.id])

    assert loaded.component_type is ComponentType.VALVE
    assert loaded.key == valve.key
    assert loaded.attributes == {"spec": "ES-03", "original_qty": 1}
    assert not loaded.milestones_initialized


def test_component_milestone_update(sqlite_engine: Engine, project_id: UUID) -> None:
    session_factory = sessionmaker(bind=sqlite_engine)
    valve = _valve(project_id, None)
    with session_factory() as session:
        repository = SqlAlchemyComponentRepository(session)
        repository.insert_or_skip([valve])
        repository.update_milestones([(valve.id, {"Receive": True}, 10.0)])
        session.commit()

    with session_factory() as session:
        (loaded,) = SqlAlchemyComponentRepository(session).get_many([valve.id])

    assert loaded.current_milestones == {"Receive": True}
    assert loaded.percent_complete == 10.0


def test_field_weld_lookup_and_welder_assignment(
    sqlite_engine: Engine, project_id: UUID
) -> None:
    session_factory = sessionmaker(bind=sqlite_engine)
    drawing = Drawing(project_id=project_id, drawing_no_raw="P-001")
    welder = Welder(project_id=project_id, stencil="JD42", name="John Doe")
    weld = FieldWeld(project_id=project_id, drawing_id=drawing.id, weld_number="W-001")
    other = FieldWeld(project_id=project_id, drawing_id=drawing.id, weld_number="W-002")

    with session_factory() as session:
        SqlAlchemyDrawingRepository(session).insert_or_skip([drawing])
        SqlAlchemyWelderRepository(session).insert_or_skip([welder])
        repository = SqlAlchemyFieldWeldRepository(session)
        repository.insert_or_skip([weld, other])
        repository.insert_or_skip(
            [FieldWeld(project_id=project_id, drawing_id=drawing.id, weld_number="W-001")]
        )
        found = repository.find_ids(project_id, [(drawing.id, "W-001"), (drawing.id, "W-404")])
        repository.assign_welders([(weld.id, welder.id, date(2024, 3, 1))])
        session.commit()

    with session_factory() as session:
        repository = SqlAlchemyFieldWeldRepository(session)
        stored = {w.weld_number: w for w in repository.list_for_project(project_id)}

    assert found == {(drawing.id, "W-001"): weld.id}
    assert set(stored) == {"W-001", "W-002"}
    assert stored["W-001"].welder_id == welder.id
    assert stored["W-001"].date_welded == date(2024, 3, 1)
    assert stored["W-002"].welder_id is None


def test_field_weld_log_details_and_dated_assignment_without_welder(
    sqlite_engine: Engine, project_id: UUID
) -> None:
    session_factory = sessionmaker(bind=sqlite_engine)
    drawing = Drawing(project_id=project_id, drawing_no_raw="P-001")
    weld = FieldWeld(
        project_id=project_id,
        drawing_id=drawing.id,
        weld_number="12",
        weld_size='2"',
        schedule="XS",
        nde_result=NdeResult.FAIL,
    )

    with session_factory() as session:
        SqlAlchemyDrawingRepository(session).insert_or_skip([drawing])
        repository = SqlAlchemyFieldWeldRepository(session)
        repository.insert_or_skip([weld])
        repository.assign_welders([(weld.id, None, date(2025, 3, 14))])
        session.commit()

    with session_factory() as session:
        (stored,) = SqlAlchemyFieldWeldRepository(session).get_many([weld.id])

    assert (stored.weld_size, stored.schedule, stored.nde_result) == ('2"', "XS", NdeResult.FAIL)
    assert stored.welder_id is None
    assert stored.date_welded == date(2025, 3, 14)


def test_lookups_chunk_long_key_lists(sqlite_session: Session, project_id: UUID) -> None:
    repository = SqlAlchemyComponentRepository(sqlite_session)
    components = [_valve(project_id, None, seq=seq) for seq in range(1, 1201)]

    repository.insert_or_skip(components)
    sqlite_session.commit()

    found = repository.find_ids(project_id, [repository.natural_key(c) for c in components])
    assert len(found) == 1200
    assert len(repository.get_many(list(found.values()))) == 1200


def test_empty_writes_are_noops(sqlite_session: Session, project_id: UUID) -> None:
    components = SqlAlchemyComponentRepository(sqlite_session)
    welds = SqlAlchemyFieldWeldRepository(sqlite_session)

    components.insert_or_skip([])
    components.update_milestones([])
    welds.update_milestones([])
    welds.assign_welders([])

    assert components.count(project_id) == 0
    assert components.find_ids(project_id, []) == {}
