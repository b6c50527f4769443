"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pipetrak.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    startup,
)
from pipetrak.adapters.tabular import parse_import_payload, read_takeoff_csv
from pipetrak.config import ImportLimits, get_import_limits
from pipetrak.domain.demo import DEFAULT_SEED, SeededRandom, build_demo_plan
from pipetrak.domain.errors import ImportBlockedError, ImportLimitError, ProjectNotFoundError
from pipetrak.domain.ingest_pipeline import (
    WriteResult,
    plan_takeoff_import,
    plan_weld_log_import,
    run_bulk_write,
)
from pipetrak.domain.model import Project
from pipetrak.domain.ports import ImportUnitOfWork
from pipetrak.domain.takeoff import (
    ColumnMappingResult,
    MetadataDiscoveryResult,
    ValidationCategory,
    ValidationReport,
    discover_metadata,
    map_columns,
    validate_rows,
)
from pipetrak.domain.weld_log import map_weld_log_columns, validate_weld_log_rows

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date
    from pathlib import Path
    from uuid import UUID

    from pipetrak.domain.takeoff import RawRow, TakeoffRow

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]

log = getLogger(__name__)

VALIDATION_ERRORS = "validation_errors"

_DEMO_EXECUTOR = ThreadPoolExecutor(max_workers=2, thread_name_prefix="pipetrak-demo")


@dataclass(frozen=True, slots=True)
class ImportPreview:
    """Everything an import would do, computed without writing.

    ``validation`` and ``metadata`` stay ``None`` when required columns are
    missing, since no row can be judged without them.
    """

    mapping: ColumnMappingResult
    validation: ValidationReport[TakeoffRow] | None
    metadata: MetadataDiscoveryResult | None

    @property
    def importable(self) -> bool:
        return self.validation is not None and self.validation.can_import

    def to_payload(self) -> dict[str, Any]:
        blocked_by: str | None = None
        if self.validation is None:
            validation = None
            errors = _missing_column_details(
                expected.value for expected in self.mapping.missing_required_fields
            )
            blocked_by = ValidationCategory.MISSING_REQUIRED_COLUMNS.value
        else:
            validation = self.validation.summary()
            errors = self.validation.error_details()
            if not self.validation.can_import:
                blocked_by = VALIDATION_ERRORS
        return {
            "mappings": [
                {
                    "inputColumn": mapping.input_column,
                    "expectedField": mapping.expected_field.value,
                    "matchTier": mapping.match_tier.value,
                    "confidence": mapping.confidence,
                }
                for mapping in self.mapping.mappings
            ],
            "unmappedColumns": list(self.mapping.unmapped_columns),
            "missingRequiredFields": [
                expected.value for expected in self.mapping.missing_required_fields
            ],
            "validation": validation,
            "errors": errors,
            "blockedBy": blocked_by,
            "metadata": self.metadata.to_payload() if self.metadata is not None else None,
        }


def _missing_column_details(missing: Iterable[str]) -> list[dict[str, Any]]:
    return [{"row": None, "issue": f"Missing required column {name}"} for name in missing]


def _blocked_by_missing_columns(missing: Sequence[str]) -> ImportBlockedError:
    return ImportBlockedError(
        f"Missing required columns: {', '.join(missing)}",
        category=ValidationCategory.MISSING_REQUIRED_COLUMNS.value,
        details=_missing_column_details(missing),
    )


def _check_row_limit(rows: Sequence[object], limits: ImportLimits) -> None:
    if len(rows) > limits.max_rows:
        raise ImportLimitError(f"Too many rows: {len(rows)} (max {limits.max_rows})")


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyImportUnitOfWork


def _require_project(project_id: UUID, factory: UnitOfWorkFactory) -> None:
    with factory() as uow:
        project = uow.repositories.projects.get(project_id)
    if project is None:
        raise ProjectNotFoundError(f"Project {project_id} does not exist")


def create_project(
    name: str,
    *,
    description: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Project:
    """Create an empty project that imports can target."""

    factory = _unit_of_work_factory(unit_of_work_factory)
    project = Project(name=name.strip(), description=description)
    with factory() as uow:
        uow.repositories.projects.add(project)
        uow.commit()
    log.info("Created project %s (%s)", project.name, project.id)
    return project


def preview_import(
    project_id: UUID,
    headers: Sequence[str],
    rows: Sequence[RawRow],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportPreview:
    """Map, validate and discover metadata for a take-off. Read-only."""

    factory = _unit_of_work_factory(unit_of_work_factory)
    _require_project(project_id, factory)
    mapping = map_columns(headers)
    if not mapping.has_all_required_fields:
        return ImportPreview(mapping=mapping, validation=None, metadata=None)
    validation = validate_rows(rows, mapping)
    with factory() as uow:
        metadata = discover_metadata(
            validation.valid_rows(), references=uow.repositories, project_id=project_id
        )
    return ImportPreview(mapping=mapping, validation=validation, metadata=metadata)


def import_takeoff(
    project_id: UUID,
    headers: Sequence[str],
    rows: Sequence[RawRow],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    limits: ImportLimits | None = None,
    today: date | None = None,
) -> WriteResult:
    """Validate a take-off and write it, refusing the whole batch on any error row.

    Rows that are only skipped (zero quantity, unsupported type) do not block
    the import. A take-off whose rows are all skipped completes successfully
    with nothing written.
    """

    active_limits = limits or get_import_limits()
    _check_row_limit(rows, active_limits)

    factory = _unit_of_work_factory(unit_of_work_factory)
    _require_project(project_id, factory)
    log.info("Starting take-off import for project %s: rows=%s", project_id, len(rows))

    mapping = map_columns(headers)
    if not mapping.has_all_required_fields:
        raise _blocked_by_missing_columns(
            [expected.value for expected in mapping.missing_required_fields]
        )

    validation = validate_rows(rows, mapping)
    if not validation.can_import:
        raise ImportBlockedError(
            f"{validation.error_count} row(s) failed validation",
            category=VALIDATION_ERRORS,
            details=validation.error_details(),
        )

    valid_rows = validation.valid_rows()
    if not valid_rows:
        log.warning(
            "No importable rows for project %s: %s row(s) skipped",
            project_id,
            validation.skipped_count,
        )
        return WriteResult(success=True)

    plan = plan_takeoff_import(
        project_id, valid_rows, max_records=active_limits.max_components
    )
    result = run_bulk_write(
        plan,
        unit_of_work_factory=factory,
        batch_size=active_limits.batch_size,
        today=today,
    )
    log.info(
        "Finished take-off import for project %s: success=%s, components_created=%s",
        project_id,
        result.success,
        result.components_created,
    )
    return result


def import_takeoff_csv(
    project_id: UUID,
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    limits: ImportLimits | None = None,
) -> WriteResult:
    active_limits = limits or get_import_limits()
    sheet = read_takeoff_csv(path, limits=active_limits)
    return import_takeoff(
        project_id,
        sheet.headers,
        sheet.rows,
        unit_of_work_factory=unit_of_work_factory,
        limits=active_limits,
    )


def import_takeoff_payload(
    raw: bytes | str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    limits: ImportLimits | None = None,
) -> WriteResult:
    """Import a JSON payload of the shape ``{projectId, headers?, rows}``."""

    active_limits = limits or get_import_limits()
    payload = parse_import_payload(raw, limits=active_limits)
    return import_takeoff(
        payload.project_id,
        payload.column_headers(),
        payload.raw_rows(),
        unit_of_work_factory=unit_of_work_factory,
        limits=active_limits,
    )


def import_weld_log(
    project_id: UUID,
    headers: Sequence[str],
    rows: Sequence[RawRow],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    limits: ImportLimits | None = None,
) -> WriteResult:
    """Record welders, weld dates and NDE results from a weld log.

    Welds are keyed by drawing and weld number, so welds a take-off already
    created are reused. Their welder, date and progress are only filled in
    while still empty, which makes importing the same log twice harmless.
    Every row must name a drawing the project already has.
    """

    active_limits = limits or get_import_limits()
    _check_row_limit(rows, active_limits)

    factory = _unit_of_work_factory(unit_of_work_factory)
    _require_project(project_id, factory)
    log.info("Starting weld log import for project %s: rows=%s", project_id, len(rows))

    mapping = map_weld_log_columns(headers)
    if not mapping.has_all_required_fields:
        raise _blocked_by_missing_columns(
            [weld_log_field.value for weld_log_field in mapping.missing_required_fields]
        )

    with factory() as uow:
        known_drawings = {
            drawing.drawing_no_norm
            for drawing in uow.repositories.drawings.list_for_project(project_id)
        }
    validation = validate_weld_log_rows(rows, mapping, known_drawings=known_drawings)
    if not validation.can_import:
        raise ImportBlockedError(
            f"{validation.error_count} weld log row(s) failed validation",
            category=VALIDATION_ERRORS,
            details=validation.error_details(),
        )

    valid_rows = validation.valid_rows()
    if not valid_rows:
        log.warning("No weld log rows to import for project %s", project_id)
        return WriteResult(success=True)

    result = run_bulk_write(
        plan_weld_log_import(project_id, valid_rows),
        unit_of_work_factory=factory,
        batch_size=active_limits.batch_size,
    )
    log.info(
        "Finished weld log import for project %s: success=%s, welds_created=%s, "
        "welders_created=%s, welders_assigned=%s",
        project_id,
        result.success,
        result.welds_created,
        result.welders_created,
        result.welders_assigned,
    )
    return result


def import_weld_log_csv(
    project_id: UUID,
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    limits: ImportLimits | None = None,
) -> WriteResult:
    active_limits = limits or get_import_limits()
    sheet = read_takeoff_csv(path, limits=active_limits)
    return import_weld_log(
        project_id,
        sheet.headers,
        sheet.rows,
        unit_of_work_factory=unit_of_work_factory,
        limits=active_limits,
    )


def populate_demo_project(
    project_id: UUID,
    *,
    seed: int = DEFAULT_SEED,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    batch_size: int | None = None,
    today: date | None = None,
) -> WriteResult:
    """Fill ``project_id`` with the deterministic demo dataset for ``seed``.

    Safe to call again after a partial failure: records already present are
    reused and only the remainder is written.
    """

    factory = _unit_of_work_factory(unit_of_work_factory)
    _require_project(project_id, factory)
    log.info("Starting demo population for project %s: seed=%s", project_id, seed)
    plan = build_demo_plan(project_id, SeededRandom(seed))
    result = run_bulk_write(
        plan,
        unit_of_work_factory=factory,
        batch_size=batch_size or get_import_limits().batch_size,
        today=today,
    )
    log.info(
        "Finished demo population for project %s: success=%s, components_created=%s, "
        "welds_created=%s",
        project_id,
        result.success,
        result.components_created,
        result.welds_created,
    )
    return result


def submit_demo_population(
    project_id: UUID,
    *,
    seed: int = DEFAULT_SEED,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    executor: ThreadPoolExecutor | None = None,
) -> Future[WriteResult]:
    """Run :func:`populate_demo_project` in the background.

    Callers may drop the returned future; failures are then only visible in
    the log, and running the population again completes the remainder.
    """

    factory = _unit_of_work_factory(unit_of_work_factory)
    future = (executor or _DEMO_EXECUTOR).submit(
        populate_demo_project, project_id, seed=seed, unit_of_work_factory=factory
    )
    future.add_done_callback(_log_demo_outcome)
    return future


def _log_demo_outcome(future: Future[WriteResult]) -> None:
    if future.cancelled():
        log.warning("Background demo population cancelled")
        return
    exc = future.exception()
    if exc is not None:
        log.error("Background demo population failed: %s", exc)
        return
    result = future.result()
    if not result.success:
        log.error("Background demo population incomplete: %s", result.error)


def init_database(*, database_uri: str | None = None) -> str:
    """Create or upgrade the schema and return the (password-masked) database URL."""

    if not is_started():
        startup(database_uri=database_uri)
    engine = configured_engine()
    if engine is None:
        raise StartupError("Database engine unavailable after startup")
    url = engine.url.render_as_string(hide_password=True)
    log.info("Database ready at %s", url)
    return url
