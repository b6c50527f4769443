# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from pipetrak.adapters.tabular import read_takeoff_csv
from pipetrak.app import (
    create_project,
    import_takeoff_csv,
    import_takeoff_payload,
    import_weld_log_csv,
    init_database,
    populate_demo_project,
    preview_import,
    submit_demo_population,
)
from pipetrak.common.logging import configure_logging
from pipetrak.domain.demo import DEFAULT_SEED
from pipetrak.domain.errors import (
    ImportBlockedError,
    ImportLimitError,
    InvalidPayloadError,
    ProjectNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

# Raised for bad input; reported with exit status 2 rather than 1.
_INPUT_ERRORS = (
    ImportBlockedError,
    ImportLimitError,
    InvalidPayloadError,
    ProjectNotFoundError,
    FileNotFoundError,
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk-load pipe construction take-offs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    project = subparsers.add_parser("create-project", help="Create a project")
    project.add_argument("--name", type=str, required=True, help="Project name")
    project.add_argument("--description", type=str, help="Optional project description")

    preview = subparsers.add_parser(
        "preview", help="Map and validate a take-off CSV without writing"
    )
    preview.add_argument("--project-id", type=str, required=True, help="Target project id")
    preview.add_argument("path", type=Path, help="Take-off CSV file")

    takeoff = subparsers.add_parser("import", help="Import a take-off CSV")
    takeoff.add_argument("--project-id", type=str, required=True, help="Target project id")
    takeoff.add_argument("path", type=Path, help="Take-off CSV file")

    welds = subparsers.add_parser(
        "import-welds", help="Import a weld log CSV (welders, dates, NDE results)"
    )
    welds.add_argument("--project-id", type=str, required=True, help="Target project id")
    welds.add_argument("path", type=Path, help="Weld log CSV file")

    payload = subparsers.add_parser(
        "import-json", help="Import a JSON payload ({projectId, headers?, rows})"
    )
    payload.add_argument("path", type=str, help="Payload file, or '-' to read stdin")

    demo = subparsers.add_parser("populate-demo", help="Fill a project with demo data")
    demo.add_argument("--project-id", type=str, required=True, help="Target project id")
    demo.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Seed for the deterministic generator (default: %(default)s)",
    )
    demo.add_argument(
        "--background",
        action="store_true",
        help="Submit to the background worker and wait for it in this process",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_payload(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run_command(args: argparse.Namespace) -> int:
    if args.command == "init-db":
        _emit({"database": init_database()})
        return 0

    if args.command == "create-project":
        project = create_project(args.name, description=args.description)
        _emit({"id": str(project.id), "name": project.name})
        return 0

    if args.command == "preview":
        sheet = read_takeoff_csv(args.path)
        preview = preview_import(_parse_uuid(args.project_id), sheet.headers, sheet.rows)
        _emit(preview.to_payload())
        return 0 if preview.importable else 2

    if args.command == "import":
        result = import_takeoff_csv(_parse_uuid(args.project_id), args.path)
    elif args.command == "import-welds":
        result = import_weld_log_csv(_parse_uuid(args.project_id), args.path)
    elif args.command == "import-json":
        result = import_takeoff_payload(_read_payload(args.path))
    elif args.command == "populate-demo":
        project_id = _parse_uuid(args.project_id)
        if args.background:
            result = submit_demo_population(project_id, seed=args.seed).result()
        else:
            result = populate_demo_project(project_id, seed=args.seed)
    else:
        raise ValueError(f"Unsupported command: {args.command}")

    _emit(result.to_payload())
    return 0 if result.success else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        force=parsed_args.verbose,
    )

    try:
        status = _run_command(parsed_args)
    except ImportBlockedError as exc:
        log.error("Import blocked (%s): %s", exc.category, exc)  # noqa: TRY400
        _emit({"success": False, "error": str(exc), "details": exc.details})
        sys.exit(2)
    except (*_INPUT_ERRORS, ValueError) as exc:
        log.error("CLI validation error: %s", exc)  # noqa: TRY400
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
