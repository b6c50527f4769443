from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pipetrak.config import (
    InvalidConfigurationError,
    StorageConfig,
    get_database_uri,
    get_import_limits,
    get_storage_config,
)
from pipetrak.config.imports import DEFAULT_BATCH_SIZE, DEFAULT_MAX_COMPONENTS, DEFAULT_MAX_ROWS

if TYPE_CHECKING:
    from pathlib import Path


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/pipetrak")

    assert get_database_uri() == "postgresql+psycopg://db/pipetrak"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("PIPETRAK_DATA_DIR", str(tmp_path / "data"))

    uri = get_database_uri()

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'pipetrak.db'}"
    assert (tmp_path / "data").is_dir()


def test_storage_config_reads_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PIPETRAK_DATA_DIR", str(tmp_path))

    assert get_storage_config() == StorageConfig(data_dir=tmp_path)


def test_storage_config_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("PIPETRAK_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config() == StorageConfig(data_dir=tmp_path / "pipetrak")


def test_storage_config_defaults_to_local_share(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("PIPETRAK_DATA_DIR", raising=False)
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    storage = get_storage_config()

    assert storage.data_dir == tmp_path / ".local" / "share" / "pipetrak"


def test_storage_config_does_not_create_directory_when_asked(tmp_path: Path) -> None:
    storage = StorageConfig(data_dir=tmp_path / "later")

    path = storage.database_path(ensure=False)

    assert path == (tmp_path / "later").resolve() / "pipetrak.db"
    assert not (tmp_path / "later").exists()


def test_import_limits_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PIPETRAK_IMPORT_BATCH_SIZE",
        "PIPETRAK_IMPORT_MAX_ROWS",
        "PIPETRAK_IMPORT_MAX_FILE_MB",
        "PIPETRAK_IMPORT_MAX_PAYLOAD_MB",
        "PIPETRAK_IMPORT_MAX_COMPONENTS",
    ):
        monkeypatch.delenv(name, raising=False)

    limits = get_import_limits()

    assert limits.batch_size == DEFAULT_BATCH_SIZE
    assert limits.max_rows == DEFAULT_MAX_ROWS
    assert limits.max_components == DEFAULT_MAX_COMPONENTS == 100_000
    assert limits.max_file_bytes == 5 * 1024 * 1024
    assert limits.max_payload_bytes == int(5.5 * 1024 * 1024)


def test_import_limits_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PIPETRAK_IMPORT_BATCH_SIZE", " 250 ")
    monkeypatch.setenv("PIPETRAK_IMPORT_MAX_ROWS", "20000")
    monkeypatch.setenv("PIPETRAK_IMPORT_MAX_FILE_MB", "2.5")
    monkeypatch.setenv("PIPETRAK_IMPORT_MAX_PAYLOAD_MB", "")
    monkeypatch.setenv("PIPETRAK_IMPORT_MAX_COMPONENTS", "5000")

    limits = get_import_limits()

    assert limits.batch_size == 250
    assert limits.max_rows == 20000
    assert limits.max_file_mb == 2.5
    assert limits.max_payload_mb == 5.5
    assert limits.max_components == 5000


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("PIPETRAK_IMPORT_BATCH_SIZE", "many", "must be an integer"),
        ("PIPETRAK_IMPORT_BATCH_SIZE", "0", "must be >= 1"),
        ("PIPETRAK_IMPORT_MAX_COMPONENTS", "0", "must be >= 1"),
        ("PIPETRAK_IMPORT_MAX_FILE_MB", "big", "must be a number"),
        ("PIPETRAK_IMPORT_MAX_PAYLOAD_MB", "-1", "must be positive"),
    ],
)
def test_invalid_import_limits(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(InvalidConfigurationError, match=message):
        get_import_limits()

