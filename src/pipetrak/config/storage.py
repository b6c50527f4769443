"""Where the tracking database lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DB_FILENAME: Final[str] = "pipetrak.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.data_dir.expanduser().resolve()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / DB_FILENAME


def get_storage_config() -> StorageConfig:
    """``PIPETRAK_DATA_DIR``, else ``$XDG_DATA_HOME/pipetrak`` or ``~/.local/share/pipetrak``."""

    env_dir = os.getenv("PIPETRAK_DATA_DIR")
    if env_dir:
        return StorageConfig(data_dir=Path(env_dir))
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "pipetrak")


def get_database_uri() -> str:
    """``DATABASE_URI`` when set, otherwise a SQLite file in the data directory."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return env_uri
    return f"sqlite+pysqlite:///{get_storage_config().database_path()}"
