"""Alembic environment: run the pipetrak schema migrations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from pipetrak.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from pipetrak.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config
log = logging.getLogger("alembic.env")

start_mappers()

# Batch mode lets ALTERs run on SQLite, the default backend.
MIGRATION_OPTIONS = {
    "target_metadata": mapper_registry.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _run(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations() -> None:
    url = config.get_main_option("sqlalchemy.url") or get_database_uri()
    if context.is_offline_mode():
        context.configure(url=url, literal_binds=True, **MIGRATION_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
        return

    # upgrade_head(engine=...) hands over a connection inside its transaction
    shared = config.attributes.get("connection")
    if shared is not None:
        _run(shared)
        return

    log.info("Running migrations on a dedicated connection")
    engine = create_engine(url, poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _run(connection)
    finally:
        engine.dispose()


run_migrations()
