"""The Alembic chain builds the same schema as the models."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from zaplanje.db import Base, build_engine
from zaplanje.main import _alembic_config, run_migrations


def current_heads(engine: Engine) -> tuple[str, ...]:
    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_heads()


def script_heads(database_url: str) -> tuple[str, ...]:
    return tuple(ScriptDirectory.from_config(_alembic_config(database_url)).get_heads())


def test_migrations_match_models(tmp_path: Path):
    database_url = f"sqlite:///{tmp_path / 'fresh.db'}"
    engine = build_engine(database_url)
    try:
        run_migrations(engine, database_url)

        with engine.connect() as connection:
            assert compare_metadata(MigrationContext.configure(connection), Base.metadata) == []
        assert set(current_heads(engine)) == set(script_heads(database_url))

        # Already at head: second run is a no-op.
        run_migrations(engine, database_url)
        assert set(current_heads(engine)) == set(script_heads(database_url))
    finally:
        engine.dispose()


def test_upgrade_tolerates_existing_columns(tmp_path: Path):
    database_url = f"sqlite:///{tmp_path / 'partial.db'}"
    engine = build_engine(database_url)
    try:
        command.upgrade(_alembic_config(database_url), "202501150001")
        with engine.begin() as connection:
            connection.execute(text("ALTER TABLE posts ADD COLUMN view_count INTEGER NOT NULL DEFAULT 0"))

        run_migrations(engine, database_url)

        columns = [column["name"] for column in inspect(engine).get_columns("posts")]
        assert columns.count("view_count") == 1
        assert set(current_heads(engine)) == set(script_heads(database_url))
    finally:
        engine.dispose()
