from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def _alembic_config(url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_initial_migration_upgrades_and_downgrades(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'tracking.db'}"
    config = _alembic_config(url)

    command.upgrade(config, "head")

    engine = create_engine(url)
    inspector = inspect(engine)
    assert {
        "accounts",
        "projects",
        "persons",
        "weekly_summaries",
        "person_projects",
        "weekly_summary_projects",
    } <= set(inspector.get_table_names())

    # Expression indexes are invisible to reflection on SQLite; read the DDL instead.
    with engine.connect() as connection:
        ddl = connection.execute(
            text("SELECT sql FROM sqlite_master WHERE type = 'index' AND name = 'uq_projects_active_name'")
        ).scalar_one()
    assert "UNIQUE" in ddl.upper()
    assert "lower(name)" in ddl
    assert "WHERE NOT soft_delete" in ddl
    assert "ix_projects_account_id" in {index["name"] for index in inspector.get_indexes("projects")}
    assert "ix_person_projects_project_id" in {
        index["name"] for index in inspector.get_indexes("person_projects")
    }
    engine.dispose()

    command.downgrade(config, "base")

    engine = create_engine(url)
    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    engine.dispose()
