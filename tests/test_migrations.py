"""
Tests for the Alembic migration environment.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def test_upgrade_head_uses_async_driver(tmp_path, monkeypatch):
    """A plain sqlite:// URL is migrated through aiosqlite, with no sync driver needed."""
    db_path = tmp_path / "migrated.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")

    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    command.upgrade(config, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        assert "users" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("users")}
        assert {"email", "username", "hashed_password", "tracked_cities", "version_id"} <= columns
        unique_indexes = {ix["name"] for ix in inspector.get_indexes("users") if ix["unique"]}
        assert {"ix_users_email", "ix_users_username"} <= unique_indexes
    finally:
        engine.dispose()
