from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from task_tracker.core import config as app_config

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def test_migrations_build_the_model_schema(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setattr(app_config.settings, "DATABASE_URL", db_url)

    # No ini file: keeps alembic from reconfiguring the test process's logging.
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    command.upgrade(cfg, "head")

    insp = inspect(create_engine(db_url))
    assert {"users", "refresh_tokens", "tasks"} <= set(insp.get_table_names())
    assert {c["name"] for c in insp.get_columns("tasks")} == {
        "id",
        "user_id",
        "title",
        "description",
        "status",
        "priority",
        "due_date",
        "created_at",
        "updated_at",
    }

    command.downgrade(cfg, "base")
    assert "users" not in inspect(create_engine(db_url)).get_table_names()
