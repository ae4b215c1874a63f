"""Programmatic Alembic upgrades, used by deploy scripts and tests."""
from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def alembic_config(database_url: str) -> Config:
    cfg = Config(str(_PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    # env.py reads this before falling back to settings.DATABASE_URL
    cfg.attributes["database_url_override"] = database_url
    return cfg


def run_migrations(database_url: str, revision: str = "head") -> None:
    command.upgrade(alembic_config(database_url), revision)


def downgrade_migrations(database_url: str, revision: str = "base") -> None:
    command.downgrade(alembic_config(database_url), revision)
