"""Alembic schema migrations for the case notes store."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from casenotes.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[5]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"
MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def _pyproject_options() -> dict[str, str]:
    """``[tool.alembic]`` from a source checkout; empty when running from an install."""

    if not PYPROJECT_PATH.is_file():
        return {}
    with PYPROJECT_PATH.open("rb") as pyproject_file:
        document = tomllib.load(pyproject_file)
    section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def build_config(*, database_uri: str | None = None) -> Config:
    options = _pyproject_options()
    config = Config(toml_file=str(PYPROJECT_PATH)) if options else Config()

    # scripts are always loaded from the installed package
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    for key, value in options.items():
        if key not in {"script_location", "prepend_sys_path"}:
            config.set_main_option(key, value)
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the database schema to the latest revision."""

    if engine is not None:
        config = build_config()
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    command.upgrade(build_config(database_uri=database_uri or get_database_uri()), "head")
