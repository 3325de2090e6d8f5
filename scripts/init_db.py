#!/usr/bin/env python3
"""
Database bootstrap for StoreLink.

Creates the schema on first run and keeps Alembic's revision table in step.
"""

import logging
import os
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from app.database.engine import engine
from app.database.init_db import create_tables

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

CORE_TABLES = {"import_sessions", "hardware_stores", "user_achievement_progress"}


def check_database_exists() -> bool:
    """Check whether the core tables are already present."""
    try:
        existing = set(inspect(engine).get_table_names())
        return CORE_TABLES.issubset(existing)
    except Exception as e:
        logger.info(f"Database not found or unreachable: {e}")
        return False


def get_alembic_config() -> Config:
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(project_root / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", engine.url.render_as_string(hide_password=False))
    return alembic_cfg


def run_migrations(fresh: bool) -> bool:
    """
    Bring the Alembic revision up to head.

    A freshly created schema is stamped rather than migrated.
    """
    try:
        alembic_cfg = get_alembic_config()
        script = ScriptDirectory.from_config(alembic_cfg)

        with engine.connect() as conn:
            current_rev = MigrationContext.configure(conn).get_current_revision()

        head_rev = script.get_current_head()

        if current_rev == head_rev:
            logger.info("Database is up to date")
        elif fresh:
            logger.info(f"Stamping new database at {head_rev}")
            command.stamp(alembic_cfg, "head")
        else:
            logger.info(f"Applying migrations: {current_rev} -> {head_rev}")
            command.upgrade(alembic_cfg, "head")

        return True
    except Exception as e:
        logger.error(f"Migration failed: {e}")
        return False


def main():
    logger.info("Starting StoreLink database initialization")

    db_url = os.getenv("DB_URL")
    if not db_url:
        logger.error("DB_URL is not set")
        sys.exit(1)

    fresh = not check_database_exists()
    if fresh:
        logger.info("Initializing new database")
        try:
            create_tables()
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            sys.exit(1)

    if not run_migrations(fresh):
        sys.exit(1)

    logger.info("Database initialization finished")


if __name__ == "__main__":
    main()
