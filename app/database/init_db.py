"""
Database initialization script.
"""
import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from app.database.engine import engine as default_engine

logger = logging.getLogger("app.database")


def create_tables(engine: Engine = None) -> None:
    """
    Create every table registered on the SQLModel metadata.

    Args:
        engine: Target engine, defaults to the application engine
    """
    # Register table models on the metadata
    from app.models import achievement, hardware_store, import_models  # noqa: F401

    SQLModel.metadata.create_all(engine or default_engine)
    logger.info("Database tables created")


def init_database() -> None:
    """
    Initialize database structure.
    """
    logger.info("Initializing database...")
    try:
        create_tables()
        logger.info("Database initialization completed")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


if __name__ == "__main__":
    init_database()
