"""
Pytest configuration and fixtures for StoreLink tests.
"""

import os

os.environ.setdefault("DB_URL", "sqlite:///./test.db")
os.environ.setdefault("TESTING", "true")

from io import BytesIO

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database.init_db import create_tables
from app.database.session import get_session
from app.main import app
from app.services.config_service import config_service

STORE_HEADER = ["Store Name", "Province", "Address", "City", "Contact Person", "Phone", "Email"]


@pytest.fixture(scope="function")
def isolated_engine(tmp_path):
    """Create a fresh SQLite database file for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    create_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def isolated_db_session(isolated_engine):
    """Create an isolated database session for each test."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=isolated_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(isolated_db_session):
    """Create a test client with database dependency override."""

    def override_get_session():
        try:
            yield isolated_db_session
        finally:
            pass

    app.dependency_overrides[get_session] = override_get_session

    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_config():
    """Drop settings cached or overridden by a test."""
    config_service.clear_cache()
    yield
    config_service.clear_cache()


def build_xlsx(rows):
    """Serialize rows (lists of cell values) into an .xlsx payload."""
    buffer = BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, header=False)
    return buffer.getvalue()


def store_row(index: int, province: str = "GAUTENG", city: str = "Johannesburg"):
    return [
        f"Builders Corner {index}",
        province,
        f"{index} Main Road",
        city,
        f"Contact {index}",
        f"011 555 {index:04d}",
        f"owner{index}@example.com",
    ]


@pytest.fixture
def make_xlsx():
    return build_xlsx


@pytest.fixture
def store_sheet():
    """Header plus ten valid store rows."""
    return build_xlsx([STORE_HEADER] + [store_row(i) for i in range(1, 11)])


@pytest.fixture
def make_store_row():
    return store_row


@pytest.fixture
def store_header():
    return list(STORE_HEADER)
