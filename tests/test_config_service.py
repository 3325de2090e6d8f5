"""
Tests for configuration service.
"""
from datetime import datetime, timezone

from app.services.config_service import ConfigService


def test_defaults(monkeypatch):
    for key in ("IMPORT_MAX_FILES", "IMPORT_MAX_FILE_SIZE_MB", "IMPORT_PREVIEW_SIZE", "IMPORT_SKIP_KEYWORDS"):
        monkeypatch.delenv(key, raising=False)
    config = ConfigService()

    assert config.max_files_per_batch == 50
    assert config.max_file_size_bytes == 10 * 1024 * 1024
    assert config.preview_size == 5
    assert config.skip_keywords() == ["store", "name", "company"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("IMPORT_MAX_FILES", "3")
    monkeypatch.setenv("IMPORT_SKIP_KEYWORDS", " Header , TOTAL ,")
    config = ConfigService()

    assert config.max_files_per_batch == 3
    assert config.skip_keywords() == ["header", "total"]


def test_invalid_integer_falls_back(monkeypatch):
    monkeypatch.setenv("IMPORT_PREVIEW_SIZE", "lots")

    assert ConfigService().preview_size == 5


def test_set_setting_wins_until_cache_cleared(monkeypatch):
    monkeypatch.setenv("IMPORT_MAX_FILES", "7")
    config = ConfigService()
    config.set_setting("IMPORT_MAX_FILES", 2)

    assert config.max_files_per_batch == 2

    config.clear_cache()
    assert config.max_files_per_batch == 7


def test_fake_time(monkeypatch):
    monkeypatch.setenv("APP_NOW_MODE", "fake")
    monkeypatch.setenv("APP_FAKE_NOW", "2024-03-15")
    config = ConfigService()

    expected = datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert config.now() == expected


def test_invalid_fake_time_uses_real_clock(monkeypatch):
    monkeypatch.setenv("APP_NOW_MODE", "fake")
    monkeypatch.setenv("APP_FAKE_NOW", "15/03/2024")
    config = ConfigService()

    assert config.now().year >= 2024


def test_real_time_by_default(monkeypatch):
    monkeypatch.delenv("APP_NOW_MODE", raising=False)
    config = ConfigService()

    assert config.now().tzinfo is not None
