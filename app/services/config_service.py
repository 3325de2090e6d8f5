"""
Configuration service for reading settings from environment.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, List

logger = logging.getLogger("app.config")

DEFAULT_SKIP_KEYWORDS = "store,name,company"


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        self._cache: dict[str, Any] = {}

    def get_setting(self, key: str, default: Any = None) -> Any:
        """
        Get setting value from environment.

        Priority: Cache > Environment > Default
        """
        if key in self._cache:
            return self._cache[key]

        value = os.getenv(key, default)

        self._cache[key] = value

        logger.debug(f"Retrieved setting {key}={value}")
        return value

    def set_setting(self, key: str, value: Any) -> None:
        """Override a setting for the lifetime of the process."""
        self._cache[key] = value
        logger.info(f"Set setting {key}={value}")

    def clear_cache(self) -> None:
        """Forget cached values so the environment is read again."""
        self._cache.clear()

    def get_int(self, key: str, default: int) -> int:
        value = self.get_setting(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}: {value}, using {default}")
            return default

    @property
    def max_files_per_batch(self) -> int:
        return self.get_int("IMPORT_MAX_FILES", 50)

    @property
    def max_file_size_bytes(self) -> int:
        return self.get_int("IMPORT_MAX_FILE_SIZE_MB", 10) * 1024 * 1024

    @property
    def preview_size(self) -> int:
        return self.get_int("IMPORT_PREVIEW_SIZE", 5)

    def skip_keywords(self) -> List[str]:
        """
        Keywords marking header-like rows embedded in a sheet.

        An empty IMPORT_SKIP_KEYWORDS value disables the filter.
        """
        raw = self.get_setting("IMPORT_SKIP_KEYWORDS", DEFAULT_SKIP_KEYWORDS) or ""
        return [keyword.strip().lower() for keyword in str(raw).split(",") if keyword.strip()]

    def now(self) -> datetime:
        """
        Get current time (real or fake based on APP_NOW_MODE).

        Returns:
            Current datetime (real or fake)
        """
        now_mode = self.get_setting("APP_NOW_MODE", "real")

        if now_mode == "fake":
            fake_now_str = self.get_setting("APP_FAKE_NOW")
            if fake_now_str:
                try:
                    # Parse YYYY-MM-DD format
                    fake_date = datetime.strptime(fake_now_str, "%Y-%m-%d").replace(tzinfo=timezone.utc)
                    logger.debug(f"Using fake time: {fake_date}")
                    return fake_date
                except ValueError:
                    logger.warning(f"Invalid APP_FAKE_NOW format: {fake_now_str}, using real time")

        return datetime.now(timezone.utc)


# Global instance
config_service = ConfigService()
