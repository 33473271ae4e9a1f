"""Editor configuration.

Settings are read from environment variables with the CELLDESK_ prefix, or
from a .env file in the working directory.

Environment Variables:
    CELLDESK_ROWS: Grid row count (default: 50)
    CELLDESK_COLS: Grid column count (default: 26)
    CELLDESK_ERROR_FLASH_SECONDS: How long an errored cell stays flagged (default: 2.0)
    CELLDESK_TITLE_DEBOUNCE_SECONDS: Delay before a title change is persisted (default: 0.5)
    CELLDESK_MAX_RETRIES: Retries for failed repository calls (default: 3)
    CELLDESK_BASE_DELAY: Base delay in seconds for exponential backoff (default: 1.0)
    CELLDESK_LOG_LEVEL: Logging level (default: INFO)
"""

from __future__ import annotations

import logging
import threading

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from celldesk.grid.address import GridBounds

_lock = threading.Lock()
_instance: EditorSettings | None = None


class EditorSettings(BaseSettings):
    """Grid, timing and persistence settings for an editor session."""

    model_config = SettingsConfigDict(
        env_prefix="CELLDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rows: int = Field(default=50, ge=1)
    cols: int = Field(default=26, ge=1)

    error_flash_seconds: float = Field(default=2.0, ge=0)
    """How long a cell stays flagged after its formula failed to evaluate."""

    title_debounce_seconds: float = Field(default=0.5, ge=0)

    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=1.0, ge=0)

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def bounds(self) -> GridBounds:
        return GridBounds(rows=self.rows, cols=self.cols)


def get_settings() -> EditorSettings:
    global _instance
    if _instance is None:
        with _lock:
            if _instance is None:
                _instance = EditorSettings()
    return _instance


def reset_settings() -> None:
    global _instance
    with _lock:
        _instance = None
