"""
Worklist Alerts Centralized Configuration

Provides validated, type-safe access to all environment variables using Pydantic Settings.

Usage:
    from worklist_alerts.core.config import get_settings

    settings = get_settings()
    if settings.log_level == "DEBUG":
        ...

Environment Variables:
    WORKLIST_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    WORKLIST_DEBUG: Legacy debug flag (enables DEBUG level if set)
    WORKLIST_LOG_JSON: Output logs as JSON
    WORKLIST_ENGINE_CONFIG: YAML file with engine tuning overrides
    WORKLIST_FEED_PATH: Default JSON notification snapshot for the CLI
    WORKLIST_TIME_BUDGET_MS: Wall-clock budget per orchestration pass
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_env_file() -> Path | None:
    """
    Find .env file by searching for project root markers.

    Searches upward from this file's location for pyproject.toml,
    then checks for .env in that directory.

    Returns:
        Path to .env if found, None otherwise
    """
    current = Path(__file__).resolve().parent

    for _ in range(10):  # Limit search depth
        if (current / "pyproject.toml").exists():
            env_file = current / ".env"
            if env_file.exists():
                return env_file
            return None
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


_ENV_FILE = _find_project_env_file()


class WorklistSettings(BaseSettings):
    """
    Process-level settings with validation.

    Environment variables are automatically loaded with the WORKLIST_ prefix.
    Engine tuning (weights, windows, caps) lives in EngineConfig; this class
    only decides where that tuning comes from.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKLIST_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level for worklist_alerts components",
    )

    debug: bool = Field(
        default=False,
        description="Legacy debug flag (enables DEBUG level if set)",
    )

    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format for machine parsing",
    )

    # =========================================================================
    # Engine Configuration
    # =========================================================================

    engine_config: Optional[Path] = Field(
        default=None,
        description="YAML file with engine tuning overrides",
    )

    time_budget_ms: Optional[int] = Field(
        default=None,
        description="Override for the per-pass orchestration budget (0 disables)",
    )

    # =========================================================================
    # Data Paths
    # =========================================================================

    feed_path: Path = Field(
        default=Path("notifications.json"),
        description="Default JSON notification snapshot used by the CLI",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("time_budget_ms")
    @classmethod
    def non_negative_budget(cls, v: Optional[int]) -> Optional[int]:
        """Reject negative budgets."""
        if v is not None and v < 0:
            raise ValueError("time_budget_ms must be >= 0")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def effective_log_level(self) -> str:
        """
        Get effective log level, respecting legacy WORKLIST_DEBUG.

        Priority:
        1. Explicit WORKLIST_LOG_LEVEL
        2. WORKLIST_DEBUG=1 -> DEBUG
        3. Default: WARNING
        """
        if self.debug and self.log_level == "WARNING":
            return "DEBUG"
        return self.log_level

    @property
    def log_level_int(self) -> int:
        """Get effective log level as logging constant."""
        return getattr(logging, self.effective_log_level)


# =============================================================================
# Singleton Accessor
# =============================================================================


@lru_cache(maxsize=1)
def get_settings() -> WorklistSettings:
    """
    Get the singleton settings instance.

    Returns:
        WorklistSettings instance with validated configuration
    """
    return WorklistSettings()


def reset_settings() -> None:
    """
    Reset the settings cache (for testing).

    After calling this, the next get_settings() call will
    reload settings from environment variables.
    """
    get_settings.cache_clear()


def is_debug_enabled() -> bool:
    """Check if debug logging is enabled."""
    return get_settings().effective_log_level == "DEBUG"


def is_json_logging() -> bool:
    """Check if JSON logging is enabled."""
    return get_settings().log_json
