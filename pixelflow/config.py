"""
pixelflow configuration.

Settings are read from the environment (prefix ``PIXELFLOW_``, nested keys
separated by ``__``), e.g.::

    PIXELFLOW_EXECUTOR__THREAD_COUNT=8
    PIXELFLOW_FILTERS__BORDER_MODE=mirror
    PIXELFLOW_SYSTEM__LOG_LEVEL=DEBUG
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pixelflow.core.constants import ExecutorConstants, FilterConstants, SystemConstants
from pixelflow.core.enums import BorderMode

logger = logging.getLogger(__name__)


def _default_thread_count() -> int:
    return max(ExecutorConstants.MIN_THREADS, os.cpu_count() or 1)


class ExecutorSettings(BaseModel):
    """Row-band thread pool configuration."""

    thread_count: int = Field(
        default_factory=_default_thread_count,
        ge=ExecutorConstants.MIN_THREADS,
        le=ExecutorConstants.MAX_THREADS,
        description="Worker threads used when an operation is not given a thread count",
    )


class FilterSettings(BaseModel):
    """Defaults for windowed operations."""

    border_mode: BorderMode = Field(
        default=BorderMode(FilterConstants.BORDER_MODE_DEFAULT),
        description="Border policy used when none is passed explicitly",
    )
    constant_value: float = Field(
        default=FilterConstants.BORDER_CONSTANT_DEFAULT,
        description="Fill value for the constant border mode",
    )
    median_window: int = Field(
        default=FilterConstants.MEDIAN_WINDOW_DEFAULT,
        ge=1,
        le=FilterConstants.MEDIAN_WINDOW_MAX,
        description="Default median window edge length",
    )

    @field_validator("border_mode", mode="before")
    @classmethod
    def _lower_border_mode(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class SystemSettings(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default=SystemConstants.LOG_LEVEL_DEFAULT)
    log_format: str = Field(default=SystemConstants.LOG_FORMAT)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


class Settings(BaseSettings):
    """Top-level pixelflow settings."""

    model_config = SettingsConfigDict(
        env_prefix=SystemConstants.ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )

    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    filters: FilterSettings = Field(default_factory=FilterSettings)
    system: SystemSettings = Field(default_factory=SystemSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view (enums as strings)."""
        return self.model_dump(mode="json")


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings (read once from the environment)."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging from settings.

    Applications call this once at startup; the library itself only creates
    module loggers.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.system.log_level),
        format=settings.system.log_format,
    )
    logger.info(f"pixelflow logging configured at {settings.system.log_level}")
    logger.debug(f"pixelflow settings: {settings.to_dict()}")
