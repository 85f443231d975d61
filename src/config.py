# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """Runtime configuration for the authorization service.

    Every field can be overridden with an ``RBAC_``-prefixed environment
    variable, e.g. ``RBAC_DATABASE_URL``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RBAC_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="Capability RBAC",
        description="Human readable API name.",
    )
    database_url: str = Field(
        default="sqlite:///./rbac.db",
        description="SQLAlchemy database URL.",
    )
    log_level: LogLevel = Field(default="INFO")
    effective_cache_enabled: bool = Field(
        default=True,
        description="Cache resolved permissions per (org, user, site).",
    )
    effective_cache_max_entries: int = Field(default=10_000, gt=0)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
    )


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
