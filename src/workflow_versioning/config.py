"""Configuration for the versioning engine.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workflow_versioning.versioning.semver import INITIAL_VERSION, parse_version


class VersioningSettings(BaseSettings):
    """Settings for the versioning service and its store.

    Environment variables:
    - LOG_LEVEL                                 (optional)
    - WORKFLOW_VERSIONING_STORE_BACKEND         (optional, memory | json)
    - WORKFLOW_VERSIONING_STATE_PATH            (optional)
    - WORKFLOW_VERSIONING_BASE_VERSION          (optional)
    - WORKFLOW_VERSIONING_LOCK_TIMEOUT_SECONDS  (optional)
    - WORKFLOW_VERSIONING_CACHE_ENABLED         (optional)

    Notes:
        Tests can override the env file via
        `VersioningSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    store_backend: Literal["memory", "json"] = Field(
        default="json",
        validation_alias="WORKFLOW_VERSIONING_STORE_BACKEND",
        description="Version store implementation",
    )

    state_path: Path = Field(
        default=Path("version_state"),
        validation_alias="WORKFLOW_VERSIONING_STATE_PATH",
        description="Directory where the JSON store persists version history",
    )

    base_version: str = Field(
        default=INITIAL_VERSION,
        validation_alias="WORKFLOW_VERSIONING_BASE_VERSION",
        description=(
            "Version the first change of a document is bumped from. With the default "
            "'0.0.0' a first 'major' change yields 1.0.0."
        ),
    )

    lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        validation_alias="WORKFLOW_VERSIONING_LOCK_TIMEOUT_SECONDS",
        description="How long store operations wait for the store lock",
    )

    cache_enabled: bool = Field(
        default=True,
        validation_alias="WORKFLOW_VERSIONING_CACHE_ENABLED",
        description="Serve version history from the in-process cache",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("base_version")
    @classmethod
    def _valid_base_version(cls, value: str) -> str:
        parse_version(value)
        return value

    @property
    def store_file(self) -> Path:
        """Path of the JSON version history document."""

        return self.state_path / "workflow_versions.json"
