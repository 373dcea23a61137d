"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from kernel.plugins.generator import DEFAULT_ARTIFACT_PATH
from kernel.plugins.manager import (
    DEFAULT_APP_PLUGIN_CANDIDATES,
    DEFAULT_APP_PLUGIN_NAME,
    DEFAULT_PRIMARY_PACKAGE,
)
from kernel.plugins.package import DEFAULT_ENTRY_POINT_GROUP, DEFAULT_METADATA_KEY


class Settings(BaseSettings):
    """Settings loaded from KERNEL_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KERNEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discovery
    metadata_key: str = DEFAULT_METADATA_KEY
    entry_point_group: str = DEFAULT_ENTRY_POINT_GROUP
    manifest_path: Optional[Path] = None   # read packages from a JSON manifest instead

    # Ordering
    primary_package: str = DEFAULT_PRIMARY_PACKAGE

    # Application plugin, appended last if one of the candidates exists
    app_plugin_name: str = DEFAULT_APP_PLUGIN_NAME
    app_plugin_candidates: list[str] = list(DEFAULT_APP_PLUGIN_CANDIDATES)

    # Generated registry
    artifact_path: Path = DEFAULT_ARTIFACT_PATH

    log_level: str = "INFO"


settings = Settings()
