"""NameVault Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from namevault.config.models.api_settings import APISettings
from namevault.config.models.app_settings import LoggingSettings
from namevault.config.models.cache_settings import CacheSettings
from namevault.config.models.resolver_settings import ResolverSettings


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Environment variables override the defaults, e.g.
    ``NAMEVAULT_RESOLVER__MAX_BATCH_SIZE=500``. Values read from a TOML
    file are passed as init arguments and take precedence over both.
    """

    model_config = SettingsConfigDict(
        env_prefix="NAMEVAULT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file; unset fields fall back to the environment."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
