"""Settings loading.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Validation failures mapped onto the NameVault error taxonomy

There is no process-wide settings cache: the container loads settings once
at startup and hands them to the services it builds.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from namevault.config.models.settings import Settings
from namevault.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/namevault.toml"),
    Path("namevault.toml"),
)


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file if one exists.

    Variables already present in the environment win over the file.

    Args:
        env_file: Path to .env file

    Raises:
        InfrastructureError: If the file exists but cannot be read
    """
    if not env_file.exists():
        return

    try:
        load_dotenv(env_file, override=False)
    except OSError as e:
        raise InfrastructureError(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"Failed to read .env file: {e}",
            context=ErrorContext(
                operation="load_env",
                additional_data={"file_name": env_file.name},
            ),
            original_error=e,
        ) from e


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from TOML configuration file or environment.

    Args:
        config_path: Optional path to TOML configuration file. If None, the
            default locations are tried before falling back to environment
            variables and built-in defaults.

    Returns:
        Validated Settings instance

    Raises:
        ApplicationError: If the configuration is missing or invalid

    Example:
        >>> settings = load_settings()
        >>> settings.resolver.max_batch_size
        1000
    """
    _load_env_file()

    candidates = [Path(config_path)] if config_path else list(DEFAULT_CONFIG_PATHS)
    source = next((path for path in candidates if path.exists()), None)

    if config_path and source is None:
        raise ApplicationError(
            code=ErrorCode.CONFIG_ERROR,
            message=f"Configuration file not found: {config_path}",
            context=ErrorContext(
                operation="load_settings",
                file_path=str(config_path),
            ),
        )

    try:
        if source is not None:
            logger.debug("Loading configuration from %s", source)
            return Settings.from_toml_file(source)
        return Settings()
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Invalid configuration: {e.error_count()} error(s)",
            context=ErrorContext(
                operation="load_settings",
                file_path=str(source) if source else None,
            ),
            original_error=e,
        ) from e
    except (OSError, ValueError) as e:
        # toml.TomlDecodeError is a ValueError
        raise ApplicationError(
            code=ErrorCode.CONFIG_ERROR,
            message=f"Failed to read configuration: {e}",
            context=ErrorContext(
                operation="load_settings",
                file_path=str(source) if source else None,
            ),
            original_error=e,
        ) from e


__all__ = ["DEFAULT_CONFIG_PATHS", "load_settings"]
