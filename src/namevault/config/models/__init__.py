"""Configuration models for NameVault.

Each configuration domain lives in its own module.
"""

from __future__ import annotations

from .api_settings import APISettings
from .app_settings import LoggingSettings
from .cache_settings import CacheSettings
from .resolver_settings import ResolverSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "ResolverSettings",
    "Settings",
]
