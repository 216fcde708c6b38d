"""NameVault Configuration Module

This module provides unified access to configuration models and settings
loading for the NameVault engine.
"""

from __future__ import annotations

from .loader import load_settings
from .models import (
    APISettings,
    CacheSettings,
    LoggingSettings,
    ResolverSettings,
    Settings,
)

__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "ResolverSettings",
    "Settings",
    "load_settings",
]
