"""
NameVault Constants Module

This module provides centralized constants for NameVault. All magic values
and configuration defaults are defined here.
"""

from .cache import (
    BASE_DAY,
    BASE_HOUR,
    BASE_MINUTE,
    BASE_SECOND,
    CacheConfig,
    CacheValidationConstants,
    TTLClasses,
)
from .logging_keys import LogContextKeys, LogOperationNames
from .network import HTTPStatusCodes, NetworkConfig, ResolverDefaults

__all__ = [
    "BASE_DAY",
    "BASE_HOUR",
    "BASE_MINUTE",
    "BASE_SECOND",
    "CacheConfig",
    "CacheValidationConstants",
    "HTTPStatusCodes",
    "LogContextKeys",
    "LogOperationNames",
    "NetworkConfig",
    "ResolverDefaults",
    "TTLClasses",
]
