"""Dependency Injection container for NameVault.

This module provides a centralized DI container using dependency-injector.
One container builds one service graph; nothing is stored at module level.

The container manages:
- Settings (Singleton)
- Logging setup
- TTL policy, statistics and the cache tier chain
- Remote transport, client and fallback escalator
- The resolver service and its shutdown hook
"""

from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector import containers, providers

from namevault.config.loader import load_settings
from namevault.config.models.settings import Settings
from namevault.core.statistics import StatisticsCollector
from namevault.services.cache.base import CacheTier
from namevault.services.cache.file_cache import FileCacheTier
from namevault.services.cache.memory_cache import MemoryCacheTier
from namevault.services.cache.sqlite_cache import SQLiteCacheTier
from namevault.services.cache.tiered_cache import TieredCache
from namevault.services.fallback import FallbackEscalator
from namevault.services.remote.client import RemoteResolveClient
from namevault.services.remote.transport import AiohttpTransport
from namevault.services.resolver import ResolverService
from namevault.services.ttl_policy import TTLPolicy
from namevault.services.validity_filter import ValidityFilter
from namevault.shared.constants import CacheConfig
from namevault.shared.logging import setup_structured_logger


def build_tiers(settings: Settings, policy: TTLPolicy) -> list[CacheTier]:
    """Instantiate the enabled tiers in their configured order."""
    cache = settings.cache
    builders = {
        CacheConfig.TIER_MEMORY: lambda: MemoryCacheTier(policy, max_entries=cache.memory_max_entries),
        CacheConfig.TIER_FILE: lambda: FileCacheTier(
            cache.file_cache_dir,
            policy,
            purge_on_startup=cache.purge_on_startup,
        ),
        CacheConfig.TIER_SQLITE: lambda: SQLiteCacheTier(
            cache.sqlite_path,
            policy,
            purge_on_startup=cache.purge_on_startup,
        ),
    }
    return [builders[name]() for name in cache.enabled_tiers]


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply the logging section of ``settings`` to the package logger."""
    return setup_structured_logger(
        level=settings.logging.level,
        log_file=settings.logging.file,
        console_output=settings.logging.console_output,
        use_rich_console=settings.logging.use_rich_console,
    )


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for NameVault services.

    Example:
        >>> container = Container()
        >>> resolver = container.resolver_service()
        >>> names = await resolver.resolve([30000142])
        >>> await shutdown(container)
    """

    # Configuration
    config = providers.Singleton(load_settings)

    logger = providers.Singleton(configure_logging, settings=config)

    ttl_policy = providers.Singleton(
        TTLPolicy,
        ttl_seconds=providers.Callable(lambda config: config.cache.ttl_seconds, config=config),
    )

    statistics = providers.Singleton(StatisticsCollector)

    # Cache services
    cache_tiers = providers.Singleton(build_tiers, settings=config, policy=ttl_policy)

    tiered_cache = providers.Singleton(
        TieredCache,
        tiers=cache_tiers,
        statistics=statistics,
    )

    validity_filter = providers.Singleton(
        ValidityFilter,
        ranges=providers.Callable(lambda config: config.resolver.addressable_ranges, config=config),
    )

    # Remote access
    transport = providers.Singleton(
        AiohttpTransport,
        timeout=providers.Callable(lambda config: config.api.timeout, config=config),
        user_agent=providers.Callable(lambda config: config.api.user_agent, config=config),
    )

    remote_client = providers.Singleton(
        RemoteResolveClient,
        transport=transport,
        base_url=providers.Callable(lambda config: config.api.base_url, config=config),
        rate_limit=providers.Callable(lambda config: config.api.rate_limit_rps, config=config),
        rate_period=providers.Callable(lambda config: config.api.rate_limit_period, config=config),
        statistics=statistics,
    )

    escalator = providers.Singleton(
        FallbackEscalator,
        client=remote_client,
        bulk_window=providers.Callable(lambda config: config.resolver.bulk_window, config=config),
        fallback_window=providers.Callable(lambda config: config.resolver.fallback_window, config=config),
        statistics=statistics,
    )

    # Resolver
    resolver_service = providers.Singleton(
        ResolverService,
        cache=tiered_cache,
        escalator=escalator,
        policy=ttl_policy,
        validity_filter=validity_filter,
        max_batch_size=providers.Callable(lambda config: config.resolver.max_batch_size, config=config),
        statistics=statistics,
    )


def create_container(config_path: str | Path | None = None) -> Container:
    """Build a container and configure logging from its settings.

    Args:
        config_path: Optional TOML file; defaults to the standard locations

    Returns:
        Ready-to-use container
    """
    container = Container()
    if config_path is not None:
        container.config.override(providers.Singleton(load_settings, config_path))
    container.logger()
    return container


async def shutdown(container: Container) -> None:
    """Close the service graph built by ``container``.

    Closes the resolver (remote client and every cache tier) and drops the
    singletons so the next call builds a fresh graph.
    """
    await container.resolver_service().close()
    container.reset_singletons()


__all__ = ["Container", "build_tiers", "configure_logging", "create_container", "shutdown"]
