"""Tests for the dependency injection container."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from conftest import FakeTransport, make_directory
from dependency_injector import providers

from namevault.containers import create_container, shutdown
from namevault.services.cache.memory_cache import MemoryCacheTier
from namevault.services.cache.sqlite_cache import SQLiteCacheTier

pytestmark = pytest.mark.integration


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "namevault.toml"
    sqlite_path = (tmp_path / "cache" / "names.db").as_posix()
    path.write_text(
        '[api]\nbase_url = "https://esi.test/latest"\n\n'
        "[resolver]\nmax_batch_size = 2\nbulk_window = 1\n\n"
        f'[cache]\nenabled_tiers = ["memory", "sqlite"]\nsqlite_path = "{sqlite_path}"\n\n'
        "[logging]\nconsole_output = false\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger("namevault")
    yield
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestContainer:
    """Wiring from settings to the resolver."""

    def test_settings_flow_into_services(self, config_file: Path) -> None:
        container = create_container(config_file)

        resolver = container.resolver_service()

        assert resolver.max_batch_size == 2
        assert resolver.escalator.bulk_window == 1
        assert resolver.escalator.client.base_url == "https://esi.test/latest"
        assert [type(tier) for tier in resolver.cache.tiers] == [MemoryCacheTier, SQLiteCacheTier]
        assert container.resolver_service() is resolver
        resolver.cache.close()

    @pytest.mark.asyncio
    async def test_resolve_and_shutdown(self, config_file: Path) -> None:
        # Given
        container = create_container(config_file)
        fake = FakeTransport(make_directory([1, 2, 3]))
        container.transport.override(providers.Object(fake))

        # When
        resolver = container.resolver_service()
        result = await resolver.resolve([3, 1, 2])
        await shutdown(container)

        # Then
        assert [record.name for record in result.values()] == ["entity-3", "entity-1", "entity-2"]
        assert len(fake.calls) == 2
        assert fake.closed is True
        assert container.resolver_service() is not resolver
        container.resolver_service().cache.close()
