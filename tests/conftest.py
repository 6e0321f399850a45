"""Shared pytest fixtures for all tests."""

import pytest

from contentstore.container import Container
from contentstore.repositories.common.cache import KeyedCache
from contentstore.services.hooks import HookRegistry


@pytest.fixture
def cache() -> KeyedCache:
    return KeyedCache()


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
async def container():
    """Installed container on a fresh in-memory DuckDB database."""
    c = Container(":memory:", "")
    result = await c.install()
    assert result is True
    yield c
    c.close()


@pytest.fixture
def executor(container):
    return container.executor


@pytest.fixture
def migrator(container):
    return container.migrator


@pytest.fixture
def store(container):
    return container.store


@pytest.fixture
def ddl_batches(container, monkeypatch) -> list[list[str]]:
    """Records every statement batch the container's database runs."""
    batches: list[list[str]] = []
    execute_all = container.db.execute_all

    async def record(statements):
        batches.append(list(statements))
        return await execute_all(statements)

    monkeypatch.setattr(container.db, "execute_all", record)
    return batches
