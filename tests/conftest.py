"""Pytest configuration and fixtures for document_store tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from document_store.adapters.outbound import MemoryDocumentStorage
from document_store.domain.services import TypeRegistry
from document_store.infrastructure.config import Config, StorageConfig, VersioningConfig
from document_store.infrastructure.container import Container, reset_container
from document_store.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with temporary directories."""
    return Config(
        storage=StorageConfig(database_dir=temp_dir / "database"),
        versioning=VersioningConfig(app_version="1.0"),
    )


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    reset_container()
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def memory_storage() -> MemoryDocumentStorage:
    """Provide an empty in-memory document storage."""
    return MemoryDocumentStorage()


@pytest.fixture
def registry() -> TypeRegistry:
    """Provide an empty type registry for each test."""
    return TypeRegistry()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
