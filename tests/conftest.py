"""
Shared pytest fixtures and configuration for strata tests.

This module provides:
- Settings and logging-context cleanup for test isolation
- A private metrics registry so assertions never see other tests' samples
- Small interactor helpers used across the execution tests

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(metrics):
        ...
"""

import sys
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

# Ensure strata package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from strata.core.logging import clear_context
from strata.core.settings import reset_settings
from strata.observability.metrics import InteractorMetrics


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings():
    """Re-read settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_log_context():
    """Drop structlog context bound by a previous test."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def registry() -> CollectorRegistry:
    """A fresh Prometheus collector registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> InteractorMetrics:
    """Interactor metrics recording into the private registry."""
    return InteractorMetrics(registry)
