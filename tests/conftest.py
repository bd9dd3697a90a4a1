"""Shared pytest fixtures for logbook-search tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from logbook_search.config import SearchConfig
from logbook_search.engine import SearchCompiler

# Reference instant used as "now" throughout the tests
FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def temp_project():
    """Create a temporary project directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def now():
    """The fixed reference instant."""
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock collaborator pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def config():
    """Create a test configuration."""
    return SearchConfig(index="test_logs", default_size=100, max_size=1000)


@pytest.fixture
def compiler(config):
    """Create a test compiler."""
    return SearchCompiler(config)
