"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tracker.timeutils import DAY_MS  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite database)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def local_ms(year, month, day, hour=12, minute=0):
    """Epoch milliseconds for a local wall-clock time"""
    return int(datetime(year, month, day, hour, minute).timestamp() * 1000)


@pytest.fixture
def now():
    """A fixed local noon, far from midnight and DST edges."""
    return local_ms(2024, 6, 15, 12)


@pytest.fixture
def day_ms():
    return DAY_MS
