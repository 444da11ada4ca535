"""Shared fixtures for module auditor tests."""

import pytest

from module_auditor.store import init_store


@pytest.fixture
def store(tmp_path):
    """Create a temporary SQLite inventory store."""
    inventory = init_store(f"sqlite:///{tmp_path / 'inventory.db'}")
    yield inventory
    inventory.close()
