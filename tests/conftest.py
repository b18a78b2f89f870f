"""
Pytest fixtures and configuration for imgalloc tests.
"""
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from imgalloc.backends import DriveRegistry, ZeroFillAllocator
from imgalloc.cli.utils import Session
from imgalloc.interfaces.drives import DriveManager
from imgalloc.models import Settings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    """A drive registry that is still configurable."""
    return DriveRegistry()


@pytest.fixture
def launched_registry():
    """A drive registry whose configuration is closed."""
    registry = DriveRegistry()
    registry.launch()
    return registry


@pytest.fixture
def mock_drives():
    """Mock DriveManager that accepts every drive."""
    drives = MagicMock(spec=DriveManager)
    drives.is_configurable.return_value = True
    return drives


@pytest.fixture
def session(registry):
    """Shell session using the portable allocator."""
    return Session(drives=registry, allocator=ZeroFillAllocator(), settings=Settings())
