"""
Shared pytest fixtures for storage engine tests.
"""

import os
import tempfile

import pytest

from logdb.engine.engine import Engine


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    """Provide the path of an existing, empty log file."""
    path = os.path.join(temp_dir, "test.db")
    open(path, "wb").close()
    return path


@pytest.fixture
def engine(db_path):
    """Provide an opened Engine over an empty log."""
    with Engine.open(db_path) as eng:
        yield eng


@pytest.fixture
def sample_entries():
    """Provide sample key-value entries for testing."""
    return [
        ("key1", "value1"),
        ("key2", "value2"),
        ("key3", "value3"),
    ]
