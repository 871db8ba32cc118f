"""Pytest configuration and fixtures."""

import pytest
import tempfile
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_users():
    """Uniform array of objects for tabular testing."""
    return [
        {"id": 1, "name": "Alice", "score": 100, "active": True},
        {"id": 2, "name": "Bob Smith", "score": 95.5, "active": False},
        {"id": 3, "name": "Charlie", "score": None, "active": True},
    ]


@pytest.fixture
def sample_nonuniform():
    """Array of objects whose key sets differ."""
    return [
        {"id": 1, "name": "Alice"},
        {"id": 2, "name": "Bob", "extra": "field"},
    ]


@pytest.fixture
def sample_document():
    """Nested document mixing every value kind."""
    return {
        "metadata": {
            "version": "1.0",
            "created": "2024-01-01",
            "count": 3
        },
        "users": [
            {"id": 1, "name": "Alice", "tags": ["admin", "dev"]},
            {"id": 2, "name": "Bob", "tags": []},
        ],
        "settings": {
            "theme": "dark",
            "notifications": True,
            "ratio": -3.14159,
            "limit": None,
            "empty": {}
        },
        "words": ["z", "a", "m", "b"],
        "quoted": ["true", "null", "123", "", "a b", "x:y", "{}", "[]"]
    }


@pytest.fixture
def boundary_values():
    """Scalar and empty values every layout must round-trip."""
    return [None, True, False, 0, -3.14159, 1e10, "", [], {}]
