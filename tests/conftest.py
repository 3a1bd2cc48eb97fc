"""Pytest configuration and fixtures."""

import os
from datetime import datetime

import pytest

from polysearch.config import SearchConfig
from polysearch.engine import SearchEngine

REFERENCE_DATE = datetime(2024, 6, 1)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables for each test.

    User configuration files are hidden by pointing XDG_CONFIG_HOME at an
    empty directory.
    """
    original_env = os.environ.copy()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in list(os.environ):
        if name.startswith("POLYSEARCH_"):
            monkeypatch.delenv(name)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def reference_date() -> datetime:
    return REFERENCE_DATE


@pytest.fixture
def posts() -> list[dict]:
    """Blog-post records with diverse content for search testing."""
    return [
        {
            "id": 1,
            "title": "Laravel Framework Guide",
            "body": "Learn the laravel framework from scratch",
            "author": {"name": "Taylor Otwell"},
            "status": "published",
            "views_count": 10,
            "created_at": datetime(2024, 5, 31),
        },
        {
            "id": 2,
            "title": "Symfony Components",
            "body": "Symfony is a set of reusable php components and a framework",
            "author": {"name": "Fabien Potencier"},
            "status": "published",
            "views_count": 50,
            "created_at": datetime(2023, 1, 15),
        },
        {
            "id": 3,
            "title": "Deprecated Laravel Helpers",
            "body": "These laravel framework helpers are deprecated",
            "author": {"name": "Taylor Otwell"},
            "status": "draft",
            "views_count": 3,
            "created_at": datetime(2024, 4, 1),
        },
        {
            "id": 4,
            "title": "JavaScript Basics",
            "body": "An introduction to javascript for php developers",
            "author": {"name": "Brendan Eich"},
            "status": "published",
            "views_count": 0,
            "created_at": None,
        },
    ]


@pytest.fixture
def config() -> SearchConfig:
    return SearchConfig()


@pytest.fixture
def engine(config, reference_date) -> SearchEngine:
    return SearchEngine(config, reference_date=reference_date)
