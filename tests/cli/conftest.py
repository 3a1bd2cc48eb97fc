"""Pytest configuration and fixtures for CLI tests."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Click CLI test runner that invokes the polysearch CLI."""

    class PolysearchCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from polysearch.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return PolysearchCliRunner()


@pytest.fixture
def posts_file(tmp_path, posts) -> Path:
    """The shared posts written as a JSON records file."""
    records = []
    for post in posts:
        created_at = post["created_at"]
        records.append(
            {**post, "created_at": created_at.isoformat() if created_at else None}
        )
    path = tmp_path / "posts.json"
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "polysearch.yaml"
    path.write_text("default_algorithm: exact\nhighlighting:\n  prefix: '**'\n")
    return path
