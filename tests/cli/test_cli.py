"""Tests for the polysearch command line interface."""

import json

import click
import pytest

from polysearch.cli.commands.search import load_records, parse_assignment, parse_where


def search_json(cli_runner, posts_file, *args):
    result = cli_runner.invoke(
        ["search", str(posts_file), *args, "--format", "json"]
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def result_ids(payload):
    return [r["item"]["id"] for r in payload["results"]]


class TestCLIEntryPoint:
    """Test the main CLI entry point."""

    def test_help_lists_commands(self, cli_runner):
        result = cli_runner.invoke(["--help"])

        assert result.exit_code == 0
        for command in ("search", "suggest", "did-you-mean", "algorithms", "config"):
            assert command in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(["--version"])

        assert result.exit_code == 0
        assert "polysearch version 0.1.0" in result.output

    def test_invalid_config_file(self, cli_runner, tmp_path):
        """A config file that is not valid YAML stops the CLI."""
        bad_config = tmp_path / "bad.yaml"
        bad_config.write_text("default_algorithm: [unclosed\n")

        result = cli_runner.invoke(["--config", str(bad_config), "algorithms"])

        assert result.exit_code == 1
        assert "Error loading config file" in result.output

    def test_show_config(self, cli_runner, config_file):
        result = cli_runner.invoke(["--config", str(config_file), "config"])

        assert result.exit_code == 0
        assert "default_algorithm: exact" in result.output
        assert "ttl: 3600" in result.output

    def test_algorithms(self, cli_runner):
        result = cli_runner.invoke(["algorithms"])

        assert result.exit_code == 0
        assert "Matching algorithms" in result.output
        for name in ("exact", "partial", "fuzzy", "regex", "phonetic"):
            assert name in result.output


class TestSearchCommand:
    """Test the search command."""

    def test_table_output(self, cli_runner, posts_file):
        args = ["search", str(posts_file), "laravel", "-f", "title"]

        result = cli_runner.invoke(args)

        assert result.exit_code == 0
        assert "Laravel Framework Guide" in result.output
        assert "Deprecated Laravel Helpers" in result.output
        assert "2 results" in result.output

    def test_no_results(self, cli_runner, posts_file):
        result = cli_runner.invoke(["search", str(posts_file), "django", "-f", "title"])

        assert result.exit_code == 0
        assert "No results found for 'django'" in result.output

    def test_json_output(self, cli_runner, posts_file):
        payload = search_json(cli_runner, posts_file, "laravel", "-f", "title")

        assert payload["total"] == 2
        assert result_ids(payload) == [1, 3]
        assert payload["results"][0]["score"] == pytest.approx(10.8)
        assert payload["results"][0]["highlights"] == {
            "title": ["<mark>Laravel</mark> Framework Guide"]
        }

    def test_no_highlight(self, cli_runner, posts_file):
        result = cli_runner.invoke(
            ["search", str(posts_file), "laravel", "-f", "title", "--no-highlight"]
        )

        assert result.exit_code == 0
        assert "<mark>" not in result.output

    def test_filters_and_paging(self, cli_runner, posts_file):
        args = [posts_file, "laravel", "-f", "title"]

        published = search_json(cli_runner, *args, "--where", "status=published")
        limited = search_json(cli_runner, *args, "-n", "1")
        skipped = search_json(cli_runner, *args, "--offset", "1")

        assert result_ids(published) == [1]
        assert result_ids(limited) == [1]
        assert result_ids(skipped) == [3]

    def test_weights(self, cli_runner, posts_file):
        payload = search_json(
            cli_runner, posts_file, "laravel", "-f", "title", "-w", "title=2"
        )

        assert payload["results"][0]["score"] == pytest.approx(21.6)

    def test_algorithm_and_options(self, cli_runner, posts_file):
        args = ["Laravle Framework Guide", "-f", "title", "-a", "fuzzy"]

        assert result_ids(search_json(cli_runner, posts_file, *args)) == [1]
        assert result_ids(
            search_json(cli_runner, posts_file, *args, "-o", "threshold=1")
        ) == []

    def test_order_by(self, cli_runner, posts_file):
        payload = search_json(
            cli_runner,
            posts_file,
            "framework",
            "-f",
            "body",
            "-a",
            "boolean",
            "--order-by",
            "views_count:desc",
        )

        assert result_ids(payload) == [2, 1, 3]

    def test_config_default_algorithm(self, cli_runner, posts_file, config_file):
        result = cli_runner.invoke(
            [
                "--config",
                str(config_file),
                "search",
                str(posts_file),
                "symfony components",
                "-f",
                "title",
                "--format",
                "json",
            ]
        )

        payload = json.loads(result.stdout)
        assert result_ids(payload) == [2]
        assert payload["results"][0]["algorithm"] == "exact"

    def test_yaml_records(self, cli_runner, tmp_path):
        path = tmp_path / "posts.yaml"
        path.write_text("- id: 1\n  title: Laravel Nova\n- id: 2\n  title: Symfony\n")

        payload = search_json(cli_runner, path, "nova", "-f", "title")

        assert result_ids(payload) == [1]

    def test_records_must_be_a_list(self, cli_runner, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text('{"id": 1}')

        result = cli_runner.invoke(["search", str(path), "laravel", "-f", "title"])

        assert result.exit_code == 1
        assert "must contain a list of records" in result.output

    def test_invalid_json(self, cli_runner, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text("[{")

        result = cli_runner.invoke(["search", str(path), "laravel", "-f", "title"])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_field_is_required(self, cli_runner, posts_file):
        result = cli_runner.invoke(["search", str(posts_file), "laravel"])

        assert result.exit_code == 2

    def test_bad_weight(self, cli_runner, posts_file):
        result = cli_runner.invoke(
            ["search", str(posts_file), "laravel", "-f", "title", "-w", "title"]
        )

        assert result.exit_code == 2
        assert "expected KEY=VALUE" in result.output


class TestSuggestionCommands:
    """Test suggest and did-you-mean."""

    def test_suggest(self, cli_runner):
        result = cli_runner.invoke(["suggest", "lar", "laravel", "symfony", "larval"])

        assert result.exit_code == 0
        assert result.output.split() == ["laravel", "larval"]

    def test_suggest_without_matches(self, cli_runner):
        result = cli_runner.invoke(["suggest", "xyz", "laravel"])

        assert result.exit_code == 0
        assert "No suggestions" in result.output

    def test_did_you_mean(self, cli_runner):
        result = cli_runner.invoke(["did-you-mean", "laravle", "symfony", "laravel"])

        assert result.exit_code == 0
        assert "Did you mean: laravel?" in result.output

    def test_did_you_mean_without_match(self, cli_runner):
        result = cli_runner.invoke(["did-you-mean", "xyz", "laravel"])

        assert result.exit_code == 1
        assert "No close match for 'xyz'" in result.output


class TestArgumentParsing:
    """Test parsing of command-line filters and assignments."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("status=published", ("status", "=", "published")),
            ("views_count >= 10", ("views_count", ">=", 10)),
            ("author.name!=Taylor", ("author.name", "!=", "Taylor")),
            ("status in draft,published", ("status", "in", ["draft", "published"])),
            ("status NOT IN draft", ("status", "not in", ["draft"])),
            ("title like %vel%", ("title", "like", "%vel%")),
        ],
    )
    def test_parse_where(self, text, expected):
        assert parse_where(text) == expected

    def test_parse_where_rejects_garbage(self):
        with pytest.raises(click.BadParameter):
            parse_where("nonsense")

    def test_parse_assignment(self):
        assert parse_assignment("threshold=1", "--option") == ("threshold", 1)
        assert parse_assignment("case_sensitive=true", "--option") == (
            "case_sensitive",
            True,
        )

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_records(path) == []
