"""Tests for query CLI commands."""

from __future__ import annotations

import json
import shlex

import pytest
from click.testing import CliRunner

from kbctl.cli import cli
from kbctl.commands.query import query
from kbctl.domain.directives import parse_directive


@pytest.mark.usefixtures("_isolated_kb")
class TestQueryRun:
    def test_run_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "query", "run", "data-structures/index.md"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        rows = data["data"]["results"][0]["rows"]
        assert [r["path"] for r in rows] == [
            "data-structures/trees/avl-tree.md",
            "data-structures/hash-table.md",
        ]

    def test_run_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "run", "data-structures/index.md"])
        assert result.exit_code == 0
        assert "directive at line 10" in result.output
        assert "AVL Tree" in result.output

    def test_run_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "query", "run", "data-structures/index.md"])
        assert result.output.splitlines() == [
            "data-structures/trees/avl-tree.md",
            "data-structures/hash-table.md",
        ]

    def test_run_missing_exits_1(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "run", "nope.md"])
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_run_rejected_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "query", "run", "algorithms/broken.md"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"]["code"] == "REJECTED"


@pytest.mark.usefixtures("_isolated_kb")
class TestQueryEval:
    def test_eval_escaped_newlines(self, cli_runner: CliRunner) -> None:
        text = 'LIST\\nFROM "algorithms"'
        result = cli_runner.invoke(cli, ["--json", "query", "eval", text])
        assert result.exit_code == 0
        assert [r["path"] for r in json.loads(result.output)["data"]["rows"]] == [
            "algorithms/dijkstra.md"
        ]

    def test_documented_examples_run(self, cli_runner: CliRunner) -> None:
        examples = query.commands["eval"].examples  # type: ignore[attr-defined]
        for line in examples.splitlines():
            args = shlex.split(line)[1:]
            directive = args[-1].replace("\\n", "\n")
            assert parse_directive(directive).error is None, line
            result = cli_runner.invoke(cli, args)
            assert result.exit_code == 0, result.output

    def test_eval_malformed(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "query", "eval", "LIST\nWHERE a = 1 OR b = 2"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "INVALID_DIRECTIVE"


@pytest.mark.usefixtures("_isolated_kb")
class TestQueryList:
    def test_list_filters(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "query",
                "list",
                "--scope",
                "data-structures",
                "--where",
                "status=evergreen",
                "--sort",
                "date-updated:desc",
                "--field",
                "date-updated",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["rows"] == [
            {"path": "data-structures/trees/avl-tree.md", "date-updated": "2024-02-10"},
            {"path": "data-structures/hash-table.md", "date-updated": "2024-01-20"},
        ]

    def test_list_limit(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "query", "list", "--limit", "2"])
        assert result.output.splitlines() == [
            "algorithms/dijkstra.md",
            "data-structures/hash-table.md",
        ]

    def test_list_human_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "list", "--scope", "notes"])
        assert result.exit_code == 0
        assert "Loose Thought" in result.output
        assert "1 of 1 documents" in result.output

    def test_bad_where(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "list", "--where", "status"])
        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_bad_sort_direction(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "list", "--sort", "title:sideways"])
        assert result.exit_code == 2

    def test_negative_limit(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["query", "list", "--limit", "-1"])
        assert result.exit_code == 2
