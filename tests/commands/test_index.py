"""Tests for index CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from kbctl.cli import cli


@pytest.mark.usefixtures("_isolated_kb")
class TestIndexCommands:
    def test_show_before_save(self, cli_runner: CliRunner, kb_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "index", "show"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "NO_SNAPSHOT"
        assert not (kb_root / ".kbctl").exists()

    def test_save_and_show(self, cli_runner: CliRunner, kb_root: Path) -> None:
        saved = cli_runner.invoke(cli, ["index", "save"])
        assert saved.exit_code == 0
        assert "documents: 6" in saved.output
        assert (kb_root / ".kbctl" / "kbctl.db").is_file()

        shown = cli_runner.invoke(cli, ["--json", "index", "show"])
        assert shown.exit_code == 0
        assert json.loads(shown.output)["data"]["counts"] == {
            "documents": 6,
            "links": 5,
            "dangling": 1,
        }

    def test_database_filename_from_config(self, cli_runner: CliRunner, kb_root: Path) -> None:
        (kb_root / "kbctl.toml").write_text('[database]\nfilename = "snap.db"\n', encoding="utf-8")
        result = cli_runner.invoke(cli, ["index", "save"])
        assert result.exit_code == 0
        assert (kb_root / ".kbctl" / "snap.db").is_file()
