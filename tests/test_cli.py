"""Tests for the root kbctl CLI."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from kbctl import __version__
from kbctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "kbctl" in result.output
    for name in ("check", "query", "graph", "index", "update"):
        assert name in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["--root", str(tmp_path)])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_missing_config_file(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(tmp_path / "absent.toml"), "check"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_config_flag_selects_file(cli_runner: CliRunner, kb_root: Path) -> None:
    alt = kb_root / "alt.toml"
    alt.write_text('[corpus]\ncontent_dir = "notes"\n', encoding="utf-8")
    result = cli_runner.invoke(
        cli, ["--root", str(kb_root), "-c", str(alt), "-q", "query", "list"]
    )
    assert result.exit_code == 0
    assert result.output.splitlines() == ["orphan.md"]


def test_empty_knowledge_base(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["--root", str(tmp_path), "check"])
    assert result.exit_code == 0
    assert "scanned: 0" in result.output
