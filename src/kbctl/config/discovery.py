"""Locating a knowledge base and reading its ``kbctl.toml``.

The root is the nearest directory, walking up from the start directory,
that holds either ``kbctl.toml`` or the ``.kbctl/`` state directory, much
as git stops at the first ``.git/``. ``KBCTL_CONFIG`` names a config file
directly and skips the walk.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from kbctl.infrastructure.database.engine import STATE_DIR

CONFIG_FILENAME = "kbctl.toml"
CONFIG_ENV_VAR = "KBCTL_CONFIG"


@dataclass(frozen=True)
class Location:
    """Where discovery stopped. Both fields are None when nothing was found."""

    root: Path | None = None
    config_path: Path | None = None


def _ancestors(start: Path) -> Iterator[Path]:
    current = start
    while True:
        yield current
        if current.parent == current:
            return
        current = current.parent


def locate(start: Path | None = None) -> Location:
    """Find the knowledge base containing *start* (default: cwd).

    Raises:
        click.ClickException: ``KBCTL_CONFIG`` names a missing file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            msg = f"{CONFIG_ENV_VAR} points to a missing file: {env_path}"
            raise click.ClickException(msg)
        return Location(root=path.resolve().parent, config_path=path)

    for directory in _ancestors((start or Path.cwd()).resolve()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return Location(root=directory, config_path=candidate)
        if (directory / STATE_DIR).is_dir():
            return Location(root=directory)
    return Location()


def read_toml(path: Path) -> dict[str, Any]:
    """Parse a config file, turning syntax errors into a CLI error."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
