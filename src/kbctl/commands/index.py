"""Command group: persist and inspect the SQLite corpus snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.commands._base import KbGroup
from kbctl.services.snapshot import SnapshotService

if TYPE_CHECKING:
    from kbctl.commands._context import AppContext


@click.group(
    cls=KbGroup,
    examples="""\
  kbctl index save
  kbctl index show
  kbctl -v index show        # list stored documents""",
)
@click.pass_obj
def index(app: AppContext) -> None:
    """Save or inspect the derived snapshot in .kbctl/."""


@index.command(examples="  kbctl index save")
@click.pass_obj
def save(app: AppContext) -> None:
    """Rebuild the corpus from the files and store it."""
    app.emit(SnapshotService(app.kb).save())


@index.command(examples="  kbctl --json index show")
@click.pass_obj
def show(app: AppContext) -> None:
    """Load the stored snapshot and summarize it."""
    app.emit(SnapshotService(app.kb).show())
