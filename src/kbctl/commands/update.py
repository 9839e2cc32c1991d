"""Standalone command: edit document metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.commands._base import KbCommand
from kbctl.services._helpers import parse_assignment
from kbctl.services.update import UpdateService

if TYPE_CHECKING:
    from kbctl.commands._context import AppContext


@click.command(
    cls=KbCommand,
    examples="""\
  kbctl update algorithms/dijkstra.md --set status=evergreen
  kbctl update algorithms/dijkstra.md --set tags=graphs,shortest-path
  kbctl update algorithms/dijkstra.md --unset difficulty""",
)
@click.argument("path")
@click.option("--set", "assignments", multiple=True, help="Set a field: key=value (repeatable).")
@click.option("--unset", "unset", multiple=True, help="Remove a field (repeatable).")
@click.pass_obj
def update(
    app: AppContext,
    path: str,
    assignments: tuple[str, ...],
    unset: tuple[str, ...],
) -> None:
    """Edit metadata of the document at PATH.

    List fields take comma-separated values. date-updated is refreshed to
    today unless set explicitly. Invalid results are refused unwritten.
    """
    try:
        changes = dict(parse_assignment(raw) for raw in assignments)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--set") from exc
    if not changes and not unset:
        raise click.UsageError("Nothing to update: pass --set or --unset.")
    app.emit(UpdateService(app.kb).update(path, changes=changes, unset=list(unset)))
