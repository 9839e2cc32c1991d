"""Subcommand modules for kbctl.

register_commands() imports command modules inside the function so the
root module stays cheap to import.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from kbctl.commands.graph import graph
    from kbctl.commands.index import index
    from kbctl.commands.query import query

    cli.add_command(query)
    cli.add_command(graph)
    cli.add_command(index)

    # --- Standalone commands ---
    from kbctl.commands.check import check
    from kbctl.commands.update import update

    cli.add_command(check)
    cli.add_command(update)
