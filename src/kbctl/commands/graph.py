"""Command group: links, backlinks, dangling links and orphans."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.commands._base import KbGroup
from kbctl.services.graph import GraphService

if TYPE_CHECKING:
    from kbctl.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  kbctl graph links avl-tree
  kbctl graph backlinks data-structures/trees/avl-tree.md
  kbctl graph dangling
  kbctl graph orphans"""


@click.group(cls=KbGroup, examples=_GRAPH_EXAMPLES)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Inspect the cross-reference graph."""


@graph.command(
    examples="""\
  kbctl graph links avl-tree
  kbctl --json graph links data-structures/trees/avl-tree.md"""
)
@click.argument("ref")
@click.pass_obj
def links(app: AppContext, ref: str) -> None:
    """Show links written in REF (a name or path), resolved or dangling."""
    app.emit(GraphService(app.kb).links(ref))


@graph.command(
    examples="""\
  kbctl graph backlinks avl-tree
  kbctl -q graph backlinks avl-tree   # paths only"""
)
@click.argument("ref")
@click.pass_obj
def backlinks(app: AppContext, ref: str) -> None:
    """Show documents linking to REF."""
    app.emit(GraphService(app.kb).backlinks(ref))


@graph.command(
    examples="""\
  kbctl graph dangling
  kbctl --json graph dangling"""
)
@click.pass_obj
def dangling(app: AppContext) -> None:
    """List links whose target matches no document."""
    app.emit(GraphService(app.kb).dangling())


@graph.command(
    examples="""\
  kbctl graph orphans"""
)
@click.pass_obj
def orphans(app: AppContext) -> None:
    """List documents with no resolved links in or out."""
    app.emit(GraphService(app.kb).orphans())
