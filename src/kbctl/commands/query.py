"""Command group: evaluate query directives and filter documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.commands._base import KbGroup
from kbctl.services._helpers import parse_assignment
from kbctl.services.query import QueryService

if TYPE_CHECKING:
    from kbctl.commands._context import AppContext

_QUERY_EXAMPLES = """\
  kbctl query run data-structures/index.md
  kbctl query eval 'TABLE title, status
  FROM "algorithms"
  WHERE status = "evergreen"
  SORT date-updated DESC
  LIMIT 5'
  kbctl query list --scope algorithms --where difficulty=beginner --sort title"""


@click.group(cls=KbGroup, examples=_QUERY_EXAMPLES)
@click.pass_obj
def query(app: AppContext) -> None:
    """Evaluate query directives against the corpus."""


@query.command(
    examples="""\
  kbctl query run data-structures/index.md
  kbctl --json query run notes/reading-list.md"""
)
@click.argument("path")
@click.pass_obj
def run(app: AppContext, path: str) -> None:
    """Evaluate every query block embedded in the document at PATH."""
    app.emit(QueryService(app.kb).run_document(path))


@query.command(
    name="eval",
    examples="""\
  kbctl query eval 'LIST\\nFROM "algorithms"'
  kbctl query eval 'TABLE title\\nWHERE contains(tags, "graphs")\\nSORT title'""",
)
@click.argument("text")
@click.pass_obj
def eval_cmd(app: AppContext, text: str) -> None:
    """Evaluate an ad-hoc directive (one clause per line, or \\n-separated)."""
    app.emit(QueryService(app.kb).evaluate_text(text.replace("\\n", "\n")))


@query.command(
    name="list",
    examples="""\
  kbctl query list
  kbctl query list --scope data-structures --field status --field tags
  kbctl query list --where status=seed --sort date-created:desc --limit 10""",
)
@click.option("--scope", default=None, help="Category prefix to search under.")
@click.option("--where", "where", multiple=True, help="Equality filter key=value (repeatable).")
@click.option("--sort", default=None, help="Sort field, optionally suffixed :desc.")
@click.option("--limit", default=None, type=click.IntRange(min=0), help="Max results.")
@click.option("--field", "fields", multiple=True, help="Field to show (repeatable).")
@click.pass_obj
def list_cmd(
    app: AppContext,
    scope: str | None,
    where: tuple[str, ...],
    sort: str | None,
    limit: int | None,
    fields: tuple[str, ...],
) -> None:
    """List documents matching metadata filters."""
    try:
        filters = [parse_assignment(raw) for raw in where]
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--where") from exc

    descending = False
    if sort:
        field, _, direction = sort.partition(":")
        if direction.lower() not in ("", "asc", "desc"):
            msg = f"Sort direction must be asc or desc, got {direction!r}"
            raise click.BadParameter(msg, param_hint="--sort")
        sort, descending = field, direction.lower() == "desc"

    app.emit(
        QueryService(app.kb).list_documents(
            scope=scope,
            where=filters,
            sort=sort,
            descending=descending,
            limit=limit,
            fields=list(fields) or None,
        )
    )
