"""Standalone command: batch validation report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.commands._base import KbCommand
from kbctl.services.check import CheckService

if TYPE_CHECKING:
    from kbctl.commands._context import AppContext


@click.command(
    cls=KbCommand,
    examples="""\
  kbctl check
  kbctl --json check
  kbctl -v check              # include accepted documents and timings""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Validate every document and report rejections, dangling links and bad directives.

    Always exits 0: the report lists problems, it does not judge the corpus.
    """
    app.emit(CheckService(app.kb).check())
