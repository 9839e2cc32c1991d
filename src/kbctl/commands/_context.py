"""AppContext — the object every command receives via ``@click.pass_obj``.

The root group builds it from :class:`~kbctl.config.settings.KbSettings`.
It configures logging and telemetry for the invocation, opens the
knowledge base on demand, and turns a ``ServiceResult`` into output and
an exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kbctl.config.logging import bind_kb_context, clear_kb_context, configure_logging
from kbctl.output.formatters import OutputSettings, format_result
from kbctl.services.telemetry import disable_telemetry, enable_telemetry

if TYPE_CHECKING:
    from kbctl.config.settings import KbSettings
    from kbctl.infrastructure.knowledge_base import KnowledgeBase
    from kbctl.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by the command tree.

    ``--help`` and ``--examples`` never touch the knowledge base; it is
    opened on first access to :attr:`kb`.
    """

    def __init__(self, settings: KbSettings) -> None:
        self.settings = settings
        self._kb: KnowledgeBase | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        bind_kb_context(settings.root)
        if settings.verbose:
            enable_telemetry()

    @property
    def kb(self) -> KnowledgeBase:
        if self._kb is None:
            from kbctl.infrastructure.knowledge_base import KnowledgeBase

            self._kb = KnowledgeBase(self.settings)
        return self._kb

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def close(self) -> None:
        if self._kb is not None:
            self._kb.close()
            self._kb = None
        if self.settings.verbose:
            disable_telemetry()
        clear_kb_context()

    def emit(self, result: ServiceResult) -> None:
        """Write *result* and exit 1 if it failed.

        Successful output goes to stdout; in human and quiet modes its
        warnings follow on stderr (JSON output embeds them). Failures are
        written to stderr.
        """
        out = self.output_settings
        rendered = format_result(result, settings=out)
        if not result.ok:
            click.echo(rendered, err=True)
            raise SystemExit(1)

        click.echo(rendered)
        if not out.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
