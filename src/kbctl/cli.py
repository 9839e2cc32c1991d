"""Root CLI group for kbctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from kbctl import __version__
from kbctl.commands import register_commands
from kbctl.commands._context import AppContext
from kbctl.config.settings import KbSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kbctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (paths only).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and span timings.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Knowledge-base root (default: directory of kbctl.toml, else CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    root: Path | None,
) -> None:
    """kbctl — knowledge-base metadata and cross-reference engine."""
    settings = KbSettings.from_cli(
        config_path=config_path,
        root=root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
