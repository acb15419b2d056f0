"""Root CLI group for trackline with global flags and command registration."""

from __future__ import annotations

import click

from trackline import __version__
from trackline.commands import register_commands
from trackline.commands._context import AppContext
from trackline.config.settings import TracklineSettings
from trackline.domain.errors import ConfigValidationError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="trackline")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with timing info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """trackline — interaction timelines from pairwise event data."""
    ctx.ensure_object(dict)
    try:
        settings = TracklineSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    except ConfigValidationError as exc:
        raise click.ClickException(f"[{exc.code}] {exc.message}") from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
