"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to every command via
``@click.pass_obj``.  Owns logging setup, row loading, draw-context
construction, and result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from trackline.domain.errors import TracklineError
from trackline.output.formatters import OutputSettings, format_result
from trackline.services.result import ServiceResult

if TYPE_CHECKING:
    from trackline.config.settings import TracklineSettings
    from trackline.infrastructure.sources import Row
    from trackline.services.context import DrawContext


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: TracklineSettings) -> None:
        self.settings = settings

        from trackline.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from trackline.services.telemetry import enable_telemetry

            enable_telemetry()

    def fetch_rows(
        self,
        op: str,
        *,
        csv_file: str | None = None,
        spreadsheet_key: str | None = None,
    ) -> list[Row]:
        """Load rows from the CLI-given or configured source.

        Emits a failure result and exits if the source is unavailable.
        """
        from trackline.config.logging import bind_draw_cycle
        from trackline.infrastructure.sources import load_rows, open_source

        config_path = self.settings.config_path
        try:
            source = open_source(
                self.settings.source,
                csv_file=Path(csv_file) if csv_file else None,
                spreadsheet_key=spreadsheet_key,
                base_dir=config_path.parent if config_path else None,
            )
            bind_draw_cycle(source.description)
            return load_rows(source)
        except TracklineError as exc:
            self.emit(ServiceResult.failure(op, exc))
            raise  # pragma: no cover (emit exits)

    def draw_context(self, op: str, **overrides: Any) -> DrawContext:
        """Build this invocation's DrawContext, exiting on invalid overrides."""
        from trackline.services.context import DrawContext

        try:
            return DrawContext.from_settings(self.settings, **overrides)
        except TracklineError as exc:
            self.emit(ServiceResult.failure(op, exc))
            raise  # pragma: no cover (emit exits)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
