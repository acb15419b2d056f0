"""Command: validate configuration and row shape."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from trackline.commands._base import TracklineCommand
from trackline.commands._options import source_options
from trackline.services.timeline import TimelineService

if TYPE_CHECKING:
    from trackline.commands._context import AppContext


@click.command(
    cls=TracklineCommand,
    examples="""\
  trackline check --csv interactions.csv
  trackline -c other.toml check""",
)
@source_options
@click.pass_obj
def check(app: AppContext, csv_file: str | None, spreadsheet_key: str | None) -> None:
    """Check that rows match the configured columns."""
    context = app.draw_context("check")
    rows = app.fetch_rows("check", csv_file=csv_file, spreadsheet_key=spreadsheet_key)
    app.emit(TimelineService(context).check(rows))
