"""Command: show the layout geometry for a viewport."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from trackline.commands._base import TracklineCommand
from trackline.commands._options import source_options, track_options, viewport_options
from trackline.services.timeline import TimelineService

if TYPE_CHECKING:
    from trackline.commands._context import AppContext


@click.command(
    cls=TracklineCommand,
    examples="""\
  trackline layout --csv interactions.csv
  trackline layout --csv interactions.csv --width 1920 --height 1080
  trackline --json layout --csv interactions.csv --min-count 2""",
)
@source_options
@track_options
@viewport_options
@click.pass_obj
def layout(
    app: AppContext,
    csv_file: str | None,
    spreadsheet_key: str | None,
    minimum_interaction_count: int | None,
    remove_duplicates: bool | None,
    strategy: str | None,
    width: float | None,
    height: float | None,
) -> None:
    """Compute radii, margins, and scales for the timeline."""
    context = app.draw_context(
        "layout",
        minimum_interaction_count=minimum_interaction_count,
        remove_duplicates=remove_duplicates,
        strategy=strategy,
        width=width,
        height=height,
    )
    rows = app.fetch_rows("layout", csv_file=csv_file, spreadsheet_key=spreadsheet_key)
    app.emit(TimelineService(context).layout(rows))
