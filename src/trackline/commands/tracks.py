"""Command: build and list tracks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from trackline.commands._base import TracklineCommand
from trackline.commands._options import source_options, track_options
from trackline.services.timeline import TimelineService

if TYPE_CHECKING:
    from trackline.commands._context import AppContext


@click.command(
    cls=TracklineCommand,
    examples="""\
  trackline tracks --csv interactions.csv
  trackline tracks --csv interactions.csv --min-count 3
  trackline tracks --csv interactions.csv --remove-duplicates
  trackline tracks --spreadsheet 1AbCdEf --strategy greedy
  trackline -q tracks --csv interactions.csv""",
)
@source_options
@track_options
@click.pass_obj
def tracks(
    app: AppContext,
    csv_file: str | None,
    spreadsheet_key: str | None,
    minimum_interaction_count: int | None,
    remove_duplicates: bool | None,
    strategy: str | None,
) -> None:
    """Build tracks, busiest participant first."""
    context = app.draw_context(
        "tracks",
        minimum_interaction_count=minimum_interaction_count,
        remove_duplicates=remove_duplicates,
        strategy=strategy,
    )
    rows = app.fetch_rows("tracks", csv_file=csv_file, spreadsheet_key=spreadsheet_key)
    app.emit(TimelineService(context).tracks(rows))
