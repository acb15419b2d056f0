"""Command: draw the timeline as SVG (or hand it off as JSON)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from trackline.commands._base import TracklineCommand
from trackline.commands._options import source_options, track_options, viewport_options
from trackline.domain.errors import OutputUnavailableError
from trackline.renderer import RENDER_FORMATS
from trackline.services.result import ServiceResult
from trackline.services.timeline import TimelineService

if TYPE_CHECKING:
    from trackline.commands._context import AppContext


@click.command(
    cls=TracklineCommand,
    examples="""\
  trackline render --csv interactions.csv --output timeline.svg
  trackline render --csv interactions.csv --width 1920 --height 1080 > timeline.svg
  trackline render --csv interactions.csv --format json --output timeline.json""",
)
@source_options
@track_options
@viewport_options
@click.option(
    "--format",
    "fmt",
    type=click.Choice(RENDER_FORMATS, case_sensitive=False),
    default="svg",
    help="Output format.",
)
@click.option(
    "--output",
    "output_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (omit to print to stdout).",
)
@click.pass_obj
def render(
    app: AppContext,
    csv_file: str | None,
    spreadsheet_key: str | None,
    minimum_interaction_count: int | None,
    remove_duplicates: bool | None,
    strategy: str | None,
    width: float | None,
    height: float | None,
    fmt: str,
    output_file: str | None,
) -> None:
    """Draw one line per track with a point per interaction."""
    context = app.draw_context(
        "render",
        minimum_interaction_count=minimum_interaction_count,
        remove_duplicates=remove_duplicates,
        strategy=strategy,
        width=width,
        height=height,
    )
    rows = app.fetch_rows("render", csv_file=csv_file, spreadsheet_key=spreadsheet_key)
    result = TimelineService(context).render(rows, fmt=fmt.lower())

    if not result.ok:
        app.emit(result)
        return

    if output_file:
        try:
            Path(output_file).write_text(result.data["content"], encoding="utf-8")
        except OSError as exc:
            error = OutputUnavailableError(
                f"Cannot write {output_file}: {exc.strerror or exc}",
                path=output_file,
            )
            app.emit(ServiceResult.failure("render", error))
            return
        # Summary only; the document went to the file.
        summary = {k: v for k, v in result.data.items() if k != "content"}
        app.emit(
            ServiceResult(
                ok=True,
                op="render",
                data={**summary, "output_file": output_file},
                meta=result.meta,
            )
        )
    else:
        # Pipe-friendly: raw document to stdout
        click.echo(result.data["content"], nl=False)
