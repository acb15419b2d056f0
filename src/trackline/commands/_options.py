"""Option decorators shared by the draw-cycle commands."""

from __future__ import annotations

from collections.abc import Callable

import click

from trackline.domain.tracks import TrackStrategy


def source_options[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Apply ``--csv`` / ``--spreadsheet`` row source flags."""
    func = click.option(
        "--spreadsheet",
        "spreadsheet_key",
        default=None,
        help="Published spreadsheet key to fetch rows from.",
    )(func)
    func = click.option(
        "--csv",
        "csv_file",
        type=click.Path(dir_okay=False),
        default=None,
        help="CSV file to read rows from.",
    )(func)
    return func


def track_options[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Apply track construction overrides."""
    func = click.option(
        "--strategy",
        type=click.Choice([s.value for s in TrackStrategy], case_sensitive=False),
        default=None,
        help="Track assignment: count (default) or greedy.",
    )(func)
    func = click.option(
        "--remove-duplicates/--keep-duplicates",
        "remove_duplicates",
        default=None,
        help="Prune mirrored edges from the lower-degree side.",
    )(func)
    func = click.option(
        "--min-count",
        "minimum_interaction_count",
        type=click.IntRange(min=1),
        default=None,
        help="Minimum distinct partners for a participant to get a track.",
    )(func)
    return func


def viewport_options[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Apply viewport size overrides."""
    func = click.option(
        "--height",
        type=click.FloatRange(min=0, min_open=True),
        default=None,
        help="Viewport height in pixels.",
    )(func)
    func = click.option(
        "--width",
        type=click.FloatRange(min=0, min_open=True),
        default=None,
        help="Viewport width in pixels.",
    )(func)
    return func
