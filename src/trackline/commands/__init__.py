"""Subcommand modules for trackline.

Provides register_commands() which uses deferred imports to keep
``trackline --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the draw-cycle commands on the root CLI group."""
    from trackline.commands.check import check
    from trackline.commands.layout import layout
    from trackline.commands.render import render
    from trackline.commands.tracks import tracks

    cli.add_command(check)
    cli.add_command(tracks)
    cli.add_command(layout)
    cli.add_command(render)
