"""Timeline renderers — SVG drawing and JSON hand-off.

Both take the finished ``Track`` list and ``LayoutSettings`` of a draw
cycle and return text.  Neither mutates its inputs.

Drawing, per track (top to bottom in track order):
  - a right-aligned label left of the first interaction
  - a line through the interactions in order, ``stroke_width`` thick
  - a point per interaction with the partner name beneath it
and a time axis along the bottom with an arrow head and a "Time" label.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trackline.domain.layout import LayoutSettings
    from trackline.domain.tracks import Track

RENDER_FORMATS = ("svg", "json")

_STYLE = """\
  <style>
    .trackLabel { font-weight: bold; }
    .interactionPath { fill: none; stroke: #9bb7d4; stroke-linecap: round; }
    .interactionPoint { fill: #2f5d8a; }
    .interactionLabel { fill: #333; }
    .timeAxis { fill: none; stroke: #666; }
    .timeAxisLabel { fill: #666; }
  </style>"""


def _num(value: float) -> str:
    return f"{round(value, 2):g}"


def _path(points: Sequence[tuple[float, float]]) -> str:
    head, *tail = points
    parts = [f"M{_num(head[0])},{_num(head[1])}"]
    parts.extend(f"L{_num(x)},{_num(y)}" for x, y in tail)
    return "".join(parts)


def _text(x: float, y: float, label: str, *, css: str, anchor: str) -> str:
    return (
        f'    <text class="{css}" x="{_num(x)}" y="{_num(y)}" '
        f'text-anchor="{anchor}">{escape(label)}</text>'
    )


def _track_elements(track: Track, index: int, layout: LayoutSettings) -> list[str]:
    r = layout.radius
    y = layout.track_y(index)
    ordered = sorted(track.interactions, key=lambda i: i.order)
    xs = [layout.x_scale(i.order) for i in ordered]

    elements = [
        _text(
            xs[0] - 2 * r,
            y + layout.label_height / 2,
            track.participant,
            css="trackLabel",
            anchor="end",
        ),
        f'    <path class="interactionPath" d="{_path([(x, y) for x in xs])}" '
        f'stroke-width="{_num(layout.stroke_width)}"/>',
    ]
    for x in xs:
        elements.append(
            f'    <circle class="interactionPoint" cx="{_num(x)}" cy="{_num(y)}" r="{r}"/>'
        )
    for x, interaction in zip(xs, ordered, strict=True):
        elements.append(
            _text(
                x,
                y + layout.y_label_offset,
                interaction.partner,
                css="interactionLabel",
                anchor="middle",
            )
        )
    return elements


def _time_axis(layout: LayoutSettings) -> list[str]:
    r = layout.radius
    start = layout.x_scale(layout.order_extent[0])
    end = layout.x_scale(layout.order_extent[1])
    base = layout.y_scale(0)
    # Axis line, then a small arrow head at the right end.
    points = [
        (start, base),
        (end, base),
        (end, base + r / 4),
        (end + r / 2, base),
        (end, base - r / 4),
        (end, base),
    ]
    return [
        f'    <path class="timeAxis" d="{_path(points)}" '
        f'stroke-width="{_num(layout.axis_stroke_width)}"/>',
        _text(
            end - r,
            base - layout.y_label_offset + r,
            "Time",
            css="timeAxisLabel",
            anchor="end",
        ),
    ]


def render_svg(tracks: Sequence[Track], layout: LayoutSettings) -> str:
    """Draw *tracks* as a standalone SVG document."""
    m = layout.margin
    lines = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{_num(layout.outer_width)}" height="{_num(layout.outer_height)}" '
        f'font-size="{_num(layout.label_height)}">',
        _STYLE,
        f'  <g transform="translate({_num(m.left)},{_num(m.top)})">',
    ]
    for index, track in enumerate(tracks):
        if track.interactions:
            lines.extend(_track_elements(track, index, layout))
    lines.extend(_time_axis(layout))
    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def render_json(tracks: Sequence[Track], layout: LayoutSettings) -> str:
    """Serialize the draw-cycle output for an external renderer."""
    payload = {
        "tracks": [t.to_dict() for t in tracks],
        "layout": layout.to_dict(),
    }
    return json.dumps(payload, indent=2) + "\n"
