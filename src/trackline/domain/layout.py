"""Layout geometry — from track/event counts and a viewport to drawing settings.

Everything here is a pure function of its arguments.  The radius rule is a
dual constraint: points shrink when either the horizontal event density or
the vertical track density grows.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from trackline.domain.errors import DegenerateLayoutError

logger = logging.getLogger(__name__)

# Horizontal room per order step and vertical room per track, in radii.
ORDER_SPACING = 5
TRACK_SPACING = 8
LABEL_HEIGHT_FACTOR = 1.5
DEFAULT_FONT_HEIGHT_WIDTH_RATIO = 2.0


@dataclass(frozen=True)
class Viewport:
    """Available screen area in pixels."""

    width: float
    height: float


@dataclass(frozen=True)
class LayoutOptions:
    """Layout knobs taken from configuration."""

    screen_proportion: float = 0.9
    x_ratio: float | None = None
    y_ratio: float | None = None
    outer_width: float | None = None
    outer_height: float | None = None
    font_height_width_ratio: float = DEFAULT_FONT_HEIGHT_WIDTH_RATIO


@dataclass(frozen=True)
class Margin:
    left: float
    top: float
    right: float
    bottom: float

    def to_dict(self) -> dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


@dataclass(frozen=True)
class LinearScale:
    """Linear map from a data domain onto a pixel range."""

    domain: tuple[float, float]
    range: tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return r0
        return r0 + (value - d0) * (r1 - r0) / (d1 - d0)

    def to_dict(self) -> dict[str, list[float]]:
        return {"domain": list(self.domain), "range": list(self.range)}


@dataclass(frozen=True)
class LayoutSettings:
    """Geometry for one draw cycle.  Read-only for the renderer."""

    track_count: int
    order_extent: tuple[int, int]
    max_name_length: int
    viewport: Viewport
    x_ratio: float
    y_ratio: float
    outer_width: float
    outer_height: float
    radius: int
    label_height: float
    label_width: float
    x_label_offset: float
    y_label_offset: float
    margin: Margin
    inner_width: float
    inner_height: float
    x_scale: LinearScale
    y_scale: LinearScale

    @property
    def stroke_width(self) -> int:
        """Track lines are as thick as the points are wide in radius."""
        return self.radius

    @property
    def axis_stroke_width(self) -> float:
        return self.radius / 2

    @property
    def order_span(self) -> int:
        return self.order_extent[1] - self.order_extent[0]

    def track_y(self, index: int) -> float:
        """Vertical position of the track at *index* (0 is the top track)."""
        return self.y_scale(self.track_count - index)

    def to_dict(self) -> dict[str, Any]:
        return {
            "track_count": self.track_count,
            "order_extent": list(self.order_extent),
            "max_name_length": self.max_name_length,
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
            "x_ratio": round(self.x_ratio, 6),
            "y_ratio": round(self.y_ratio, 6),
            "outer_width": self.outer_width,
            "outer_height": self.outer_height,
            "radius": self.radius,
            "stroke_width": self.stroke_width,
            "axis_stroke_width": self.axis_stroke_width,
            "label_height": self.label_height,
            "label_width": self.label_width,
            "x_label_offset": self.x_label_offset,
            "y_label_offset": self.y_label_offset,
            "margin": self.margin.to_dict(),
            "inner_width": self.inner_width,
            "inner_height": self.inner_height,
            "x_scale": self.x_scale.to_dict(),
            "y_scale": self.y_scale.to_dict(),
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (``round()`` rounds to even)."""
    return math.floor(value + 0.5)


def fit_ratios(
    track_count: int,
    order_span: int,
    viewport: Viewport,
    options: LayoutOptions,
) -> tuple[float, float]:
    """Return the fraction of the viewport used on each axis.

    An explicit ratio is scaled by ``screen_proportion``.  A missing one
    is derived from the radius that fits both axes at
    ``screen_proportion``: the axis keeps only the room that radius needs,
    never more than ``screen_proportion``.
    """
    sp = options.screen_proportion
    need_x = order_span * ORDER_SPACING
    need_y = track_count * TRACK_SPACING
    unit = min(viewport.width * sp / need_x, viewport.height * sp / need_y)

    if options.x_ratio is not None:
        x_ratio = options.x_ratio * sp
    else:
        x_ratio = min(sp, unit * need_x / viewport.width)

    if options.y_ratio is not None:
        y_ratio = options.y_ratio * sp
    else:
        y_ratio = min(sp, unit * need_y / viewport.height)

    return x_ratio, y_ratio


def compute_settings(
    track_count: int,
    order_extent: tuple[int, int],
    max_name_length: int,
    viewport: Viewport,
    options: LayoutOptions | None = None,
) -> LayoutSettings:
    """Derive drawing geometry for *track_count* tracks over *order_extent*.

    Raises:
        DegenerateLayoutError: if the track count or order span is zero,
            the viewport is empty, or the margins leave no drawing area.
    """
    options = options or LayoutOptions()
    order_span = order_extent[1] - order_extent[0]

    if track_count <= 0:
        raise DegenerateLayoutError("Cannot lay out zero tracks", track_count=track_count)
    if order_span <= 0:
        raise DegenerateLayoutError(
            f"Order span must be positive, got {order_extent[0]}..{order_extent[1]}",
            order_extent=list(order_extent),
        )
    if viewport.width <= 0 or viewport.height <= 0:
        raise DegenerateLayoutError(
            "Viewport must have a positive size",
            width=viewport.width,
            height=viewport.height,
        )

    x_ratio, y_ratio = fit_ratios(track_count, order_span, viewport, options)
    outer_width = options.outer_width or viewport.width * x_ratio
    outer_height = options.outer_height or viewport.height * y_ratio

    radius = min(
        round_half_up(outer_width / (order_span * ORDER_SPACING)),
        round_half_up(outer_height / (track_count * TRACK_SPACING)),
    )
    if radius < 1:
        logger.warning(
            "Point radius rounds to %d; %d tracks over %d orders are too dense for %gx%g",
            radius,
            track_count,
            order_span,
            outer_width,
            outer_height,
        )

    label_height = radius * LABEL_HEIGHT_FACTOR
    label_width = label_height * max_name_length / options.font_height_width_ratio
    x_label_offset = 2 * radius + label_width
    y_label_offset = radius + label_height

    padding = 2 * radius
    margin = Margin(left=x_label_offset + padding, top=padding, right=padding, bottom=padding)
    inner_width = outer_width - margin.left - margin.right
    inner_height = outer_height - margin.top - margin.bottom

    if inner_width <= 0 or inner_height - label_height <= 0:
        raise DegenerateLayoutError(
            "Margins leave no room to draw",
            inner_width=inner_width,
            inner_height=inner_height,
        )

    return LayoutSettings(
        track_count=track_count,
        order_extent=order_extent,
        max_name_length=max_name_length,
        viewport=viewport,
        x_ratio=x_ratio,
        y_ratio=y_ratio,
        outer_width=outer_width,
        outer_height=outer_height,
        radius=radius,
        label_height=label_height,
        label_width=label_width,
        x_label_offset=x_label_offset,
        y_label_offset=y_label_offset,
        margin=margin,
        inner_width=inner_width,
        inner_height=inner_height,
        x_scale=LinearScale(domain=order_extent, range=(0.0, inner_width)),
        y_scale=LinearScale(domain=(0, track_count), range=(inner_height - label_height, 0.0)),
    )
