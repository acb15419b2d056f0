"""TimelineService — one draw cycle from raw rows to tracks, layout, drawing.

The pipeline is synchronous: rows must already be fetched.  Each call
rebuilds everything from the rows it is given; nothing is cached.

:func:`draw_cycle` raises the domain errors directly.  The service
methods wrap it and report those errors as ``ok=False`` results.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from trackline.domain.errors import TracklineError
from trackline.domain.events import InteractionEvent, ingest, order_extent, sort_by_order
from trackline.domain.layout import LayoutSettings, compute_settings
from trackline.domain.tracks import Track, build_tracks, max_name_length
from trackline.renderer import RENDER_FORMATS, render_json, render_svg
from trackline.services.context import DrawContext
from trackline.services.result import ServiceError, ServiceResult
from trackline.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

type Rows = Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class DrawOutput:
    """The two structures a renderer needs."""

    events: list[InteractionEvent]
    tracks: list[Track]
    layout: LayoutSettings


def load_events(rows: Rows, context: DrawContext) -> list[InteractionEvent]:
    """Ingest and sort rows.  Raises ``DataShapeError``."""
    with trace_span("ingest") as span:
        events = sort_by_order(ingest(rows, context.schema))
        if span:
            span.annotate("rows", len(rows))
            span.annotate("events", len(events))
    return events


def construct_tracks(events: Sequence[InteractionEvent], context: DrawContext) -> list[Track]:
    """Run track construction.  Raises ``EmptyResultError``."""
    options = context.tracks
    with trace_span("build_tracks") as span:
        tracks = build_tracks(
            events,
            options.minimum_interaction_count,
            options.remove_duplicate_interactions,
            strategy=options.strategy,
        )
        if span:
            span.annotate("tracks", len(tracks))
            span.annotate("strategy", options.strategy.value)
    return tracks


def compute_layout(
    events: Sequence[InteractionEvent],
    tracks: Sequence[Track],
    context: DrawContext,
) -> LayoutSettings:
    """Derive geometry for *tracks*.  Raises ``DegenerateLayoutError``."""
    with trace_span("compute_layout") as span:
        layout = compute_settings(
            len(tracks),
            order_extent(events),
            max_name_length(tracks),
            context.viewport,
            context.layout,
        )
        if span:
            span.annotate("radius", layout.radius)
    return layout


def draw_cycle(rows: Rows, context: DrawContext) -> DrawOutput:
    """Rows → events → tracks → layout, aborting on the first error."""
    events = load_events(rows, context)
    tracks = construct_tracks(events, context)
    layout = compute_layout(events, tracks, context)
    return DrawOutput(events=events, tracks=tracks, layout=layout)


class TimelineService:
    """Runs draw cycles for the CLI and reports them as ServiceResults."""

    def __init__(self, context: DrawContext) -> None:
        self._context = context

    @traced
    def check(self, rows: Rows) -> ServiceResult:
        """Validate data shape without building tracks."""
        try:
            events = load_events(rows, self._context)
            extent = order_extent(events)
        except TracklineError as exc:
            return ServiceResult.failure("check", exc)

        participants = {e.participant_a for e in events} | {e.participant_b for e in events}
        warnings: list[str] = []
        orders = {e.order for e in events}
        if extent[0] != 1 or len(orders) != extent[1] - extent[0] + 1:
            warnings.append(
                f"Orders are not a contiguous run starting at 1 ({extent[0]}..{extent[1]})"
            )
        return ServiceResult(
            ok=True,
            op="check",
            data={
                "rows": len(rows),
                "events": len(events),
                "participants": len(participants),
                "order_extent": list(extent),
                "columns": list(self._context.schema.columns),
            },
            warnings=warnings,
        )

    @traced
    def tracks(self, rows: Rows) -> ServiceResult:
        """Build tracks and report them in order."""
        try:
            events = load_events(rows, self._context)
            tracks = construct_tracks(events, self._context)
        except TracklineError as exc:
            return ServiceResult.failure("tracks", exc)

        return ServiceResult(
            ok=True,
            op="tracks",
            data={
                "count": len(tracks),
                "events": len(events),
                "strategy": self._context.tracks.strategy.value,
                "minimum_interaction_count": self._context.tracks.minimum_interaction_count,
                "items": [t.to_dict() for t in tracks],
            },
        )

    @traced
    def layout(self, rows: Rows) -> ServiceResult:
        """Build tracks and report the derived layout geometry."""
        try:
            output = draw_cycle(rows, self._context)
        except TracklineError as exc:
            return ServiceResult.failure("layout", exc)

        return ServiceResult(
            ok=True,
            op="layout",
            data={"tracks": len(output.tracks), **output.layout.to_dict()},
        )

    @traced
    def render(self, rows: Rows, *, fmt: str = "svg") -> ServiceResult:
        """Run a full draw cycle and render it.

        Formats:
        - ``svg`` — standalone SVG document
        - ``json`` — ``{"tracks": [...], "layout": {...}}`` for another renderer

        Returns the document in ``data["content"]``.
        """
        if fmt not in RENDER_FORMATS:
            return ServiceResult(
                ok=False,
                op="render",
                error=ServiceError(
                    code="INVALID_FORMAT",
                    message=f"Unknown render format: {fmt}",
                    detail={"format": fmt, "valid": list(RENDER_FORMATS)},
                ),
            )

        try:
            output = draw_cycle(rows, self._context)
        except TracklineError as exc:
            return ServiceResult.failure("render", exc)

        with trace_span("render") as span:
            renderer = render_svg if fmt == "svg" else render_json
            content = renderer(output.tracks, output.layout)
            if span:
                span.annotate("bytes", len(content))

        logger.debug("Rendered %d track(s) as %s", len(output.tracks), fmt)
        return ServiceResult(
            ok=True,
            op="render",
            data={
                "format": fmt,
                "content": content,
                "tracks": len(output.tracks),
                "width": output.layout.outer_width,
                "height": output.layout.outer_height,
            },
        )
