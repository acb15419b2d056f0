"""DrawContext — the options of one draw cycle, built fresh each time.

Settings are resolved once into fixed domain values (column schema,
track options, layout options, viewport) and passed explicitly through
the pipeline.  Nothing is kept at module level between cycles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from trackline.config.models import TracksConfig
from trackline.domain.errors import ConfigValidationError
from trackline.domain.events import ColumnSchema
from trackline.domain.layout import LayoutOptions, Viewport

if TYPE_CHECKING:
    from trackline.config.settings import TracklineSettings


def _override[M: BaseModel](model: M, **changes: Any) -> M:
    """Re-validate *model* with the non-None *changes* applied."""
    updates = {k: v for k, v in changes.items() if v is not None}
    if not updates:
        return model
    try:
        return type(model).model_validate({**model.model_dump(), **updates})
    except ValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ConfigValidationError(
            f"Invalid option(s): {', '.join(fields)}",
            options=updates,
        ) from exc


@dataclass(frozen=True)
class DrawContext:
    """Everything the pipeline needs besides the rows themselves."""

    schema: ColumnSchema
    tracks: TracksConfig
    layout: LayoutOptions
    viewport: Viewport

    @classmethod
    def from_settings(
        cls,
        settings: TracklineSettings,
        *,
        minimum_interaction_count: int | None = None,
        remove_duplicates: bool | None = None,
        strategy: str | None = None,
        width: float | None = None,
        height: float | None = None,
    ) -> DrawContext:
        """Resolve settings plus per-command overrides.

        Raises:
            ConfigValidationError: if an override is out of range.
        """
        tracks = _override(
            settings.tracks,
            minimum_interaction_count=minimum_interaction_count,
            remove_duplicate_interactions=remove_duplicates,
            strategy=strategy,
        )
        viewport = _override(settings.viewport, width=width, height=height)
        layout = settings.layout
        return cls(
            schema=ColumnSchema(
                participant_a=settings.columns.participant_a,
                participant_b=settings.columns.participant_b,
                order=settings.columns.order,
            ),
            tracks=tracks,
            layout=LayoutOptions(
                screen_proportion=layout.screen_proportion,
                x_ratio=layout.x_ratio,
                y_ratio=layout.y_ratio,
                outer_width=layout.outer_width,
                outer_height=layout.outer_height,
                font_height_width_ratio=layout.font_height_width_ratio,
            ),
            viewport=Viewport(width=viewport.width, height=viewport.height),
        )
