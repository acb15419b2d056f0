"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, trackline.toml only contains
overrides.  The defaults read the protein multicomplex sample data as-is.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from trackline.domain.tracks import TrackStrategy

# --- trackline.toml sections ---


class ColumnsConfig(BaseModel):
    """[columns] section — row field names for the three event parts."""

    model_config = {"frozen": True}

    participant_a: str = "Protein A"
    participant_b: str = "Protein B"
    order: str = "Order"

    @field_validator("participant_a", "participant_b", "order")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("column name must not be blank")
        return value


class TracksConfig(BaseModel):
    """[tracks] section."""

    model_config = {"frozen": True}

    minimum_interaction_count: int = Field(default=1, ge=1)
    remove_duplicate_interactions: bool = False
    strategy: TrackStrategy = TrackStrategy.COUNT


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    screen_proportion: float = Field(default=0.9, gt=0, le=1)
    x_ratio: float | None = Field(default=None, gt=0, le=1)
    y_ratio: float | None = Field(default=None, gt=0, le=1)
    outer_width: float | None = Field(default=None, gt=0)
    outer_height: float | None = Field(default=None, gt=0)
    font_height_width_ratio: float = Field(default=2.0, gt=0)


class ViewportConfig(BaseModel):
    """[viewport] section — screen size used when none is given on the CLI."""

    model_config = {"frozen": True}

    width: float = Field(default=1280, gt=0)
    height: float = Field(default=800, gt=0)


class SourceConfig(BaseModel):
    """[source] section.  A spreadsheet key wins over a CSV file."""

    model_config = {"frozen": True}

    csv_file: Path | None = None
    spreadsheet_key: str | None = None
    timeout: float = Field(default=15.0, gt=0)

