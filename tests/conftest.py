"""Shared pytest fixtures and test helpers for trackline tests."""

from __future__ import annotations

import csv
import logging
from collections.abc import Generator, Iterable
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from trackline.config.models import TracksConfig
from trackline.domain.events import ColumnSchema, InteractionEvent
from trackline.domain.layout import LayoutOptions, Viewport
from trackline.services.context import DrawContext
from trackline.services.telemetry import _current_span, disable_telemetry

COLUMNS = ("Protein A", "Protein B", "Order")

# Four participants: P1 meets everyone, P2 and P3 also meet each other.
SCENARIO_EVENTS = [("P1", "P2", 1), ("P1", "P3", 2), ("P1", "P4", 3), ("P2", "P3", 3)]


def make_rows(events: Iterable[tuple[str, str, object]]) -> list[dict[str, str]]:
    """Build raw rows keyed by the default column names."""
    return [{COLUMNS[0]: a, COLUMNS[1]: b, COLUMNS[2]: str(order)} for a, b, order in events]


def make_events(events: Iterable[tuple[str, str, int]]) -> list[InteractionEvent]:
    """Build already-normalized events, row index in input order."""
    return [
        InteractionEvent(participant_a=a, participant_b=b, order=order, row=i)
        for i, (a, b, order) in enumerate(events)
    ]


def write_csv(path: Path, rows: list[dict[str, str]]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=list(COLUMNS))
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scenario_rows() -> list[dict[str, str]]:
    return make_rows(SCENARIO_EVENTS)


@pytest.fixture
def scenario_csv(tmp_path: Path, scenario_rows: list[dict[str, str]]) -> Path:
    return write_csv(tmp_path / "interactions.csv", scenario_rows)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp directory so no trackline.toml is discovered."""
    monkeypatch.delenv("TRACKLINE_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


def make_context(
    *,
    minimum_interaction_count: int = 1,
    remove_duplicates: bool = False,
    strategy: str = "count",
    viewport: Viewport | None = None,
    layout: LayoutOptions | None = None,
) -> DrawContext:
    """DrawContext with fixed, easy-to-check geometry (half of a 1000x800 viewport)."""
    return DrawContext(
        schema=ColumnSchema(*COLUMNS),
        tracks=TracksConfig(
            minimum_interaction_count=minimum_interaction_count,
            remove_duplicate_interactions=remove_duplicates,
            strategy=strategy,
        ),
        layout=layout or LayoutOptions(screen_proportion=1.0, x_ratio=0.5, y_ratio=0.5),
        viewport=viewport or Viewport(width=1000, height=800),
    )


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None]:
    """Undo what ``AppContext`` sets up: root log handlers and telemetry."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("trackline").setLevel(logging.NOTSET)
    disable_telemetry()
    _current_span.set(None)
    structlog.contextvars.clear_contextvars()
