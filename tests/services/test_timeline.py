"""Tests for TimelineService and the draw-cycle pipeline."""

from __future__ import annotations

import json

import pytest

from tests.conftest import make_context, make_rows
from trackline.domain.errors import DataShapeError
from trackline.services.telemetry import enable_telemetry
from trackline.services.timeline import TimelineService, draw_cycle


@pytest.fixture
def service() -> TimelineService:
    return TimelineService(make_context())


class TestDrawCycle:
    def test_full_cycle(self, scenario_rows: list[dict[str, str]]) -> None:
        output = draw_cycle(scenario_rows, make_context())
        assert [e.order for e in output.events] == [1, 2, 3, 3]
        assert [t.participant for t in output.tracks] == ["P1", "P2", "P3", "P4"]
        assert output.layout.track_count == 4
        assert output.layout.radius == 13

    def test_errors_propagate(self) -> None:
        with pytest.raises(DataShapeError):
            draw_cycle([{"Protein A": "P1"}], make_context())

    def test_rows_not_mutated(self, scenario_rows: list[dict[str, str]]) -> None:
        before = [dict(r) for r in scenario_rows]
        draw_cycle(scenario_rows, make_context(remove_duplicates=True))
        assert scenario_rows == before

    def test_each_cycle_starts_fresh(self, scenario_rows: list[dict[str, str]]) -> None:
        first = draw_cycle(scenario_rows, make_context(minimum_interaction_count=3))
        second = draw_cycle(scenario_rows, make_context())
        assert len(first.tracks) == 1
        assert len(second.tracks) == 4


class TestCheck:
    def test_scenario(self, service: TimelineService, scenario_rows: list[dict[str, str]]) -> None:
        result = service.check(scenario_rows)
        assert result.ok
        assert result.op == "check"
        assert result.data["rows"] == 4
        assert result.data["events"] == 4
        assert result.data["participants"] == 4
        assert result.data["order_extent"] == [1, 3]
        assert result.data["columns"] == ["Protein A", "Protein B", "Order"]
        assert result.warnings == []

    def test_gapped_orders_warn(self, service: TimelineService) -> None:
        result = service.check(make_rows([("A", "B", 2), ("B", "C", 5)]))
        assert result.ok
        assert len(result.warnings) == 1
        assert "2..5" in result.warnings[0]

    def test_missing_column(self, service: TimelineService) -> None:
        result = service.check([{"Protein A": "P1", "Protein B": "P2"}])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATA_SHAPE"
        assert result.error.detail["missing"] == ["Order"]


class TestTracks:
    def test_items_in_order(
        self, service: TimelineService, scenario_rows: list[dict[str, str]]
    ) -> None:
        result = service.tracks(scenario_rows)
        assert result.ok
        assert result.data["count"] == 4
        assert result.data["events"] == 4
        assert result.data["strategy"] == "count"
        assert result.data["minimum_interaction_count"] == 1
        first = result.data["items"][0]
        assert first["participant"] == "P1"
        assert first["interaction_count"] == 3
        assert [i["partner"] for i in first["interactions"]] == ["P2", "P3", "P4"]

    def test_greedy(self, scenario_rows: list[dict[str, str]]) -> None:
        result = TimelineService(make_context(strategy="greedy")).tracks(scenario_rows)
        assert result.data["strategy"] == "greedy"
        assert [i["participant"] for i in result.data["items"]] == ["P1", "P2"]

    def test_empty_result(self, scenario_rows: list[dict[str, str]]) -> None:
        result = TimelineService(make_context(minimum_interaction_count=4)).tracks(scenario_rows)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EMPTY_RESULT"

    def test_non_numeric_order(self, service: TimelineService) -> None:
        result = service.tracks(make_rows([("A", "B", 1), ("B", "C", "later")]))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DATA_SHAPE"
        assert result.error.detail["row"] == 1


class TestLayout:
    def test_geometry(self, service: TimelineService, scenario_rows: list[dict[str, str]]) -> None:
        result = service.layout(scenario_rows)
        assert result.ok
        assert result.data["tracks"] == 4
        assert result.data["radius"] == 13
        assert result.data["margin"]["left"] == 71.5
        assert result.data["order_extent"] == [1, 3]

    def test_single_order_is_degenerate(self, service: TimelineService) -> None:
        result = service.layout(make_rows([("A", "B", 1), ("A", "C", 1)]))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "DEGENERATE_LAYOUT"


class TestRender:
    def test_svg(self, service: TimelineService, scenario_rows: list[dict[str, str]]) -> None:
        result = service.render(scenario_rows)
        assert result.ok
        content = result.data["content"]
        assert content.startswith("<svg")
        assert content.count("<circle") == 8
        assert content.count("<path") == 5
        assert result.data["format"] == "svg"
        assert result.data["tracks"] == 4
        assert result.data["width"] == 500
        assert result.data["height"] == 400

    def test_json(self, service: TimelineService, scenario_rows: list[dict[str, str]]) -> None:
        result = service.render(scenario_rows, fmt="json")
        payload = json.loads(result.data["content"])
        assert [t["participant"] for t in payload["tracks"]] == ["P1", "P2", "P3", "P4"]
        assert payload["layout"]["radius"] == 13

    def test_unknown_format(
        self, service: TimelineService, scenario_rows: list[dict[str, str]]
    ) -> None:
        result = service.render(scenario_rows, fmt="png")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_FORMAT"
        assert result.error.detail["valid"] == ["svg", "json"]

    def test_failure_renders_nothing(self, service: TimelineService) -> None:
        result = service.render([])
        assert not result.ok
        assert result.data == {}


class TestTelemetry:
    def test_disabled_by_default(
        self, service: TimelineService, scenario_rows: list[dict[str, str]]
    ) -> None:
        assert service.tracks(scenario_rows).meta is None

    def test_span_tree(self, service: TimelineService, scenario_rows: list[dict[str, str]]) -> None:
        enable_telemetry()
        result = service.render(scenario_rows)
        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert tree["name"] == "TimelineService.render"
        assert [c["name"] for c in tree["children"]] == [
            "ingest",
            "build_tracks",
            "compute_layout",
            "render",
        ]
        assert tree["children"][1]["annotations"] == {"tracks": 4, "strategy": "count"}

    def test_failure_still_traced(self, service: TimelineService) -> None:
        enable_telemetry()
        result = service.tracks([])
        assert not result.ok
        assert result.meta is not None
        assert result.meta["telemetry"]["name"] == "TimelineService.tracks"
