"""Tests for track construction and duplicate resolution."""

from __future__ import annotations

import random

import pytest

from tests.conftest import SCENARIO_EVENTS, make_events
from trackline.domain.errors import ConfigValidationError, EmptyResultError
from trackline.domain.tracks import (
    Interaction,
    Track,
    TrackStrategy,
    build_tracks,
    max_name_length,
    record_interactions,
    resolve_duplicates,
)

# X meets five partners; Y meets X and E.
STAR_EVENTS = [
    ("X", "Y", 1),
    ("X", "A", 2),
    ("X", "B", 3),
    ("X", "C", 4),
    ("X", "D", 5),
    ("Y", "E", 6),
]


def _random_events(seed: int, count: int = 60) -> list[tuple[str, str, int]]:
    rng = random.Random(seed)
    names = [f"N{i}" for i in range(12)]
    events = []
    for order in range(1, count + 1):
        a, b = rng.sample(names, 2)
        events.append((a, b, order))
    return events


def _degrees(events: list[tuple[str, str, int]]) -> dict[str, int]:
    partners: dict[str, set[str]] = {}
    for a, b, _ in events:
        partners.setdefault(a, set()).add(b)
        partners.setdefault(b, set()).add(a)
    return {name: len(p) for name, p in partners.items()}


class TestRecordInteractions:
    def test_both_directions_recorded(self) -> None:
        g = record_interactions(make_events([("A", "B", 1)]))
        assert g.has_edge("A", "B")
        assert g.has_edge("B", "A")
        assert g["A"]["B"]["order"] == 1

    def test_repeat_pair_last_write_wins(self) -> None:
        g = record_interactions(make_events([("A", "B", 1), ("A", "C", 2), ("B", "A", 5)]))
        assert g.out_degree("A") == 2
        assert g["A"]["B"]["order"] == 5
        # Overwriting keeps the partner's original position.
        assert list(g.successors("A")) == ["B", "C"]

    def test_first_seen_participant_order(self) -> None:
        g = record_interactions(make_events(SCENARIO_EVENTS))
        assert list(g) == ["P1", "P2", "P3", "P4"]


class TestBuildTracksScenarios:
    def test_threshold_keeps_only_hub(self) -> None:
        tracks = build_tracks(make_events(SCENARIO_EVENTS), 3, False)
        assert tracks == [
            Track(
                participant="P1",
                interactions=(
                    Interaction("P2", 1),
                    Interaction("P3", 2),
                    Interaction("P4", 3),
                ),
            )
        ]

    def test_all_qualify_sorted_by_count(self) -> None:
        tracks = build_tracks(make_events(SCENARIO_EVENTS), 1, False)
        assert [t.participant for t in tracks] == ["P1", "P2", "P3", "P4"]
        assert [t.interaction_count for t in tracks] == [3, 2, 2, 1]
        assert tracks[1].interactions == (Interaction("P1", 1), Interaction("P3", 3))
        assert tracks[2].interactions == (Interaction("P1", 2), Interaction("P2", 3))
        assert tracks[3].interactions == (Interaction("P1", 3),)

    def test_tie_keeps_first_seen_order(self) -> None:
        events = make_events([("B", "C", 1), ("A", "C", 2), ("A", "D", 3), ("B", "D", 4)])
        tracks = build_tracks(events, 2, False)
        # Every participant has two partners; order is first appearance.
        assert [t.participant for t in tracks] == ["B", "C", "A", "D"]

    def test_no_qualifier_raises(self) -> None:
        with pytest.raises(EmptyResultError) as exc_info:
            build_tracks(make_events(SCENARIO_EVENTS), 4, False)
        assert exc_info.value.code == "EMPTY_RESULT"
        assert exc_info.value.detail["minimum_interaction_count"] == 4

    def test_no_events_raises(self) -> None:
        with pytest.raises(EmptyResultError):
            build_tracks([], 1, False)

    def test_minimum_below_one_rejected(self) -> None:
        with pytest.raises(ConfigValidationError):
            build_tracks(make_events(SCENARIO_EVENTS), 0, False)


class TestDuplicateResolution:
    def test_weaker_side_loses_edge(self) -> None:
        tracks = build_tracks(make_events(STAR_EVENTS), 1, True)
        by_name = {t.participant: t for t in tracks}
        assert "Y" in by_name["X"].partners
        assert by_name["X"].interaction_count == 5
        assert "X" not in by_name["Y"].partners
        assert by_name["Y"].interaction_count == 1

    def test_leaves_emptied_by_pruning_are_dropped(self) -> None:
        tracks = build_tracks(make_events(STAR_EVENTS), 1, True)
        assert [t.participant for t in tracks] == ["X", "Y", "E"]

    def test_equal_counts_keep_both_edges(self) -> None:
        g = record_interactions(make_events([("A", "B", 1)]))
        assert resolve_duplicates(g) == 0
        assert g.has_edge("A", "B")
        assert g.has_edge("B", "A")

    def test_live_counts_change_later_comparisons(self) -> None:
        g = record_interactions(make_events(SCENARIO_EVENTS))
        removed = resolve_duplicates(g)
        # P2 drops both partners first; P3 then outranks P2 and keeps it.
        assert removed == 4
        assert list(g.successors("P1")) == ["P2", "P3", "P4"]
        assert list(g.successors("P2")) == []
        assert list(g.successors("P3")) == ["P2"]
        assert list(g.successors("P4")) == []

    def test_count_matches_partner_list_after_resolution(self) -> None:
        events = make_events(_random_events(seed=7))
        for track in build_tracks(events, 1, True):
            assert track.interaction_count == len(set(track.partners))

    def test_resolution_is_reproducible(self) -> None:
        events = make_events(_random_events(seed=11))
        first = build_tracks(events, 1, True)
        second = build_tracks(events, 1, True)
        assert first == second


class TestTrackProperties:
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_no_fabricated_participants(self, seed: int) -> None:
        raw = _random_events(seed)
        names = {a for a, _, _ in raw} | {b for _, b, _ in raw}
        for track in build_tracks(make_events(raw), 1, True):
            assert track.participant in names
            assert set(track.partners) <= names

    @pytest.mark.parametrize("minimum", [1, 3, 5])
    def test_threshold_respected(self, minimum: int) -> None:
        for track in build_tracks(make_events(_random_events(4)), minimum, False):
            assert track.interaction_count >= minimum

    def test_no_duplicate_partners(self) -> None:
        for track in build_tracks(make_events(_random_events(5)), 1, False):
            assert len(track.partners) == len(set(track.partners))

    def test_counts_equal_degree_without_resolution(self) -> None:
        raw = _random_events(6)
        degrees = _degrees(raw)
        for track in build_tracks(make_events(raw), 1, False):
            assert track.interaction_count == degrees[track.participant]

    def test_deterministic(self) -> None:
        events = make_events(_random_events(8))
        assert build_tracks(events, 2, False) == build_tracks(events, 2, False)

    def test_sorted_descending(self) -> None:
        counts = [t.interaction_count for t in build_tracks(make_events(_random_events(9)))]
        assert counts == sorted(counts, reverse=True)


class TestGreedyStrategy:
    def test_picks_busiest_then_consumes(self) -> None:
        tracks = build_tracks(make_events(SCENARIO_EVENTS), 1, strategy=TrackStrategy.GREEDY)
        assert [t.participant for t in tracks] == ["P1", "P2"]
        assert tracks[0].interactions == (
            Interaction("P2", 1),
            Interaction("P3", 2),
            Interaction("P4", 3),
        )
        assert tracks[1].interactions == (Interaction("P3", 3),)

    def test_minimum_drops_small_tracks(self) -> None:
        tracks = build_tracks(make_events(SCENARIO_EVENTS), 2, strategy="greedy")
        assert [t.participant for t in tracks] == ["P1"]

    def test_repeat_partner_collapses(self) -> None:
        events = make_events([("A", "B", 1), ("A", "B", 2), ("A", "C", 3)])
        tracks = build_tracks(events, 1, strategy="greedy")
        assert tracks[0].participant == "A"
        assert tracks[0].interactions == (Interaction("B", 2), Interaction("C", 3))

    def test_duplicate_flag_ignored(self) -> None:
        events = make_events(STAR_EVENTS)
        with_flag = build_tracks(events, 1, True, strategy="greedy")
        without = build_tracks(events, 1, False, strategy="greedy")
        assert with_flag == without

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_tracks(make_events(SCENARIO_EVENTS), 1, strategy="random")


class TestTrackModel:
    def test_to_dict(self) -> None:
        track = Track("P1", (Interaction("P2", 1),))
        assert track.to_dict() == {
            "participant": "P1",
            "interaction_count": 1,
            "interactions": [{"partner": "P2", "order": 1}],
        }

    def test_max_name_length(self) -> None:
        tracks = [Track("ab", ()), Track("abcd", ()), Track("a", ())]
        assert max_name_length(tracks) == 4
        assert max_name_length([]) == 0
