"""Track construction — grouping, counting, duplicate resolution, filtering.

Participants and their partners live in an insertion-ordered
``networkx.DiGraph``: every event adds one edge in each direction, the
edge attribute ``order`` holds the last order seen for that pair, and a
participant's out-degree is its interaction count (distinct partners).

INVARIANT: iteration over participants and over each participant's
partners follows first-seen order.  Duplicate resolution depends on it.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import networkx as nx

from trackline.domain.errors import ConfigValidationError, EmptyResultError
from trackline.domain.events import InteractionEvent

logger = logging.getLogger(__name__)

type ParticipantGraph = nx.DiGraph


class TrackStrategy(StrEnum):
    """How participants are assigned to tracks."""

    COUNT = "count"
    GREEDY = "greedy"


@dataclass(frozen=True)
class Interaction:
    """A point on a track: the partner met and the order it happened at."""

    partner: str
    order: int

    def to_dict(self) -> dict[str, Any]:
        return {"partner": self.partner, "order": self.order}


@dataclass(frozen=True)
class Track:
    """One participant's timeline, drawn as a single horizontal line."""

    participant: str
    interactions: tuple[Interaction, ...]

    @property
    def interaction_count(self) -> int:
        return len(self.interactions)

    @property
    def partners(self) -> tuple[str, ...]:
        return tuple(i.partner for i in self.interactions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "participant": self.participant,
            "interaction_count": self.interaction_count,
            "interactions": [i.to_dict() for i in self.interactions],
        }


# ---------------------------------------------------------------------------
# Participant graph
# ---------------------------------------------------------------------------


def record_interactions(events: Iterable[InteractionEvent]) -> ParticipantGraph:
    """Record both directions of every event.

    Re-adding an existing pair overwrites its ``order`` (last write wins)
    without adding a partner, so counts track distinct partners only.
    """
    g: ParticipantGraph = nx.DiGraph()
    for event in events:
        g.add_edge(event.participant_a, event.participant_b, order=event.order)
        g.add_edge(event.participant_b, event.participant_a, order=event.order)
    return g


def resolve_duplicates(g: ParticipantGraph) -> int:
    """Drop mirrored edges from the weaker side of each interacting pair.

    For each participant A (first-seen order) and each partner B of A
    (first-insertion order), if A currently has fewer partners than B,
    B is removed from A's partners.  Counts are read live, so an earlier
    removal can change a later comparison.

    Returns the number of edges removed.
    """
    removed = 0
    for participant in list(g):
        for partner in list(g.successors(participant)):
            if g.out_degree(participant) < g.out_degree(partner):
                g.remove_edge(participant, partner)
                removed += 1
    logger.debug("Duplicate resolution removed %d edge(s)", removed)
    return removed


def _track_for(g: ParticipantGraph, participant: str) -> Track:
    return Track(
        participant=participant,
        interactions=tuple(
            Interaction(partner=partner, order=attrs["order"])
            for partner, attrs in g.adj[participant].items()
        ),
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _count_tracks(
    events: Sequence[InteractionEvent],
    minimum_interaction_count: int,
    remove_duplicates: bool,
) -> list[Track]:
    g = record_interactions(events)
    if remove_duplicates:
        resolve_duplicates(g)

    survivors = [p for p in g if g.out_degree(p) >= minimum_interaction_count]
    tracks = [_track_for(g, p) for p in survivors]
    # sorted() is stable: ties keep first-seen participant order.
    return sorted(tracks, key=lambda t: t.interaction_count, reverse=True)


def _greedy_tracks(
    events: Sequence[InteractionEvent],
    minimum_interaction_count: int,
) -> list[Track]:
    remaining = list(events)
    tracks: list[Track] = []
    while remaining:
        counts: Counter[str] = Counter()
        for event in remaining:
            counts[event.participant_a] += 1
            counts[event.participant_b] += 1
        # max() keeps the first of equal counts, i.e. the first seen.
        participant = max(counts, key=counts.__getitem__)

        partners: dict[str, int] = {}
        unconsumed: list[InteractionEvent] = []
        for event in remaining:
            partner = event.partner_of(participant)
            if partner is None:
                unconsumed.append(event)
            else:
                partners[partner] = event.order  # type: ignore[assignment]
        remaining = unconsumed

        if len(partners) >= minimum_interaction_count:
            tracks.append(
                Track(
                    participant=participant,
                    interactions=tuple(Interaction(p, o) for p, o in partners.items()),
                )
            )
    return tracks


def build_tracks(
    events: Sequence[InteractionEvent],
    minimum_interaction_count: int = 1,
    remove_duplicates: bool = False,
    *,
    strategy: TrackStrategy | str = TrackStrategy.COUNT,
) -> list[Track]:
    """Build ordered tracks from sorted interaction events.

    Args:
        events: Events, already sorted by order.
        minimum_interaction_count: Participants with fewer distinct
            partners are dropped.
        remove_duplicates: Run :func:`resolve_duplicates` before filtering.
        strategy: ``count`` (count, filter, sort) or ``greedy`` (pick the
            busiest participant, consume its events, repeat).

    Returns:
        Tracks sorted by interaction count, descending (``count``), or in
        pick order (``greedy``).

    Raises:
        ConfigValidationError: if the minimum count is below 1.
        EmptyResultError: if no participant meets the minimum count.
    """
    if minimum_interaction_count < 1:
        raise ConfigValidationError(
            "minimum_interaction_count must be at least 1",
            minimum_interaction_count=minimum_interaction_count,
        )

    strategy = TrackStrategy(strategy)
    if strategy is TrackStrategy.GREEDY:
        if remove_duplicates:
            logger.debug("Duplicate removal has no effect with the greedy strategy")
        tracks = _greedy_tracks(events, minimum_interaction_count)
    else:
        tracks = _count_tracks(events, minimum_interaction_count, remove_duplicates)

    if not tracks:
        raise EmptyResultError(
            f"No participant has at least {minimum_interaction_count} interaction(s)",
            minimum_interaction_count=minimum_interaction_count,
            events=len(events),
        )

    logger.debug(
        "Built %d track(s) from %d event(s) using %s strategy",
        len(tracks),
        len(events),
        strategy.value,
    )
    return tracks


def max_name_length(tracks: Iterable[Track]) -> int:
    """Length of the longest participant name among *tracks*."""
    return max((len(t.participant) for t in tracks), default=0)
