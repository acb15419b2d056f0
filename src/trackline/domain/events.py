"""Interaction events — row ingestion, order coercion, and sorting.

Column names are resolved once into a :class:`ColumnSchema`; everything
downstream addresses events by fixed attributes.

INVARIANT: only the first row is checked for the configured columns.
Later rows are taken as-is.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from trackline.domain.errors import DataShapeError


@dataclass(frozen=True)
class ColumnSchema:
    """The three row fields that make up an interaction event."""

    participant_a: str
    participant_b: str
    order: str

    @property
    def columns(self) -> tuple[str, str, str]:
        return (self.participant_a, self.participant_b, self.order)


@dataclass(frozen=True)
class InteractionEvent:
    """One interaction between two participants at a given order.

    ``order`` is None when the source value was not numeric; such events
    are rejected by :func:`sort_by_order`.
    """

    participant_a: str
    participant_b: str
    order: int | None
    row: int = 0
    raw_order: Any = None

    def partner_of(self, participant: str) -> str | None:
        """Return the other side of the event, or None if *participant* is absent."""
        if self.participant_a == participant:
            return self.participant_b
        if self.participant_b == participant:
            return self.participant_a
        return None


def coerce_order(value: Any) -> int | None:
    """Coerce a raw order cell to an int.

    Accepts ints, integral floats, and strings holding either.  Returns
    None for anything else (blank, text, fractional, NaN).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def _cell(row: Mapping[str, Any], column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value).strip()


def _missing_columns(row: Mapping[str, Any], schema: ColumnSchema) -> list[str]:
    missing: list[str] = []
    for column in schema.columns:
        value = row.get(column)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(column)
    return missing


def ingest(rows: Sequence[Mapping[str, Any]], schema: ColumnSchema) -> list[InteractionEvent]:
    """Normalize raw rows into interaction events.

    Raises:
        DataShapeError: if *rows* is empty or the first row lacks any of
            the configured columns.
    """
    if not rows:
        raise DataShapeError("No rows to ingest", columns=list(schema.columns))

    missing = _missing_columns(rows[0], schema)
    if missing:
        raise DataShapeError(
            f"First row is missing configured column(s): {', '.join(missing)}",
            missing=missing,
            available=sorted(str(k) for k in rows[0]),
        )

    events: list[InteractionEvent] = []
    for index, row in enumerate(rows):
        raw_order = row.get(schema.order)
        events.append(
            InteractionEvent(
                participant_a=_cell(row, schema.participant_a),
                participant_b=_cell(row, schema.participant_b),
                order=coerce_order(raw_order),
                row=index,
                raw_order=raw_order,
            )
        )
    return events


def sort_by_order(events: Iterable[InteractionEvent]) -> list[InteractionEvent]:
    """Stable ascending sort on ``order``.

    Raises:
        DataShapeError: naming the first event whose order is not numeric.
    """
    materialized = list(events)
    for event in materialized:
        if event.order is None:
            raise DataShapeError(
                f"Row {event.row} has a non-numeric order: {event.raw_order!r}",
                row=event.row,
                value=str(event.raw_order),
            )
    return sorted(materialized, key=lambda e: e.order or 0)


def order_extent(events: Iterable[InteractionEvent]) -> tuple[int, int]:
    """Return ``(min, max)`` of the event orders.

    Raises:
        DataShapeError: if there are no events with a numeric order.
    """
    orders = [e.order for e in events if e.order is not None]
    if not orders:
        raise DataShapeError("No events with a numeric order")
    return min(orders), max(orders)
