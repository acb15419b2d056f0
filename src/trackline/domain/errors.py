"""Error taxonomy for a draw cycle.

Every failure that aborts a draw cycle is a :class:`TracklineError`
subclass carrying a stable ``code``.  The service layer turns these into
``ServiceError`` payloads; nothing inside the pipeline retries.
"""

from __future__ import annotations

from typing import Any


class TracklineError(Exception):
    """Base class for errors that abort the current draw cycle."""

    code = "TRACKLINE_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConfigValidationError(TracklineError):
    """A configured ratio, threshold, or column name is out of range."""

    code = "CONFIG_INVALID"


class DataShapeError(TracklineError):
    """Rows are empty, lack a configured column, or carry a non-numeric order."""

    code = "DATA_SHAPE"


class EmptyResultError(TracklineError):
    """No participant met the minimum interaction count."""

    code = "EMPTY_RESULT"


class DegenerateLayoutError(TracklineError):
    """Layout inputs would divide by zero or leave no drawing area."""

    code = "DEGENERATE_LAYOUT"


class SourceUnavailableError(TracklineError):
    """The row source could not be read (missing file, HTTP failure)."""

    code = "SOURCE_UNAVAILABLE"


class OutputUnavailableError(TracklineError):
    """The rendered document could not be written to its target file."""

    code = "OUTPUT_UNAVAILABLE"
