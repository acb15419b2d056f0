"""ServiceResult and ServiceError — the contract between pipeline and CLI.

INVARIANT: All service-layer methods return ServiceResult.  Domain errors
never escape a service method; they become ``ok=False`` results.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from trackline.domain.errors import TracklineError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: TracklineError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"tracks"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, exc: TracklineError) -> ServiceResult:
        """Build an ``ok=False`` result from a draw-cycle error."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
