"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Every public service method returns a ServiceResult.
``ok=False`` is reserved for failures of the operation itself (unknown
document, unparsable ad-hoc directive, missing snapshot). Problems with
individual documents are reported inside ``data`` of an ``ok`` result.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"check"``, ``"run_document"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry under ``--verbose``).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    """Shorthand for an ``ok=False`` result."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )
