"""ServiceResult and ServiceError — the universal task contract.

INVARIANT: Every task body returns a ServiceResult.
The runner aggregates them; the CLI renders them.
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
    """Universal return type for all tasks.

    Attributes:
        ok: Whether the task succeeded.
        op: Name of the task (e.g. ``"compileStylesheets"``).
        data: Task-specific payload on success.
        warnings: Non-fatal issues, typically one per rejected source file.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, skipped tasks).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
