"""ServiceResult and ServiceError — what services hand back to the CLI.

Services raise from the error taxonomy internally and convert at their
boundary, so commands only ever see a ServiceResult.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from xcforge.services.errors import XcforgeError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: XcforgeError) -> ServiceError:
        return cls(code=exc.code, message=str(exc), detail=exc.detail())


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"package"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, exc: XcforgeError) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
