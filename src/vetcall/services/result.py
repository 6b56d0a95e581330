"""DispatchResult and DispatchFailure — the engine's return contract.

INVARIANT: ``DispatchEngine.dispatch`` always returns a DispatchResult for
engine-level outcomes. Exceptions raised by the target method propagate.
The CLI and any other host consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from vetcall.errors import error_from_failure


class DispatchFailure(BaseModel):
    """Structured error payload within a DispatchResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class DispatchResult(BaseModel):
    """Outcome of one dispatch.

    Attributes:
        ok: True when the target method was invoked.
        op: Name of the dispatched method.
        data: On success, ``{"returned": <target return value>}``.
        warnings: Non-fatal issues (failed hooks, unknown markers).
        error: Structured failure if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: DispatchFailure | None = None
    meta: dict[str, Any] | None = None

    @property
    def returned(self) -> Any:
        """The target method's return value (None when not invoked)."""
        return self.data.get("returned")

    def raise_for_error(self) -> DispatchResult:
        """Raise the matching :class:`~vetcall.errors.DispatchError` on failure."""
        if self.ok or self.error is None:
            return self
        raise error_from_failure(self.error.code, self.error.message, self.error.detail)
