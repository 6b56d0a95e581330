"""Dispatch failure taxonomy.

``DispatchEngine.dispatch`` reports these as structured results;
``DispatchEngine.invoke`` and ``DispatchResult.raise_for_error`` raise them.
Exceptions raised by the target method itself are never wrapped.
"""

from __future__ import annotations

from typing import Any

from vetcall.domain.types import ErrorCode


class DispatchError(Exception):
    """Base class for every failure the engine itself produces."""

    code: ErrorCode

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class MethodNotFoundError(DispatchError):
    """The target's type has no dispatchable method with that name."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, method_name: str, owner: str, reason: str | None = None) -> None:
        message = f"Method not found: {method_name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, method_name=method_name, owner=owner, reason=reason)
        self.method_name = method_name


class AmbiguousMethodError(DispatchError):
    """The name resolves to more than one implementation."""

    code = ErrorCode.AMBIGUOUS

    def __init__(self, method_name: str, owner: str, kind: str) -> None:
        super().__init__(
            f"Method {method_name!r} on {owner} is an overloaded {kind}; refusing to guess",
            method_name=method_name,
            owner=owner,
            kind=kind,
        )
        self.method_name = method_name


class ArityMismatchError(DispatchError):
    """Wrong number of positional arguments for the resolved method."""

    code = ErrorCode.ARITY_MISMATCH

    def __init__(self, method_name: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Method {method_name!r} expects {expected} argument(s), got {actual}",
            method_name=method_name,
            expected=expected,
            actual=actual,
        )
        self.expected = expected
        self.actual = actual


class ValidationFailedError(DispatchError):
    """An argument violated a declared parameter rule."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        display_name: str,
        reason: str,
        *,
        violations: list[dict[str, Any]] | None = None,
    ) -> None:
        detail: dict[str, Any] = {"parameter": display_name, "reason": reason}
        if violations:
            detail["violations"] = violations
        super().__init__(message, **detail)
        self.display_name = display_name
        self.reason = reason


def error_from_failure(code: str, message: str, detail: dict[str, Any]) -> DispatchError:
    """Rebuild the exception matching a structured failure payload."""
    match code:
        case ErrorCode.NOT_FOUND:
            return MethodNotFoundError(
                detail.get("method_name", ""),
                detail.get("owner", ""),
                detail.get("reason"),
            )
        case ErrorCode.AMBIGUOUS:
            return AmbiguousMethodError(
                detail.get("method_name", ""),
                detail.get("owner", ""),
                detail.get("kind", ""),
            )
        case ErrorCode.ARITY_MISMATCH:
            return ArityMismatchError(
                detail.get("method_name", ""),
                detail.get("expected", 0),
                detail.get("actual", 0),
            )
        case ErrorCode.VALIDATION_FAILED:
            return ValidationFailedError(
                message,
                detail.get("parameter", ""),
                detail.get("reason", ""),
                violations=detail.get("violations"),
            )
    msg = f"Unknown dispatch error code: {code!r}"
    raise ValueError(msg)
