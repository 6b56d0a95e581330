"""Validation rules — one per marker kind, registered in RULE_REGISTRY.

A rule has two capabilities:

- ``check(marker, value)``: returns a reason when *value* violates the
  marker, or None when it passes.
- ``describe(marker, display_name, reason)``: renders a human-readable
  failure message.

Built-in kinds are reserved; additional rules are added through
:func:`register_rule` (directly or from a plugin's ``register_rules`` hook)
without touching the dispatch engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from vetcall.domain.markers import Marker, Required
from vetcall.domain.types import ReasonKind


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of evaluating one parameter."""

    passed: bool
    display_name: str | None = None
    reason: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls) -> ValidationOutcome:
        return cls(passed=True)

    @classmethod
    def failed(cls, display_name: str, reason: str, message: str) -> ValidationOutcome:
        return cls(passed=False, display_name=display_name, reason=reason, message=message)


@runtime_checkable
class Rule(Protocol):
    """Capability set every rule provides."""

    def check(self, marker: Any, value: Any) -> str | None: ...

    def describe(self, marker: Any, display_name: str, reason: str) -> str: ...


def resolve_display_name(marker: Marker, default: str) -> str:
    """Use the marker's non-blank ``name`` override, else *default*."""
    override = getattr(marker, "name", "")
    if isinstance(override, str) and override.strip():
        return override
    return default


class RequiredRule:
    """Rejects None, and textual values that are empty after trimming."""

    def check(self, marker: Required, value: Any) -> str | None:
        if value is None:
            return ReasonKind.NULL_VALUE
        if isinstance(value, str) and not value.strip():
            return ReasonKind.BLANK_VALUE
        return None

    def describe(self, marker: Required, display_name: str, reason: str) -> str:
        if marker.message.strip():
            return marker.message
        if reason == ReasonKind.NULL_VALUE:
            return f'Parameter "{display_name}" cannot be null.'
        return f'Parameter "{display_name}" cannot be empty.'


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

RULE_REGISTRY: dict[str, Rule] = {}


def _builtin_rule_map() -> dict[str, Rule]:
    return {Required.kind: RequiredRule()}


def get_rule(kind: str) -> Rule | None:
    """Return the rule registered for marker *kind*, or None."""
    return RULE_REGISTRY.get(kind)


def register_rule(kind: str, rule: Rule) -> None:
    """Register *rule* for marker *kind*.

    Raises:
        ValueError: If *kind* is empty, built-in, or already registered
            to a different rule.
        TypeError: If *rule* lacks ``check`` or ``describe``.
    """
    normalized = kind.strip()
    if not normalized:
        msg = "Rule kind must not be empty"
        raise ValueError(msg)

    if not isinstance(rule, Rule):
        msg = f"Rule for {normalized!r} must provide check() and describe()"
        raise TypeError(msg)

    if normalized in _builtin_rule_map():
        msg = f"Rule {normalized!r} conflicts with a built-in registration"
        raise ValueError(msg)

    existing = RULE_REGISTRY.get(normalized)
    if existing is not None and existing is not rule:
        msg = f"Rule {normalized!r} is already registered"
        raise ValueError(msg)

    RULE_REGISTRY[normalized] = rule


def unregister_rule(kind: str) -> None:
    """Remove a non-built-in rule; a missing kind is a no-op."""
    if kind in _builtin_rule_map():
        msg = f"Rule {kind!r} is built-in and cannot be removed"
        raise ValueError(msg)
    RULE_REGISTRY.pop(kind, None)


RULE_REGISTRY.update(_builtin_rule_map())
