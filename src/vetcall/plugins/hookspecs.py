"""Pluggy hook specifications for vetcall.

One per-call hook runs before a marked method is invoked. One setup-time
hook lets plugins contribute validation rules for new marker kinds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from vetcall.domain.descriptors import MethodDescriptor
    from vetcall.domain.markers import Marker
    from vetcall.domain.rules import Rule

hookspec = pluggy.HookspecMarker("vetcall")


class VetcallHookSpec:
    """Hook specifications for the vetcall plugin system."""

    @hookspec
    def pre_invoke(
        self,
        target: Any,
        method: MethodDescriptor,
        marker: Marker,
        arguments: tuple[Any, ...],
    ) -> None:
        """Called once per method-level marker, before the parameter gate.

        Advisory only: a failing implementation is reported as a warning
        and never prevents invocation.
        """

    @hookspec
    def register_rules(self) -> dict[str, Rule] | None:
        """Return marker kind -> rule mappings to extend RULE_REGISTRY."""
