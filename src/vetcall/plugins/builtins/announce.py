"""Built-in announce plugin.

Handles the ``Announce`` method marker: before the marked method runs, it
logs which marker fired for which method. An optional *echo* callable
mirrors the line to a console (used by ``vetcall demo``).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from vetcall.domain.markers import Announce
from vetcall.plugins import hookimpl

if TYPE_CHECKING:
    from vetcall.domain.descriptors import MethodDescriptor
    from vetcall.domain.markers import Marker

log = structlog.get_logger(__name__)


def announcement(marker: Announce, method_name: str) -> str:
    label = marker.label.strip() or type(marker).__name__
    return f"Executing {label} before executing the method {method_name}"


class AnnouncePlugin:
    """Logs intent for methods carrying an ``Announce`` marker."""

    def __init__(self, echo: Callable[[str], Any] | None = None) -> None:
        self._echo = echo

    @hookimpl
    def pre_invoke(
        self,
        target: Any,
        method: MethodDescriptor,
        marker: Marker,
        arguments: tuple[Any, ...],
    ) -> None:
        if not isinstance(marker, Announce):
            return
        line = announcement(marker, method.name)
        log.info(
            "hook.announce",
            owner=method.owner,
            method=method.name,
            label=marker.label or None,
            argc=len(arguments),
        )
        if self._echo is not None:
            self._echo(line)
