"""vetcall — metadata-driven method dispatch with declarative argument checks.

Mark parameters with :class:`Required` inside ``typing.Annotated`` and
methods with :func:`announce`, then call through :func:`dispatch` or a
:class:`DispatchEngine`. Arguments are checked before the method runs.
"""

from __future__ import annotations

from vetcall.domain.markers import Announce, Marker, Required, announce, marked
from vetcall.domain.rules import register_rule, unregister_rule
from vetcall.errors import (
    AmbiguousMethodError,
    ArityMismatchError,
    DispatchError,
    MethodNotFoundError,
    ValidationFailedError,
)
from vetcall.services.dispatch import DispatchEngine, dispatch
from vetcall.services.result import DispatchFailure, DispatchResult

__version__ = "0.1.0"

__all__ = [
    "AmbiguousMethodError",
    "Announce",
    "ArityMismatchError",
    "DispatchEngine",
    "DispatchError",
    "DispatchFailure",
    "DispatchResult",
    "Marker",
    "MethodNotFoundError",
    "Required",
    "ValidationFailedError",
    "__version__",
    "announce",
    "dispatch",
    "marked",
    "register_rule",
    "unregister_rule",
]
