"""Declarative markers attached to methods and parameters.

Markers are data, not behavior. Parameter markers live inside
``typing.Annotated`` metadata; method markers are recorded on the function
object by :func:`marked` without wrapping it, so the method stays directly
callable and introspectable.

Usage::

    class UserService:
        @announce
        def create_user(
            self,
            name: Annotated[str, Required(name="username")],
            email: Annotated[str, Required()],
        ) -> None: ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Annotated, Any, ClassVar, TypeVar, get_args, get_origin, overload

from pydantic import BaseModel

from vetcall.domain.types import MarkerTarget

METHOD_MARKERS_ATTR = "__vetcall_markers__"

F = TypeVar("F", bound=Callable[..., Any])


class Marker(BaseModel):
    """Base class for every marker.

    Subclasses set ``kind`` (the key rules are registered under) and
    ``target`` (method or parameter).
    """

    model_config = {"frozen": True}

    kind: ClassVar[str] = ""
    target: ClassVar[MarkerTarget] = MarkerTarget.PARAMETER


class Required(Marker):
    """Parameter must not be None, and must not be blank when textual.

    Attributes:
        name: Display name used in failure messages instead of the
            declared parameter identifier. Ignored when blank.
        message: Replaces the default failure text when non-blank.
    """

    kind: ClassVar[str] = "required"
    target: ClassVar[MarkerTarget] = MarkerTarget.PARAMETER

    name: str = ""
    message: str = ""


class Announce(Marker):
    """Advisory method marker: log intent before the method executes."""

    kind: ClassVar[str] = "announce"
    target: ClassVar[MarkerTarget] = MarkerTarget.METHOD

    label: str = ""


def marked(*markers: Marker) -> Callable[[F], F]:
    """Attach method-level *markers* to the decorated function.

    Markers accumulate when decorators are stacked; declaration order
    (top to bottom) is preserved.
    """
    for m in markers:
        if m.target is not MarkerTarget.METHOD:
            msg = f"{type(m).__name__} is a {m.target} marker and cannot decorate a method"
            raise TypeError(msg)

    def decorator(func: F) -> F:
        # Markers live on the underlying function of static/class methods.
        holder: Any = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
        if not callable(holder):
            msg = f"@marked expects a function, got {type(func).__name__}"
            raise TypeError(msg)
        existing: tuple[Marker, ...] = getattr(holder, METHOD_MARKERS_ATTR, ())
        setattr(holder, METHOD_MARKERS_ATTR, (*markers, *existing))
        return func

    return decorator


@overload
def announce(func: F) -> F: ...


@overload
def announce(*, label: str = "") -> Callable[[F], F]: ...


def announce(func: Any = None, *, label: str = "") -> Any:
    """Shorthand for ``@marked(Announce(label=...))``; usable bare or called."""
    decorator = marked(Announce(label=label))
    if func is None:
        return decorator
    return decorator(func)


def get_method_markers(func: object) -> tuple[Marker, ...]:
    """Return the method-level markers recorded on *func* (possibly empty).

    A ``staticmethod`` or ``classmethod`` is read through to its function.
    """
    if isinstance(func, (staticmethod, classmethod)):
        func = func.__func__
    markers = getattr(func, METHOD_MARKERS_ATTR, ())
    return tuple(markers)


def extract_parameter_markers(annotation: object) -> tuple[Marker, ...]:
    """Return markers found in the ``Annotated`` metadata of *annotation*.

    Non-marker metadata is ignored. Nested ``Annotated`` forms are
    flattened by ``typing`` itself, so a single level is inspected.
    """
    if get_origin(annotation) is not Annotated:
        return ()
    _base, *metadata = get_args(annotation)
    return tuple(_iter_parameter_markers(metadata))


def _iter_parameter_markers(metadata: Iterable[object]) -> Iterable[Marker]:
    for item in metadata:
        if isinstance(item, Marker) and item.target is MarkerTarget.PARAMETER:
            yield item
