"""Metadata introspection — resolve a method by name and describe it.

Resolution walks the target type's MRO and reads the class namespace
directly, so a name maps to exactly one attribute. Names that resolve to
multi-implementation descriptors (``functools.singledispatchmethod``) are
refused with :class:`AmbiguousMethodError` instead of picking one.

Parameter markers come from ``typing.Annotated`` metadata, read with
``typing.get_type_hints(include_extras=True)``. Method markers come from
:func:`vetcall.domain.markers.marked`.

Descriptors are derived from immutable class metadata, so they are safe to
memoize per ``(type, method_name)`` in a :class:`DescriptorCache`. The cache
holds its types weakly, so dynamically created classes are not pinned.
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
import typing
import weakref
from collections.abc import Callable
from typing import Any

from vetcall.domain.descriptors import MethodDescriptor, ParameterDescriptor
from vetcall.domain.markers import extract_parameter_markers, get_method_markers
from vetcall.errors import AmbiguousMethodError, MethodNotFoundError

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

_OVERLOADED_DESCRIPTORS: tuple[type, ...] = (functools.singledispatchmethod,)


class DescriptorCache:
    """Write-once-per-key descriptor cache, weakly keyed on the owner type.

    Reads are lock-free dict lookups; population on a miss happens under a
    lock with a second lookup, so concurrent callers never build the same
    descriptor twice. Entries for a class disappear once the class is
    garbage collected.
    """

    def __init__(self) -> None:
        self._entries: weakref.WeakKeyDictionary[type, dict[str, MethodDescriptor]] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    def get_or_create(
        self,
        owner: type,
        method_name: str,
        factory: Callable[[], MethodDescriptor],
    ) -> MethodDescriptor:
        cached = self._entries.get(owner, {}).get(method_name)
        if cached is not None:
            return cached
        with self._lock:
            per_type = self._entries.setdefault(owner, {})
            cached = per_type.get(method_name)
            if cached is None:
                cached = factory()
                per_type[method_name] = cached
            return cached

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return sum(len(per_type) for per_type in list(self._entries.values()))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        owner, method_name = key
        return method_name in self._entries.get(owner, {})


class MetadataIntrospector:
    """Derives MethodDescriptors from a target's live type metadata.

    Args:
        allow_private: Permit names starting with ``_``.
        cache: Optional shared descriptor cache.
    """

    def __init__(
        self,
        *,
        allow_private: bool = False,
        cache: DescriptorCache | None = None,
    ) -> None:
        self._allow_private = allow_private
        self._cache = cache

    @property
    def cache(self) -> DescriptorCache | None:
        return self._cache

    def resolve_method(self, target: object, method_name: str) -> MethodDescriptor:
        """Resolve *method_name* on ``type(target)``.

        Raises:
            MethodNotFoundError: No dispatchable method with that name.
            AmbiguousMethodError: The name maps to an overloaded descriptor.
        """
        owner = type(target)
        if not method_name or (method_name.startswith("_") and not self._allow_private):
            raise MethodNotFoundError(method_name, owner.__qualname__, "not a public method")

        if self._cache is None:
            return self._build(owner, method_name)
        return self._cache.get_or_create(
            owner,
            method_name,
            lambda: self._build(owner, method_name),
        )

    def bind(self, target: object, method_name: str) -> Callable[..., Any]:
        """Bind the class attribute that :meth:`resolve_method` described.

        Instance attributes shadowing the name are bypassed, so the callable
        returned is always the one whose markers gated the call.
        """
        owner = type(target)
        raw = _lookup_attribute(owner, method_name)
        if raw is None:
            raise MethodNotFoundError(method_name, owner.__qualname__)
        return raw.__get__(target, owner)

    def method_names(self, target: object) -> list[str]:
        """Dispatchable method names on ``type(target)``.

        Ordered by class-body declaration, most derived class first;
        ``object`` itself contributes nothing.
        """
        names: list[str] = []
        for klass in type(target).__mro__[:-1]:
            for name, raw in klass.__dict__.items():
                if name in names or (name.startswith("_") and not self._allow_private):
                    continue
                if name.startswith("__"):
                    continue
                func, _bound = _unwrap(raw)
                if func is not None:
                    names.append(name)
        return names

    @staticmethod
    def describe_parameters(descriptor: MethodDescriptor) -> tuple[ParameterDescriptor, ...]:
        """Return the descriptor's parameters in declaration order."""
        return descriptor.parameters

    # ------------------------------------------------------------------
    # Descriptor construction
    # ------------------------------------------------------------------

    def _build(self, owner: type, method_name: str) -> MethodDescriptor:
        raw = _lookup_attribute(owner, method_name)
        if raw is None:
            raise MethodNotFoundError(method_name, owner.__qualname__)

        if isinstance(raw, _OVERLOADED_DESCRIPTORS):
            raise AmbiguousMethodError(method_name, owner.__qualname__, type(raw).__name__)

        func, bound_first = _unwrap(raw)
        if func is None:
            raise MethodNotFoundError(method_name, owner.__qualname__, "not a method")

        parameters = _describe_signature(func, method_name, owner, skip_first=bound_first)
        descriptor = MethodDescriptor(
            name=method_name,
            owner=owner.__qualname__,
            parameters=parameters,
            markers=get_method_markers(func),
        )
        logger.debug(
            "Described %s.%s: %d parameter(s), %d method marker(s)",
            owner.__qualname__,
            method_name,
            descriptor.arity,
            len(descriptor.markers),
        )
        return descriptor


def _lookup_attribute(owner: type, name: str) -> Any:
    """Return the raw class-namespace attribute for *name* along the MRO."""
    for klass in owner.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return None


def _unwrap(raw: Any) -> tuple[Callable[..., Any] | None, bool]:
    """Return ``(function, first_param_is_bound)`` for a class attribute."""
    if isinstance(raw, staticmethod):
        func = raw.__func__
        return (func if inspect.isfunction(func) else None), False
    if isinstance(raw, classmethod):
        func = raw.__func__
        return (func if inspect.isfunction(func) else None), True
    if inspect.isfunction(raw):
        return raw, True
    return None, False


def _resolve_hints(func: Callable[..., Any], owner: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError):
        logger.warning(
            "Could not resolve annotations of %s.%s; parameter markers ignored",
            owner.__qualname__,
            func.__name__,
            exc_info=True,
        )
        return {}


def _describe_signature(
    func: Callable[..., Any],
    method_name: str,
    owner: type,
    *,
    skip_first: bool,
) -> tuple[ParameterDescriptor, ...]:
    signature = inspect.signature(func)
    hints = _resolve_hints(func, owner)

    params = list(signature.parameters.values())
    if skip_first and params:
        params = params[1:]

    descriptors: list[ParameterDescriptor] = []
    for index, param in enumerate(params):
        if param.kind not in _POSITIONAL_KINDS:
            raise MethodNotFoundError(
                method_name,
                owner.__qualname__,
                f"parameter {param.name!r} is not positional",
            )
        annotation = hints.get(param.name, param.annotation)
        descriptors.append(
            ParameterDescriptor(
                index=index,
                name=param.name,
                markers=extract_parameter_markers(annotation),
            )
        )
    return tuple(descriptors)
