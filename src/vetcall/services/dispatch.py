"""DispatchEngine — resolve, gate, and conditionally invoke a method by name.

Per call, strictly in order:

1. Resolve the method on the target's type (``NOT_FOUND`` / ``AMBIGUOUS``).
2. Check the argument count (``ARITY_MISMATCH``).
3. Run ``pre_invoke`` hooks for each method-level marker.
4. Gate each argument through its parameter's rules, left to right,
   stopping at the first failure (``VALIDATION_FAILED``).
5. Invoke the method with the original arguments.

INVARIANT: Hook failures are warnings, never errors.
INVARIANT: Exceptions raised by the target method propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from vetcall.domain.descriptors import MethodDescriptor
from vetcall.errors import ArityMismatchError, DispatchError, ValidationFailedError
from vetcall.plugins.manager import PluginManager
from vetcall.services.evaluator import GateReport, RuleEvaluator
from vetcall.services.introspect import DescriptorCache, MetadataIntrospector
from vetcall.services.result import DispatchFailure, DispatchResult
from vetcall.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from vetcall.config.settings import VetcallSettings

logger = logging.getLogger(__name__)


class DispatchEngine:
    """Generic, metadata-driven method dispatcher.

    Usage::

        engine = DispatchEngine()
        result = engine.dispatch(UserService(), "create_user", [None, "a@b.c"])
        if not result.ok:
            print(result.error.message)
    """

    def __init__(
        self,
        *,
        introspector: MetadataIntrospector | None = None,
        evaluator: RuleEvaluator | None = None,
        plugin_manager: PluginManager | None = None,
        collect_all: bool = False,
    ) -> None:
        self._introspector = introspector or MetadataIntrospector(cache=DescriptorCache())
        self._evaluator = evaluator or RuleEvaluator()
        self._pm = plugin_manager or PluginManager.with_builtins()
        self._collect_all = collect_all

    @classmethod
    def from_settings(
        cls,
        settings: VetcallSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> DispatchEngine:
        """Build an engine from the ``[dispatch]`` and ``[plugins]`` sections."""
        cfg = settings.dispatch
        pm = plugin_manager or PluginManager.with_builtins()
        if settings.plugins.enabled and not pm.is_loaded:
            pm.discover_and_load()
        return cls(
            introspector=MetadataIntrospector(
                allow_private=cfg.allow_private,
                cache=DescriptorCache() if cfg.cache_descriptors else None,
            ),
            plugin_manager=pm,
            collect_all=cfg.collect_all,
        )

    @property
    def introspector(self) -> MetadataIntrospector:
        return self._introspector

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def dispatch(
        self,
        target: object,
        method_name: str,
        arguments: Sequence[Any] = (),
    ) -> DispatchResult:
        """Dispatch *method_name* on *target* with positional *arguments*."""
        args = tuple(arguments)
        warnings: list[str] = []

        with trace_span("resolve"):
            try:
                method = self._introspector.resolve_method(target, method_name)
            except DispatchError as exc:
                return self._failure(method_name, exc, warnings)

        if len(args) != method.arity:
            exc = ArityMismatchError(method_name, method.arity, len(args))
            return self._failure(method_name, exc, warnings)

        with trace_span("pre_hooks") as span:
            self._run_pre_hooks(target, method, args, warnings)
            if span:
                span.annotate("markers", len(method.markers))

        with trace_span("validate") as span:
            report = self._evaluator.gate(
                method.parameters,
                args,
                collect_all=self._collect_all,
            )
            warnings.extend(report.warnings)
            if span:
                span.annotate("failures", len(report.failures))
        if not report.passed:
            return self._failure(method_name, _validation_error(report), warnings)

        logger.debug("Invoking %s.%s", method.owner, method.name)
        with trace_span("invoke"):
            returned = self._introspector.bind(target, method_name)(*args)

        return DispatchResult(
            ok=True,
            op=method_name,
            data={"returned": returned},
            warnings=warnings,
        )

    def invoke(self, target: object, method_name: str, *arguments: Any) -> Any:
        """Exception-style dispatch: return the method's value or raise.

        Raises:
            DispatchError: A subclass matching the failure code.
        """
        result = self.dispatch(target, method_name, arguments)
        result.raise_for_error()
        return result.returned

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_pre_hooks(
        self,
        target: object,
        method: MethodDescriptor,
        args: tuple[Any, ...],
        warnings: list[str],
    ) -> None:
        for marker in method.markers:
            try:
                self._pm.hook.pre_invoke(
                    target=target,
                    method=method,
                    marker=marker,
                    arguments=args,
                )
            except Exception:
                logger.debug(
                    "Pre-invocation hook failed for %s on %s",
                    marker.kind,
                    method.name,
                    exc_info=True,
                )
                warnings.append(f"Pre-invocation hook failed for {marker.kind!r}")

    @staticmethod
    def _failure(op: str, exc: DispatchError, warnings: list[str]) -> DispatchResult:
        logger.debug("Dispatch of %s failed: %s", op, exc.message)
        return DispatchResult(
            ok=False,
            op=op,
            warnings=warnings,
            error=DispatchFailure(code=exc.code, message=exc.message, detail=exc.detail),
        )


def _validation_error(report: GateReport) -> ValidationFailedError:
    """Primary failure is the first by declaration order."""
    first = report.failures[0]
    violations = None
    if len(report.failures) > 1:
        violations = [
            {"parameter": f.display_name, "reason": f.reason, "message": f.message}
            for f in report.failures
        ]
    return ValidationFailedError(
        first.message or "",
        first.display_name or "",
        first.reason or "",
        violations=violations,
    )


_default_engine: DispatchEngine | None = None


def default_engine() -> DispatchEngine:
    """Process-wide engine with built-in plugins and a descriptor cache."""
    global _default_engine
    if _default_engine is None:
        _default_engine = DispatchEngine()
    return _default_engine


def dispatch(target: object, method_name: str, *arguments: Any) -> DispatchResult:
    """Dispatch through :func:`default_engine`."""
    return default_engine().dispatch(target, method_name, arguments)


__all__ = ["DispatchEngine", "default_engine", "dispatch"]
