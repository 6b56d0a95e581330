"""Rule evaluation — apply registered rules to (parameter, argument) pairs."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from vetcall.domain.descriptors import ParameterDescriptor
from vetcall.domain.rules import (
    RULE_REGISTRY,
    Rule,
    ValidationOutcome,
    resolve_display_name,
)

logger = logging.getLogger(__name__)


@dataclass
class GateReport:
    """Failures and warnings from gating one argument list."""

    failures: list[ValidationOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


class RuleEvaluator:
    """Evaluates parameter markers against argument values.

    Args:
        registry: Marker kind -> rule mapping. Defaults to the live
            :data:`~vetcall.domain.rules.RULE_REGISTRY`, so rules registered
            after construction are picked up.
    """

    def __init__(self, registry: Mapping[str, Rule] | None = None) -> None:
        self._registry = RULE_REGISTRY if registry is None else registry

    def evaluate(self, parameter: ParameterDescriptor, value: Any) -> ValidationOutcome:
        """Evaluate every marker on *parameter*; the first failing rule wins.

        A parameter without markers, or whose markers have no registered
        rule, passes.
        """
        for marker in parameter.markers:
            rule = self._registry.get(marker.kind)
            if rule is None:
                continue
            reason = rule.check(marker, value)
            if reason is None:
                continue
            display_name = resolve_display_name(marker, parameter.name)
            message = rule.describe(marker, display_name, reason)
            return ValidationOutcome.failed(display_name, str(reason), message)
        return ValidationOutcome.ok()

    def unknown_kinds(self, parameter: ParameterDescriptor) -> list[str]:
        """Marker kinds on *parameter* with no registered rule."""
        return [m.kind for m in parameter.markers if m.kind not in self._registry]

    def gate(
        self,
        parameters: Sequence[ParameterDescriptor],
        arguments: Sequence[Any],
        *,
        collect_all: bool = False,
    ) -> GateReport:
        """Evaluate parameters left to right against positional *arguments*.

        Stops at the first failure unless *collect_all* is set.
        Callers must have checked that the lengths match.
        """
        report = GateReport()
        for parameter, value in zip(parameters, arguments, strict=True):
            for kind in self.unknown_kinds(parameter):
                report.warnings.append(
                    f"Unknown marker kind {kind!r} on parameter {parameter.name!r}; not validated"
                )
            outcome = self.evaluate(parameter, value)
            if outcome.passed:
                continue
            logger.debug(
                "Parameter %s failed: %s (%s)",
                parameter.name,
                outcome.reason,
                outcome.display_name,
            )
            report.failures.append(outcome)
            if not collect_all:
                break
        return report
