"""Outcome and failure classification enums.

These enums name the terminal states of a dispatch and the reasons a
parameter rule can fail.
"""

from __future__ import annotations

from enum import StrEnum


class ReasonKind(StrEnum):
    """Why a parameter rule rejected its argument."""

    NULL_VALUE = "null_value"
    BLANK_VALUE = "blank_value"


class ErrorCode(StrEnum):
    """Structured failure codes carried by a failed DispatchResult."""

    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    ARITY_MISMATCH = "ARITY_MISMATCH"
    VALIDATION_FAILED = "VALIDATION_FAILED"


class MarkerTarget(StrEnum):
    """Where a marker may be attached."""

    METHOD = "method"
    PARAMETER = "parameter"
