"""Output mode selection for DispatchResult.

The CLI renders results for humans (Rich) or machines (--json). Return
values from arbitrary target methods may not be JSON-native, so JSON
output falls back to ``str()`` for them.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vetcall.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from vetcall.services.result import DispatchResult


@dataclass(frozen=True)
class OutputSettings:
    """Global output flags relevant to rendering."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_json(result: DispatchResult) -> str:
    return _json.dumps(result.model_dump(mode="python"), indent=2, default=str)


def format_result(result: DispatchResult, *, settings: OutputSettings | None = None) -> str:
    """Format a DispatchResult for display.

    JSON wins over quiet, and quiet wins over verbose.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return format_json(result)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
