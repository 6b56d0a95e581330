"""Rich renderers for DispatchResult.

Each renderer writes to a Rich Console backed by StringIO; the public
functions return the rendered text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from vetcall.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from vetcall.services.result import DispatchResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: DispatchResult, *, verbose: bool = False) -> str:
    """Render a DispatchResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        _render_success(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: DispatchResult) -> str:
    """Minimal output for ``--quiet``: the returned value, or the error line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.returned is None:
        return ""
    return str(result.returned)


# ── Helpers ───────────────────────────────────────────────────────────


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="vc.key")
    console.print(k, Text(repr(value) if key == "returned" else str(value)), sep="")


def _render_success(result: DispatchResult, console: Console, *, verbose: bool) -> None:
    console.print(Text("OK", style="vc.ok"), Text(f"  {result.op}", style="vc.op"), sep="")
    _field(console, "returned", result.returned)
    if verbose:
        _render_meta(console, result)


def _render_error(result: DispatchResult, console: Console, *, verbose: bool) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="vc.error"),
        Text(f"  {result.op}", style="vc.op"),
        Text(" — "),
        Text(msg),
        sep="",
    )
    if err is None:
        return
    console.print(Text("  code: ", style="vc.key"), Text(err.code, style="vc.code"), sep="")

    violations = err.detail.get("violations")
    if violations:
        console.print(_violations_table(violations))
    if verbose and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if k != "violations":
                console.print(Text(f"    {k}: {v}"))


def _violations_table(violations: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Parameter", style="vc.param")
    table.add_column("Reason")
    table.add_column("Message")
    for item in violations:
        table.add_row(
            str(item.get("parameter", "")),
            str(item.get("reason", "")),
            str(item.get("message", "")),
        )
    return table


def _render_meta(console: Console, result: DispatchResult) -> None:
    """Print meta block including the telemetry span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)
