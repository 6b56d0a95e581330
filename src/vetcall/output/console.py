"""Rich Console factory and theme for vetcall output.

Consoles render into a StringIO buffer so renderers keep a
``render_*() -> str`` contract. Rich disables color codes on its own when
there is no terminal (CliRunner, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

VETCALL_THEME = Theme(
    {
        "vc.ok": "bold green",
        "vc.error": "bold red",
        "vc.warning": "bold yellow",
        "vc.op": "bold cyan",
        "vc.key": "dim",
        "vc.code": "bold magenta",
        "vc.param": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=VETCALL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
