"""Subcommand modules for vetcall.

Provides register_commands() which uses deferred imports to keep
``vetcall --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from vetcall.commands.call import call
    from vetcall.commands.demo import demo

    cli.add_command(call)
    cli.add_command(demo)
