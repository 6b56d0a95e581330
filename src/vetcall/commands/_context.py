"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Builds the dispatch engine lazily and owns result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from vetcall.config.logging import configure_logging
from vetcall.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from vetcall.config.settings import VetcallSettings
    from vetcall.plugins.manager import PluginManager
    from vetcall.services.dispatch import DispatchEngine
    from vetcall.services.result import DispatchResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The engine is created on first use so ``--help`` and ``--version``
    never load entry-point plugins.
    """

    def __init__(self, settings: VetcallSettings) -> None:
        self.settings = settings
        self._engine: DispatchEngine | None = None

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        if settings.verbose:
            from vetcall.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def engine(self) -> DispatchEngine:
        """The dispatch engine (created lazily on first access)."""
        if self._engine is None:
            self._engine = self.build_engine()
        return self._engine

    def build_engine(self, plugin_manager: PluginManager | None = None) -> DispatchEngine:
        """A fresh engine from settings, optionally with a custom plugin manager."""
        from vetcall.services.dispatch import DispatchEngine

        return DispatchEngine.from_settings(self.settings, plugin_manager=plugin_manager)

    def emit(self, result: DispatchResult) -> None:
        """Format and output a DispatchResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr in human mode.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = self.output_settings
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
