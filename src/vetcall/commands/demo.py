"""Command: replay the reference scenarios against the sample services."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from vetcall.commands._base import VetcallCommand
from vetcall.errors import DispatchError
from vetcall.output.renderers import render_quiet

if TYPE_CHECKING:
    from vetcall.commands._context import AppContext
    from vetcall.services.dispatch import DispatchEngine
    from vetcall.services.result import DispatchResult

SCENARIOS = ("basic", "args", "named")

_VALIDATION_CASES: tuple[tuple[Any, Any], ...] = (
    (None, "hello@email.com"),
    ("Jane", ""),
)


def _discard(_line: str) -> None:
    return None


def run_basic(engine: DispatchEngine, echo: Callable[[str], Any]) -> list[DispatchResult]:
    """Dispatch every public method of GreetingService with no arguments."""
    from vetcall.samples import GreetingService

    target = GreetingService()
    results: list[DispatchResult] = []
    for name in engine.introspector.method_names(target):
        result = engine.dispatch(target, name)
        if result.ok:
            echo(str(result.returned))
        results.append(result)
    return results


def run_validation(
    engine: DispatchEngine,
    echo: Callable[[str], Any],
    target: object,
) -> list[DispatchResult]:
    """Run the null and blank cases through ``create_user``."""
    results: list[DispatchResult] = []
    for arguments in _VALIDATION_CASES:
        result = engine.dispatch(target, "create_user", arguments)
        try:
            echo(str(result.raise_for_error().returned))
        except DispatchError as exc:
            echo(f"Validation failed: {exc.message}")
        results.append(result)
    return results


def run_scenario(
    name: str, engine: DispatchEngine, echo: Callable[[str], Any]
) -> list[DispatchResult]:
    from vetcall.samples import NamedUserService, UserService

    match name:
        case "basic":
            return run_basic(engine, echo)
        case "args":
            return run_validation(engine, echo, UserService())
        case "named":
            return run_validation(engine, echo, NamedUserService())
        case _:
            raise click.BadParameter(f"unknown scenario {name!r}", param_hint="'SCENARIO'")


@click.command(
    cls=VetcallCommand,
    examples="""\
  vetcall demo
  vetcall demo basic
  vetcall demo named
  vetcall --json demo args""",
)
@click.argument(
    "scenario",
    type=click.Choice([*SCENARIOS, "all"]),
    default="all",
)
@click.pass_obj
def demo(app: AppContext, scenario: str) -> None:
    """Run a demonstration SCENARIO against the bundled sample services."""
    from vetcall.plugins.manager import PluginManager

    json_output = app.settings.json_output
    quiet = app.settings.quiet and not json_output
    lines: list[str] = []
    echo: Callable[[str], Any] = click.echo
    if json_output:
        echo = lines.append
    elif quiet:
        echo = _discard
    engine = app.build_engine(PluginManager.with_builtins(echo=echo))

    selected = SCENARIOS if scenario == "all" else (scenario,)
    payload: dict[str, list[dict[str, Any]]] = {}
    for name in selected:
        if not (json_output or quiet):
            click.echo(f"== {name} ==")
        results = run_scenario(name, engine, echo)
        if quiet:
            for result in results:
                if line := render_quiet(result):
                    click.echo(line)
        payload[name] = [r.model_dump(mode="python") for r in results]

    if json_output:
        click.echo(json.dumps({"scenarios": payload, "lines": lines}, indent=2, default=str))
