"""Command: dispatch one method on a freshly constructed object."""

from __future__ import annotations

import importlib
import json
from typing import TYPE_CHECKING, Any

import click

from vetcall.commands._base import VetcallCommand

if TYPE_CHECKING:
    from vetcall.commands._context import AppContext


def decode_argument(raw: str) -> Any:
    """JSON-decode *raw* when possible (``null`` -> None); otherwise keep the text."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def load_target_class(spec: str) -> type:
    """Resolve ``module.path:ClassName`` to a class."""
    module_name, sep, class_name = spec.partition(":")
    if not sep or not module_name or not class_name:
        raise click.BadParameter(
            f"expected MODULE:CLASS, got {spec!r}", param_hint="'TARGET'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(
            f"cannot import module {module_name!r}: {exc}", param_hint="'TARGET'"
        ) from exc

    obj = module
    for part in class_name.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            raise click.BadParameter(
                f"{module_name!r} has no attribute {class_name!r}", param_hint="'TARGET'"
            )
    if not isinstance(obj, type):
        raise click.BadParameter(f"{spec!r} is not a class", param_hint="'TARGET'")
    return obj


@click.command(
    cls=VetcallCommand,
    examples="""\
  vetcall call vetcall.samples:UserService create_user Jane jane@example.com
  vetcall call vetcall.samples:UserService create_user null jane@example.com
  vetcall call vetcall.samples:NamedUserService create_user Jane '""'
  vetcall --json call vetcall.samples:GreetingService annotated_method
  vetcall --collect-all call vetcall.samples:UserService create_user null ' '""",
)
@click.argument("target")
@click.argument("method")
@click.argument("args", nargs=-1)
@click.pass_obj
def call(app: AppContext, target: str, method: str, args: tuple[str, ...]) -> None:
    """Dispatch METHOD on a new TARGET instance (MODULE:CLASS) with ARGS.

    Each argument is decoded as JSON when it parses (so ``null`` is None and
    ``42`` is an integer) and passed as a plain string otherwise.
    """
    cls = load_target_class(target)
    try:
        instance = cls()
    except TypeError as exc:
        raise click.ClickException(f"Cannot construct {target} without arguments: {exc}") from exc

    arguments = [decode_argument(a) for a in args]
    app.emit(app.engine.dispatch(instance, method, arguments))
