"""Root CLI group for vetcall with global flags and command registration."""

from __future__ import annotations

import click

from vetcall import __version__
from vetcall.commands import register_commands
from vetcall.commands._base import VetcallGroup
from vetcall.commands._context import AppContext
from vetcall.config.settings import VetcallSettings

_CLI_EXAMPLES = """\
  vetcall demo
  vetcall call vetcall.samples:UserService create_user Jane jane@example.com
  vetcall --json call vetcall.samples:UserService create_user null x@y.z
  vetcall -c ./vetcall.toml --collect-all call mypkg.api:Accounts open null ''"""


@click.group(cls=VetcallGroup, invoke_without_command=True, examples=_CLI_EXAMPLES)
@click.version_option(version=__version__, prog_name="vetcall")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--collect-all",
    is_flag=True,
    help="Report every failing parameter instead of stopping at the first.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    collect_all: bool,
) -> None:
    """vetcall — validate arguments from markers, then call the method."""
    settings = VetcallSettings.from_cli(
        config_path=config_path,
        collect_all=collect_all,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
