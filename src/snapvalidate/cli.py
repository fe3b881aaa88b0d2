"""Root CLI group: global flags, settings construction, command registration."""

from __future__ import annotations

import click

from snapvalidate import __version__
from snapvalidate.commands import register_commands
from snapvalidate.commands._base import SnapGroup
from snapvalidate.commands._context import AppContext
from snapvalidate.config.settings import SnapSettings


@click.group(
    cls=SnapGroup,
    invoke_without_command=True,
    examples="""\
  snapvalidate check email john@example.com
  snapvalidate --json pattern '(a+)+$'
  snapvalidate --timeout-ms 50 pattern '^\\d{5}$' 12345
  snapvalidate -c ./ci.toml record payload.json -f email=email""",
)
@click.version_option(version=__version__, prog_name="snapvalidate")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Show passing fields and debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "--timeout-ms",
    type=click.IntRange(min=0),
    default=None,
    help="Async pattern match budget in milliseconds.",
)
@click.option(
    "--max-length",
    type=click.IntRange(min=1),
    default=None,
    help="Longest input a pattern rule will match against.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    timeout_ms: int | None,
    max_length: int | None,
) -> None:
    """snapvalidate: field validation with ReDoS-guarded patterns."""
    settings = SnapSettings.from_cli(
        config_path=config_path,
        timeout_ms=timeout_ms,
        max_length=max_length,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
