"""Command: validate a JSON record field-by-field with prebuilt validators."""

from __future__ import annotations

import asyncio
import json
from functools import partial
from typing import IO, TYPE_CHECKING, Any

import click

from snapvalidate.commands._base import SnapCommand
from snapvalidate.commands.check import build_validator
from snapvalidate.services.schema import validate_async
from snapvalidate.services.validators import PREBUILT

if TYPE_CHECKING:
    from snapvalidate.commands._context import AppContext


def _parse_field(raw: str) -> tuple[str, str]:
    name, sep, kind = raw.partition("=")
    if not sep or not name or kind not in PREBUILT:
        choices = ", ".join(sorted(PREBUILT))
        msg = f"Expected NAME=KIND with KIND one of: {choices} (got {raw!r})"
        raise click.BadParameter(msg, param_hint="--field")
    return name, kind


@click.command(
    cls=SnapCommand,
    examples="""\
  snapvalidate record user.json -f email=email -f zip=zip-code
  echo '{"site": "ftp://x.org"}' | snapvalidate --json record - -f site=url""",
)
@click.argument("source", type=click.File("r"))
@click.option(
    "-f",
    "--field",
    "fields",
    multiple=True,
    required=True,
    help="Field to validate, as NAME=KIND. Repeatable.",
)
@click.pass_obj
def record(app: AppContext, source: IO[str], fields: tuple[str, ...]) -> None:
    """Validate the JSON object in SOURCE ('-' for stdin)."""
    try:
        data: Any = json.load(source)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON: {exc}"
        raise click.ClickException(msg) from exc

    schema = {
        name: partial(build_validator, app, kind)
        for name, kind in (_parse_field(raw) for raw in fields)
    }
    report = asyncio.run(validate_async(schema, data))
    app.emit_schema(report, op="record")
