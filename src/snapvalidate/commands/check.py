"""Command: run a prebuilt validator against a single value."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from snapvalidate.commands._base import SnapCommand
from snapvalidate.domain.formats import Country, PhoneFormat
from snapvalidate.services.validators import PREBUILT

if TYPE_CHECKING:
    from snapvalidate.commands._context import AppContext
    from snapvalidate.services.engine import RuleEngine


def build_validator(app: AppContext, kind: str, value: Any, **options: Any) -> RuleEngine:
    """Build the *kind* validator for *value* with CLI options and config applied.

    Options that do not apply to *kind* are ignored.
    """
    factory = PREBUILT[kind]
    if kind == "phone":
        engine = factory(value, options.get("fmt") or PhoneFormat.US)
    elif kind == "zip-code":
        engine = factory(value, options.get("country") or Country.US)
    elif kind == "password":
        overrides = {}
        if options.get("min_length") is not None:
            overrides["min_length"] = options["min_length"]
        if options.get("require_special"):
            overrides["require_special_chars"] = True
        engine = factory(value, app.settings.password, **overrides)
    else:
        engine = factory(value)
    return app.configure_engine(engine)


@click.command(
    cls=SnapCommand,
    examples="""\
  snapvalidate check email john@example.com
  snapvalidate check phone "+14155552671" --format international
  snapvalidate check zip-code "K1A 0B1" --country ca
  snapvalidate check password 'S3cure!pass' --min-length 10 --require-special
  snapvalidate --json check credit-card 4111111111111111""",
)
@click.argument("kind", type=click.Choice(sorted(PREBUILT)))
@click.argument("value")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in PhoneFormat]),
    default=None,
    help="Phone number layout (phone only).",
)
@click.option(
    "--country",
    type=click.Choice([c.value for c in Country]),
    default=None,
    help="Postal code country (zip-code only).",
)
@click.option("--min-length", type=int, default=None, help="Minimum length (password only).")
@click.option(
    "--require-special", is_flag=True, help="Require a special character (password only)."
)
@click.pass_obj
def check(
    app: AppContext,
    kind: str,
    value: str,
    fmt: str | None,
    country: str | None,
    min_length: int | None,
    require_special: bool,
) -> None:
    """Validate VALUE with the prebuilt KIND validator."""
    engine = build_validator(
        app,
        kind,
        value,
        fmt=fmt,
        country=country,
        min_length=min_length,
        require_special=require_special,
    )
    result = engine.validate()
    app.emit(result, op="check", data={"kind": kind, "value": engine.value})
