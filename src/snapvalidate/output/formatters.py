"""Rich/JSON output helpers.

The CLI renders Results for humans (Rich text, colors) or machines
(--json). Human output is plain text when no terminal is attached.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.text import Text

from snapvalidate.output.console import create_console, get_output, status_label

if TYPE_CHECKING:
    from rich.console import Console

    from snapvalidate.domain.result import Result, SchemaResult


class OutputSettings(BaseModel):
    """Rendering flags passed from the CLI to the formatter layer."""

    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False


def _status_line(console: Console, op: str, valid: bool) -> None:
    console.print(status_label(valid), Text(op, style="snap.op"), sep="  ")


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="snap.key"), Text(str(value)), sep="")


def _errors(console: Console, errors: list[str], indent: int = 2) -> None:
    prefix = " " * indent
    for error in errors:
        console.print(Text(f"{prefix}- {error}", style="snap.error"))


def format_result(
    result: Result,
    *,
    op: str,
    data: dict[str, Any] | None = None,
    settings: OutputSettings | None = None,
) -> str:
    """Format a single Result for display.

    Args:
        result: The result to format.
        op: Name of the operation that produced it (e.g. ``"check"``).
        data: Extra key/value context shown alongside the outcome.
        settings: Output mode; human-readable when omitted.
    """
    settings = settings or OutputSettings()
    data = data or {}
    if settings.json_output:
        payload = {"op": op, "valid": result.valid, "errors": result.errors, "data": data}
        return _json.dumps(payload, indent=2, default=str)

    console = create_console()
    _status_line(console, op, result.valid)
    for key, value in data.items():
        _field(console, key, value)
    _errors(console, result.errors)
    return get_output(console).rstrip("\n")


def format_schema_result(
    report: SchemaResult,
    *,
    op: str,
    settings: OutputSettings | None = None,
) -> str:
    """Format a SchemaResult; verbose human output also lists passing fields."""
    settings = settings or OutputSettings()
    if settings.json_output:
        payload = {
            "op": op,
            "valid": report.valid,
            "errors": report.errors_by_field(),
            "fields": list(report.per_field),
        }
        return _json.dumps(payload, indent=2)

    console = create_console()
    _status_line(console, op, report.valid)
    for field, result in report.per_field.items():
        if result.valid:
            if settings.verbose:
                ok = Text(" ok", style="snap.valid")
                console.print(Text(f"  {field}", style="snap.field"), ok, sep="")
            continue
        console.print(Text(f"  {field}", style="snap.field"))
        _errors(console, result.errors, indent=4)
    return get_output(console).rstrip("\n")
