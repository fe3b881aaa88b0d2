"""Command: classify a regex and optionally run a bounded match."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, Any

import click

from snapvalidate.commands._base import SnapCommand
from snapvalidate.domain import regex_guard
from snapvalidate.domain.errors import InputTooLongError, PatternTimeoutError
from snapvalidate.domain.result import Result

if TYPE_CHECKING:
    from snapvalidate.commands._context import AppContext


@click.command(
    cls=SnapCommand,
    examples="""\
  snapvalidate pattern '^[a-z0-9]+$'
  snapvalidate pattern '(a+)+$'
  snapvalidate pattern '^\\d{5}$' 12345
  snapvalidate pattern --ignore-case '^abc' ABCDEF""",
)
@click.argument("source")
@click.argument("text", required=False)
@click.option("-i", "--ignore-case", is_flag=True, help="Compile with re.IGNORECASE.")
@click.pass_obj
def pattern(app: AppContext, source: str, text: str | None, ignore_case: bool) -> None:
    """Check SOURCE against the ReDoS heuristics; match TEXT when given."""
    try:
        compiled = re.compile(source, re.IGNORECASE if ignore_case else 0)
    except re.error as exc:
        app.emit(Result.failed(f"Invalid regex: {exc}"), op="pattern", data={"pattern": source})
        return

    findings = regex_guard.explain_pattern(compiled)
    data: dict[str, Any] = {"pattern": source, "safe": not findings}
    if findings:
        data["heuristics"] = ", ".join(findings)
        app.emit(Result.failed("Pattern is potentially unsafe"), op="pattern", data=data)
        return

    result = Result.passed()
    if text is not None:
        regex = app.settings.regex
        try:
            data["matched"] = asyncio.run(
                regex_guard.test_async(
                    compiled, text, regex.timeout_ms, max_length=regex.max_input_length
                )
            )
        except (InputTooLongError, PatternTimeoutError) as exc:
            result.add_error(str(exc))
    app.emit(result, op="pattern", data=data)
