"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Centralizes result emission: valid results go to
stdout, invalid ones to stderr with exit code 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from snapvalidate.output.formatters import OutputSettings, format_result, format_schema_result

if TYPE_CHECKING:
    from snapvalidate.config.settings import SnapSettings
    from snapvalidate.domain.result import Result, SchemaResult
    from snapvalidate.services.engine import RuleEngine


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: SnapSettings) -> None:
        self.settings = settings

        from snapvalidate.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )

    def configure_engine(self, engine: RuleEngine) -> RuleEngine:
        """Apply the configured regex budget to *engine*."""
        regex = self.settings.regex
        return engine.set_regex_timeout(regex.timeout_ms).set_max_input_length(
            regex.max_input_length
        )

    def _write(self, output: str, *, valid: bool) -> None:
        if valid:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def emit(self, result: Result, *, op: str, data: dict[str, Any] | None = None) -> None:
        """Format and output a Result with correct exit semantics."""
        output = format_result(result, op=op, data=data, settings=self.output_settings)
        self._write(output, valid=result.valid)

    def emit_schema(self, report: SchemaResult, *, op: str) -> None:
        output = format_schema_result(report, op=op, settings=self.output_settings)
        self._write(output, valid=report.valid)
