"""Click base classes shared by every snapvalidate command.

``SnapCommand`` adds an eager ``--examples`` flag and turns a
:class:`~snapvalidate.domain.errors.SnapValidateError` escaping the command
into a ``click.ClickException`` (message on stderr, exit 1) instead of a
traceback. ``SnapGroup`` uses ``SnapCommand`` for its subcommands.
"""

from __future__ import annotations

from typing import Any

import click

from snapvalidate.domain.errors import SnapValidateError


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(examples)
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class SnapCommand(click.Command):
    """Command with ``--examples`` and library-error translation."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except SnapValidateError as exc:
            raise click.ClickException(str(exc)) from exc


class SnapGroup(click.Group):
    """Root group; subcommands default to :class:`SnapCommand`."""

    command_class = SnapCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))
