"""Subcommands of the ``snapvalidate`` CLI.

Each command lives in its own module exporting a click command of the same
name. Modules are imported inside :func:`register_commands` so importing the
package stays cheap.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click

COMMAND_MODULES = ("check", "pattern", "record")


def register_commands(cli: click.Group) -> None:
    """Attach every command in :data:`COMMAND_MODULES` to *cli*."""
    for name in COMMAND_MODULES:
        module = import_module(f"{__name__}.{name}")
        cli.add_command(getattr(module, name))
