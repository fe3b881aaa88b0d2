"""Rich console plumbing for human-readable validation reports.

Reports are rendered into an in-memory Console and returned as ``str`` so
the command layer decides where they go (stdout for valid, stderr for
invalid). Color codes are only emitted when Rich detects a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

SNAP_THEME = Theme(
    {
        "snap.valid": "bold green",
        "snap.invalid": "bold red",
        "snap.op": "bold cyan",
        "snap.field": "bold",
        "snap.key": "dim",
        "snap.error": "red",
    }
)

REPORT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A theme-aware Console writing into a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=SNAP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or REPORT_WIDTH,
    )


def get_output(console: Console) -> str:
    """Everything *console* has rendered so far."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def status_label(valid: bool) -> Text:
    """``VALID`` in green or ``INVALID`` in red."""
    if valid:
        return Text("VALID", style="snap.valid")
    return Text("INVALID", style="snap.invalid")
