"""Config file discovery and loading.

Settings come from one of two files, searched directory by directory from
the working directory up to the filesystem root:

- ``snapvalidate.toml``: the whole file is the settings table.
- ``pyproject.toml``: only its ``[tool.snapvalidate]`` table; a pyproject
  without that table is skipped and the search continues upward.

``SNAPVALIDATE_CONFIG`` (or ``--config``) names a file directly and
disables the search.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "snapvalidate.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "SNAPVALIDATE_CONFIG"
TOOL_TABLE = "snapvalidate"


def _parse(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table = data.get("tool", {}).get(TOOL_TABLE)
    return table if isinstance(table, dict) else None


def _has_tool_table(pyproject: Path) -> bool:
    # A broken pyproject belongs to some other tool; it is not ours to report.
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return False
    return _tool_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Locate the settings file for *start* (default: cwd), or None.

    ``snapvalidate.toml`` wins over a ``pyproject.toml`` in the same
    directory. The env var override is returned only if it names a file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
    return None


def read_config_table(path: Path) -> dict[str, Any]:
    """Return the settings table stored in *path*.

    Raises:
        click.ClickException: *path* is not valid TOML.
    """
    data = _parse(path)
    if path.name == PYPROJECT_FILENAME:
        return _tool_table(data) or {}
    return data
