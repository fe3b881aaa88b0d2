"""Shared pytest fixtures and test helpers for snapvalidate tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp directory with no config overrides.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` so config
    discovery never picks up a stray ``snapvalidate.toml``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SNAPVALIDATE_CONFIG", raising=False)
    for var in ("SNAPVALIDATE_JSON_OUTPUT", "SNAPVALIDATE_VERBOSE", "SNAPVALIDATE_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)


def write_config(root: Path, body: str) -> Path:
    """Write a ``snapvalidate.toml`` under *root* and return its path."""
    path = root / "snapvalidate.toml"
    path.write_text(body, encoding="utf-8")
    return path
