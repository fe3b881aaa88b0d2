"""SnapSettings: CLI flags, env vars and the config file merged into one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags and ``--timeout-ms``/``--max-length`` overrides
  2. Env vars: ``SNAPVALIDATE_*``, nested with ``__``
     (``SNAPVALIDATE_REGEX__TIMEOUT_MS=250``)
  3. Config table: ``snapvalidate.toml`` or ``[tool.snapvalidate]``
  4. Code defaults: the section models

Sections merge key by key, so ``--timeout-ms`` on the command line keeps
``max_input_length`` from the config file.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from snapvalidate.config.discovery import find_config, read_config_table
from snapvalidate.config.models import RegexConfig
from snapvalidate.domain.formats import PasswordPolicy


class ConfigFileSource(PydanticBaseSettingsSource):
    """Settings table loaded from the discovered (or named) config file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self.path = path
        self._table: dict[str, Any] = read_config_table(path) if path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._table.get(field_name), field_name, field_name in self._table

    def __call__(self) -> dict[str, Any]:
        return dict(self._table)


# Config path handed from from_cli() to settings_customise_sources().
_pending = threading.local()


class SnapSettings(BaseSettings):
    """Frozen runtime settings for the snapvalidate CLI.

    Attributes:
        config_path: The file the config table came from, or None.
        regex: Time and length budget applied to every pattern rule.
        password: Policy used by ``check password`` and ``record``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SNAPVALIDATE_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    regex: RegexConfig = Field(default_factory=RegexConfig)
    password: PasswordPolicy = Field(default_factory=PasswordPolicy)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        path = getattr(_pending, "path", None)
        return init_settings, env_settings, ConfigFileSource(settings_cls, path)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        timeout_ms: int | None = None,
        max_length: int | None = None,
        **cli_flags: Any,
    ) -> SnapSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist; otherwise the config file is
        discovered from *start* (default: cwd). *timeout_ms* and
        *max_length* override single keys of the ``[regex]`` section.

        Raises:
            click.ClickException: *config_path* does not name a file, or
                the config file is not valid TOML.
        """
        if config_path:
            path: Path | None = Path(config_path)
            if not path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            path = find_config(start)

        regex: dict[str, int] = {}
        if timeout_ms is not None:
            regex["timeout_ms"] = timeout_ms
        if max_length is not None:
            regex["max_input_length"] = max_length
        if regex:
            cli_flags["regex"] = regex

        _pending.path = path
        try:
            return cls(config_path=path, **cli_flags)
        finally:
            _pending.path = None
