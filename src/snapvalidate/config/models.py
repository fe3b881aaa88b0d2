"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, snapvalidate.toml only contains
overrides. An empty file (or none at all) is a complete configuration.
The [password] section reuses :class:`~snapvalidate.domain.formats.PasswordPolicy`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from snapvalidate.domain.regex_guard import DEFAULT_MAX_LENGTH, DEFAULT_TIMEOUT_MS


class RegexConfig(BaseModel):
    """[regex] section."""

    model_config = {"frozen": True}

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0)
    max_input_length: int = Field(default=DEFAULT_MAX_LENGTH, ge=1)
