"""snap-validate: chainable field validation with ReDoS-guarded patterns."""

from __future__ import annotations

from snapvalidate.domain.errors import (
    InputTooLongError,
    PatternTimeoutError,
    SchemaArgumentError,
    SnapValidateError,
    UnsafePatternError,
)
from snapvalidate.domain.regex_guard import is_pattern_safe, test_async, test_sync
from snapvalidate.domain.result import Result, SchemaResult
from snapvalidate.services import validators
from snapvalidate.services.engine import RuleEngine
from snapvalidate.services.schema import validate, validate_async

__version__ = "0.3.0"

__all__ = [
    "InputTooLongError",
    "PatternTimeoutError",
    "Result",
    "RuleEngine",
    "SchemaArgumentError",
    "SchemaResult",
    "SnapValidateError",
    "UnsafePatternError",
    "__version__",
    "is_pattern_safe",
    "test_async",
    "test_sync",
    "validate",
    "validate_async",
    "validators",
]
