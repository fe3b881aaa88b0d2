"""Exception taxonomy for snap-validate.

A rule's negative outcome is never an exception: it becomes a failing
:class:`~snapvalidate.domain.result.Result`. The types below cover the
narrow cases that are raised:

- ``UnsafePatternError``: a rule chain was built with a pattern the
  safety heuristics reject. Raised at registration time.
- ``InputTooLongError`` / ``PatternTimeoutError``: raised inside the
  regex guard and always converted to a message at the rule level.
- ``SchemaArgumentError``: ``validate()`` called with a schema or data
  record that is not a mapping.
"""

from __future__ import annotations


class SnapValidateError(Exception):
    """Base class for all snap-validate exceptions."""


class UnsafePatternError(SnapValidateError, ValueError):
    """A regex was classified as prone to catastrophic backtracking."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Potentially unsafe regex pattern detected: {pattern}")


class InputTooLongError(SnapValidateError, ValueError):
    """Input text exceeds the length cap for pattern matching."""

    def __init__(self, length: int, max_length: int) -> None:
        self.length = length
        self.max_length = max_length
        super().__init__(f"Input length {length} exceeds maximum of {max_length} characters")


class PatternTimeoutError(SnapValidateError, TimeoutError):
    """A pattern match did not produce a result within the time budget."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Regex execution timed out after {timeout_ms}ms")


class SchemaArgumentError(SnapValidateError, TypeError):
    """Schema or data passed to the orchestrator is not a mapping."""
