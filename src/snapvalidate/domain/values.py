"""Value shapes the rule engine dispatches on.

Two closed sets of shapes:

- *Comparable* values for ``min``/``max``: text and sequences compare by
  length, numbers by magnitude.
- *Rule outcomes* returned by custom validators: ``bool``, a message
  string, or a Result-shaped object. Anything else counts as a pass.
"""

from __future__ import annotations

import math
from typing import Any

from snapvalidate.domain.result import Result

type RuleOutcome = bool | str | Result | None

NOT_COMPARABLE_MESSAGE = "Value must be a string, array, or number"
NOT_NUMERIC_MESSAGE = "Value must be a number"


def is_empty(value: Any) -> bool:
    """Absent values: ``None`` and the empty string."""
    return value is None or value == ""


def is_number(value: Any) -> bool:
    """Real numbers, excluding ``bool``."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """Array-like values: lists and tuples."""
    return isinstance(value, (list, tuple))


def measure(value: Any) -> float | None:
    """Return the comparable size of *value*, or None if it has no size.

    Examples:
        >>> measure("abc")
        3
        >>> measure([1, 2])
        2
        >>> measure(7.5)
        7.5
        >>> measure({"a": 1}) is None
        True
    """
    if isinstance(value, str) or is_sequence(value):
        return len(value)
    if is_number(value):
        return value
    return None


def to_number(value: Any) -> float | None:
    """Coerce *value* to a finite number, or None when it is not numeric.

    Numbers pass through; strings are parsed after stripping whitespace.
    """
    if is_number(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def is_result_like(value: Any) -> bool:
    """Structural check for objects shaped like a Result."""
    return hasattr(value, "valid") and hasattr(value, "errors")


def normalize_outcome(outcome: Any, message: str) -> Result:
    """Convert a custom validator's return value into a Result.

    ``True``/``False`` pass or fail with *message*; a string fails with
    that string (falling back to *message* when blank); a Result passes
    through unchanged; anything else passes.
    """
    if isinstance(outcome, bool):
        return Result.passed() if outcome else Result.failed(message)
    if isinstance(outcome, str):
        return Result.failed(outcome or message)
    if isinstance(outcome, Result):
        return outcome
    if is_result_like(outcome):
        return Result(valid=bool(outcome.valid), errors=[str(e) for e in outcome.errors])
    return Result.passed()
