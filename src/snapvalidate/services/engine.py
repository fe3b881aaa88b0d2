"""RuleEngine: chainable rule builder and two-phase executor.

An engine owns one subject value and two ordered rule lists. Builder
methods append closures and return the engine, so chains read naturally::

    RuleEngine(age).required().between(18, 120).validate()

Rules read ``self.value`` when they run, not when they are registered, so
a ``transform`` rule changes what every later rule sees.

INVARIANT: ``validate_async()`` runs async rules only when the sync phase
passed. Within each phase every rule runs, in registration order, and a
rule that raises contributes a message instead of aborting the run.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Self

from snapvalidate.domain import regex_guard
from snapvalidate.domain.errors import InputTooLongError, PatternTimeoutError, UnsafePatternError
from snapvalidate.domain.regex_guard import DEFAULT_MAX_LENGTH, DEFAULT_TIMEOUT_MS, PatternLike
from snapvalidate.domain.result import Result
from snapvalidate.domain.values import (
    NOT_COMPARABLE_MESSAGE,
    NOT_NUMERIC_MESSAGE,
    is_empty,
    is_sequence,
    measure,
    normalize_outcome,
    to_number,
)

if TYPE_CHECKING:
    from snapvalidate.domain.result import SchemaResult
    from snapvalidate.services.schema import Schema

logger = logging.getLogger(__name__)

type SyncRule = Callable[[], Result]
type AsyncRule = Callable[[], Awaitable[Result]]
type EngineSource = RuleEngine | Callable[[Any], RuleEngine]

NOT_ARRAY_MESSAGE = "Value must be an array"
NOT_OBJECT_MESSAGE = "Value must be an object"
PATTERN_TIMEOUT_MESSAGE = "Pattern validation timed out: pattern too complex"


def resolve_engine(source: EngineSource, value: Any) -> RuleEngine:
    """Return *source* itself, or the engine its factory builds for *value*."""
    if isinstance(source, RuleEngine):
        return source
    if not callable(source):
        msg = f"Expected a RuleEngine or factory, got {type(source).__name__}"
        raise TypeError(msg)
    engine = source(value)
    if not isinstance(engine, RuleEngine):
        msg = f"Validator factory returned {type(engine).__name__}, expected RuleEngine"
        raise TypeError(msg)
    return engine


def _index_entry(index: int, result: Result) -> str:
    return f"[{index}]: {', '.join(result.errors) or 'invalid'}"


def _combine(message: str, details: list[str]) -> Result:
    if not details:
        return Result.passed()
    return Result.failed(f"{message}: {'; '.join(details)}")


def _collapse(message: str, report: SchemaResult) -> Result:
    if report.valid:
        return Result.passed()
    details = [error for errors in report.errors_by_field().values() for error in errors]
    return Result.failed(f"{message}: {'; '.join(details)}" if details else message)


class RuleEngine:
    """Mutable builder over one subject value.

    Attributes:
        value: The current subject. Reassigned by ``transform`` rules.
        rules: Sync rules, in registration order.
        async_rules: Async rules, in registration order.
        is_optional: When set, rules pass on ``None`` / ``""``.
        field_name: Prefix for error messages that do not mention it.
        regex_timeout_ms: Timeout for ``pattern_async`` matches.
        regex_max_length: Input length cap for pattern rules.
    """

    def __init__(
        self,
        value: Any = None,
        *,
        regex_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        regex_max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self.value = value
        self.rules: list[SyncRule] = []
        self.async_rules: list[AsyncRule] = []
        self.is_optional = False
        self.field_name: str | None = None
        self.regex_timeout_ms = regex_timeout_ms
        self.regex_max_length = regex_max_length

    def __repr__(self) -> str:
        return (
            f"RuleEngine(value={self.value!r}, rules={len(self.rules)}, "
            f"async_rules={len(self.async_rules)})"
        )

    @property
    def has_async_rules(self) -> bool:
        return bool(self.async_rules)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def optional(self) -> Self:
        """Let every rule pass when the value is ``None`` or ``""``."""
        self.is_optional = True
        return self

    def set_field_name(self, name: str) -> Self:
        self.field_name = name
        return self

    def set_regex_timeout(self, timeout_ms: int) -> Self:
        self.regex_timeout_ms = timeout_ms
        return self

    def set_max_input_length(self, max_length: int) -> Self:
        self.regex_max_length = max_length
        return self

    # ------------------------------------------------------------------
    # Registration primitives
    # ------------------------------------------------------------------

    def _skips(self) -> bool:
        return self.is_optional and is_empty(self.value)

    def _guarded(self, check: SyncRule) -> SyncRule:
        def rule() -> Result:
            if self._skips():
                return Result.passed()
            return check()

        return rule

    def add_rule(self, check: SyncRule, *, guarded: bool = True) -> Self:
        """Append a sync rule. Guarded rules honour ``optional()``."""
        self.rules.append(self._guarded(check) if guarded else check)
        return self

    def add_async_rule(self, check: AsyncRule) -> Self:
        """Append an async rule that honours ``optional()``."""

        async def guarded() -> Result:
            if self._skips():
                return Result.passed()
            return await check()

        self.async_rules.append(guarded)
        return self

    # ------------------------------------------------------------------
    # Presence and size
    # ------------------------------------------------------------------

    def required(self, message: str = "This field is required") -> Self:
        def check() -> Result:
            return Result.failed(message) if is_empty(self.value) else Result.passed()

        return self.add_rule(check)

    def _size_rule(self, accept: Callable[[float], bool], message: str) -> Self:
        def check() -> Result:
            if is_empty(self.value):
                return Result.passed()
            size = measure(self.value)
            if size is None:
                return Result.failed(NOT_COMPARABLE_MESSAGE)
            return Result.passed() if accept(size) else Result.failed(message)

        return self.add_rule(check)

    def min(self, limit: float, message: str | None = None) -> Self:
        """Length of text/arrays, or magnitude of numbers, must be >= *limit*."""
        return self._size_rule(lambda size: size >= limit, message or f"Minimum length is {limit}")

    def max(self, limit: float, message: str | None = None) -> Self:
        """Length of text/arrays, or magnitude of numbers, must be <= *limit*."""
        return self._size_rule(lambda size: size <= limit, message or f"Maximum length is {limit}")

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    @staticmethod
    def _checked_pattern(regex: PatternLike) -> PatternLike:
        if not regex_guard.is_pattern_safe(regex):
            raise UnsafePatternError(regex_guard.pattern_source(regex))
        return regex_guard.compile_pattern(regex)

    def _too_long_message(self) -> str:
        return f"Input exceeds maximum length of {self.regex_max_length} characters"

    def pattern(self, regex: PatternLike, message: str = "Invalid format") -> Self:
        """Value (as text) must match *regex*.

        Raises:
            UnsafePatternError: *regex* fails the safety heuristics. Raised
                here, at registration, never during validation.
        """
        compiled = self._checked_pattern(regex)

        def check() -> Result:
            if is_empty(self.value):
                return Result.passed()
            try:
                matched = regex_guard.test_sync(compiled, str(self.value), self.regex_max_length)
            except InputTooLongError:
                return Result.failed(self._too_long_message())
            return Result.passed() if matched else Result.failed(message)

        return self.add_rule(check)

    def pattern_async(self, regex: PatternLike, message: str = "Invalid format") -> Self:
        """Async variant of :meth:`pattern` bounded by ``regex_timeout_ms``."""
        compiled = self._checked_pattern(regex)

        async def check() -> Result:
            if is_empty(self.value):
                return Result.passed()
            try:
                matched = await regex_guard.test_async(
                    compiled,
                    str(self.value),
                    self.regex_timeout_ms,
                    max_length=self.regex_max_length,
                )
            except InputTooLongError:
                return Result.failed(self._too_long_message())
            except PatternTimeoutError:
                return Result.failed(PATTERN_TIMEOUT_MESSAGE)
            return Result.passed() if matched else Result.failed(message)

        return self.add_async_rule(check)

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    def equals(self, expected: Any, message: str | None = None) -> Self:
        text = message or f"Value must equal {expected}"

        def check() -> Result:
            return Result.passed() if self.value == expected else Result.failed(text)

        return self.add_rule(check)

    def one_of(self, values: Iterable[Any], message: str | None = None) -> Self:
        allowed = list(values)
        text = message or f"Value must be one of: {', '.join(str(v) for v in allowed)}"

        def check() -> Result:
            return Result.passed() if self.value in allowed else Result.failed(text)

        return self.add_rule(check)

    def between(self, low: float, high: float, message: str | None = None) -> Self:
        """Value, coerced to a number, must lie in ``[low, high]``."""
        text = message or f"Value must be between {low} and {high}"

        def check() -> Result:
            number = to_number(self.value)
            if number is None:
                return Result.failed(NOT_NUMERIC_MESSAGE)
            return Result.passed() if low <= number <= high else Result.failed(text)

        return self.add_rule(check)

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def transform(self, fn: Callable[[Any], Any], message: str = "Transform failed") -> Self:
        """Replace the value with ``fn(value)`` when the chain runs.

        Not subject to ``optional()``: *fn* also sees empty values.
        """

        def apply() -> Result:
            try:
                self.value = fn(self.value)
            except Exception as exc:
                logger.debug("Transform raised", exc_info=True)
                return Result.failed(f"{message}: {exc}")
            return Result.passed()

        return self.add_rule(apply, guarded=False)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def array(self, message: str = NOT_ARRAY_MESSAGE) -> Self:
        def check() -> Result:
            return Result.passed() if is_sequence(self.value) else Result.failed(message)

        return self.add_rule(check)

    def array_of(self, validator: EngineSource, message: str = "Array validation failed") -> Self:
        """Validate every element; report all failing indexes in one message."""

        def check() -> Result:
            if not is_sequence(self.value):
                return Result.failed(NOT_ARRAY_MESSAGE)
            details: list[str] = []
            for index, item in enumerate(self.value):
                try:
                    outcome = resolve_engine(validator, item).validate()
                except Exception as exc:
                    logger.debug("Element validator setup failed at [%d]", index, exc_info=True)
                    outcome = Result.failed(f"Validation setup error: {exc}")
                if not outcome.valid:
                    details.append(_index_entry(index, outcome))
            return _combine(message, details)

        return self.add_rule(check)

    def array_of_async(
        self, validator: EngineSource, message: str = "Array validation failed"
    ) -> Self:
        """Async variant of :meth:`array_of`; elements run one at a time."""

        async def check() -> Result:
            if not is_sequence(self.value):
                return Result.failed(NOT_ARRAY_MESSAGE)
            details: list[str] = []
            for index, item in enumerate(self.value):
                try:
                    engine = resolve_engine(validator, item)
                except Exception as exc:
                    logger.debug("Element validator setup failed at [%d]", index, exc_info=True)
                    outcome = Result.failed(f"Validation setup error: {exc}")
                else:
                    outcome = await engine.validate_async()
                if not outcome.valid:
                    details.append(_index_entry(index, outcome))
            return _combine(message, details)

        return self.add_async_rule(check)

    def object(self, schema: Schema, message: str = "Object validation failed") -> Self:
        """Validate a mapping value against a nested *schema*."""
        from snapvalidate.services.schema import validate

        def check() -> Result:
            if not isinstance(self.value, Mapping):
                return Result.failed(NOT_OBJECT_MESSAGE)
            return _collapse(message, validate(schema, self.value))

        return self.add_rule(check)

    def object_async(self, schema: Schema, message: str = "Object validation failed") -> Self:
        from snapvalidate.services.schema import validate_async

        async def check() -> Result:
            if not isinstance(self.value, Mapping):
                return Result.failed(NOT_OBJECT_MESSAGE)
            return _collapse(message, await validate_async(schema, self.value))

        return self.add_async_rule(check)

    # ------------------------------------------------------------------
    # Conditional and custom
    # ------------------------------------------------------------------

    def when(self, condition: Any, validator: EngineSource) -> Self:
        """Apply *validator* only when *condition* (value or predicate) holds."""

        def check() -> Result:
            applies = condition(self.value) if callable(condition) else condition
            if not applies:
                return Result.passed()
            return resolve_engine(validator, self.value).validate()

        return self.add_rule(check)

    def custom(
        self, fn: Callable[[Any], Any], message: str = "Custom validation failed"
    ) -> Self:
        """Run *fn* on the value; see :func:`normalize_outcome` for return shapes."""

        def check() -> Result:
            try:
                outcome = fn(self.value)
            except Exception as exc:
                logger.debug("Custom validator raised", exc_info=True)
                return Result.failed(f"Custom validation error: {exc}")
            return normalize_outcome(outcome, message)

        return self.add_rule(check)

    def custom_async(
        self, fn: Callable[[Any], Any], message: str = "Async validation failed"
    ) -> Self:
        """Like :meth:`custom`; *fn* may return an awaitable."""

        async def check() -> Result:
            try:
                outcome = fn(self.value)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except Exception as exc:
                logger.debug("Async custom validator raised", exc_info=True)
                return Result.failed(f"Async validation error: {exc}")
            return normalize_outcome(outcome, message)

        return self.add_async_rule(check)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _label(self, message: str) -> str:
        if self.field_name and self.field_name.lower() not in message.lower():
            return f"{self.field_name}: {message}"
        return message

    def _collect(self, result: Result, outcome: Result) -> None:
        if not outcome.valid:
            labelled = [self._label(error) for error in outcome.errors]
            result.merge(Result(valid=False, errors=labelled))

    def validate(self) -> Result:
        """Run every sync rule and aggregate their errors."""
        result = Result.passed()
        for rule in self.rules:
            try:
                outcome = rule()
            except Exception as exc:
                logger.debug("Rule raised during validation", exc_info=True)
                outcome = Result.failed(f"Validation error: {exc}")
            self._collect(result, outcome)
        return result

    async def validate_async(self) -> Result:
        """Run the sync phase, then (only if it passed) each async rule in turn."""
        result = self.validate()
        if not result.valid:
            return result
        for rule in self.async_rules:
            try:
                outcome = await rule()
            except Exception as exc:
                logger.debug("Async rule raised during validation", exc_info=True)
                outcome = Result.failed(f"Async validation error: {exc}")
            self._collect(result, outcome)
        return result
