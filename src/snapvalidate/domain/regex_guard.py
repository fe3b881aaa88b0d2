"""Regex safety guard: static ReDoS heuristics plus bounded matching.

Three entry points:

- :func:`is_pattern_safe` classifies a pattern by its *shape*. The source
  text is normalized (escapes and character classes become a single
  literal, group prefixes such as ``(?:`` become ``(``) and a fixed battery
  of heuristics looks for nested quantifiers, overlapping quantified
  alternations, repeated wildcards, stacked quantifiers and back-to-back
  quantified alternations. It is conservative (some safe patterns are
  rejected) and incomplete (it cannot prove linear-time behaviour).
- :func:`test_sync` bounds cost with a length cap only.
- :func:`test_async` adds the safety check and a timeout race.

INVARIANT: the timeout in :func:`test_async` bounds how long a caller waits
for a result under cooperative scheduling. It does NOT abort a running
match: ``re`` executes the search as one non-preemptible step on the event
loop thread, so the timer can only fire between scheduling turns. Real
cancellation needs a separate process and is out of scope; the length cap
is the primary defence.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from snapvalidate.domain.errors import InputTooLongError, PatternTimeoutError, UnsafePatternError

logger = logging.getLogger(__name__)

type PatternLike = str | re.Pattern[str]

DEFAULT_MAX_LENGTH = 10_000
DEFAULT_TIMEOUT_MS = 1000

# --- Normalization ---

_ESCAPE_RE = re.compile(r"\\.", re.DOTALL)
_CHAR_CLASS_RE = re.compile(r"\[\^?\]?[^\]]*\]")
_INLINE_FLAGS_RE = re.compile(r"\(\?[aiLmsux]+\)")
_BACKREF_RE = re.compile(r"\(\?P=\w+\)")
_GROUP_PREFIX_RE = re.compile(r"\(\?(?:[:=!>]|<[=!]|P?<\w+>|[aiLmsux-]+:)")

# Repetition that can follow a group: ``+ * ?`` or a ``{n}``/``{n,m}`` count.
_GROUP_QUANTIFIER_RE = re.compile(r"[+*?]|\{(\d+)(,\d*)?\}")
_STACKED_QUANTIFIERS_RE = re.compile(r"[+*?]{2,}")
_WILDCARD_QUANTIFIER_RE = re.compile(r"\.[*+]")
_INNER_QUANTIFIER_RE = re.compile(r"[+*?]")

_LITERAL = "x"


def pattern_source(pattern: PatternLike) -> str:
    """The source text of *pattern*."""
    if isinstance(pattern, re.Pattern):
        return pattern.pattern
    return pattern


def compile_pattern(pattern: PatternLike) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def normalize_source(source: str) -> str:
    """Reduce *source* to its structural skeleton.

    Examples:
        >>> normalize_source(r"^[^\\s@]+@[^\\s@]+\\.[^\\s@]+$")
        '^x+@x+xx+$'
        >>> normalize_source(r"(?:ab|cd)+")
        '(ab|cd)+'
    """
    text = _ESCAPE_RE.sub(_LITERAL, source)
    text = _CHAR_CLASS_RE.sub(_LITERAL, text)
    text = _INLINE_FLAGS_RE.sub("", text)
    text = _BACKREF_RE.sub(_LITERAL, text)
    return _GROUP_PREFIX_RE.sub("(", text)


# --- Group scanning ---


@dataclass(frozen=True)
class _Group:
    body: str
    quantified: bool
    start: int
    # Index just past the closing paren and any quantifier.
    end: int


def _repetition(skeleton: str, index: int) -> tuple[bool, int]:
    """Whether a quantifier at *index* repeats its group, and where it ends.

    ``{0}`` and ``{1}`` do not repeat.
    """
    match = _GROUP_QUANTIFIER_RE.match(skeleton, index)
    if match is None:
        return False, index
    count, ranged = match.groups()
    repeats = count is None or ranged is not None or int(count) > 1
    return repeats, match.end()


def _scan_groups(skeleton: str) -> list[_Group]:
    """Every parenthesized group, innermost first, with its repetition flag."""
    groups: list[_Group] = []
    stack: list[int] = []
    for index, char in enumerate(skeleton):
        if char == "(":
            stack.append(index)
        elif char == ")" and stack:
            start = stack.pop()
            quantified, end = _repetition(skeleton, index + 1)
            groups.append(_Group(skeleton[start + 1 : index], quantified, start, end))
    return groups


def _branches(body: str) -> list[str]:
    """Split *body* on top-level ``|``."""
    branches: list[str] = []
    current: list[str] = []
    depth = 0
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "|" and depth == 0:
            branches.append("".join(current))
            current = []
        else:
            current.append(char)
    branches.append("".join(current))
    return branches


def _is_alternation(group: _Group) -> bool:
    return len(_branches(group.body)) > 1


def _branches_overlap(branches: list[str]) -> bool:
    """Equal branches, an empty branch, or two branches that can start alike."""
    if len(set(branches)) < len(branches) or any(not b for b in branches):
        return True
    leads = [b[0] for b in branches]
    if "." in leads:
        return True
    return len(set(leads)) < len(leads)


# --- Heuristic battery ---


def _nested_quantifier(skeleton: str, groups: list[_Group]) -> bool:
    return any(g.quantified and _INNER_QUANTIFIER_RE.search(g.body) for g in groups)


def _overlapping_alternation(skeleton: str, groups: list[_Group]) -> bool:
    return any(
        g.quantified and _is_alternation(g) and _branches_overlap(_branches(g.body))
        for g in groups
    )


def _repeated_wildcard(skeleton: str, groups: list[_Group]) -> bool:
    return any(g.quantified and _WILDCARD_QUANTIFIER_RE.search(g.body) for g in groups)


def _stacked_quantifiers(skeleton: str, groups: list[_Group]) -> bool:
    return _STACKED_QUANTIFIERS_RE.search(skeleton) is not None


def _chained_alternations(skeleton: str, groups: list[_Group]) -> bool:
    """Two quantified alternation groups back to back, e.g. ``(a|b)+(c|d)*``."""
    ends = {g.end for g in groups if g.quantified and _is_alternation(g)}
    return any(g.quantified and _is_alternation(g) and g.start in ends for g in groups)


HEURISTICS: dict[str, Callable[[str, list[_Group]], bool]] = {
    "nested-quantifier": _nested_quantifier,
    "overlapping-alternation": _overlapping_alternation,
    "repeated-wildcard": _repeated_wildcard,
    "stacked-quantifiers": _stacked_quantifiers,
    "chained-alternations": _chained_alternations,
}


def explain_pattern(pattern: PatternLike) -> list[str]:
    """Names of the heuristics *pattern* trips, in battery order."""
    skeleton = normalize_source(pattern_source(pattern))
    groups = _scan_groups(skeleton)
    return [name for name, check in HEURISTICS.items() if check(skeleton, groups)]


def is_pattern_safe(pattern: PatternLike) -> bool:
    """True unless any heuristic flags *pattern* as a backtracking risk."""
    return not explain_pattern(pattern)


# --- Bounded matching ---


def _check_length(text: str, max_length: int) -> None:
    if len(text) > max_length:
        raise InputTooLongError(len(text), max_length)


def test_sync(pattern: PatternLike, text: str, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """Search *text* for *pattern*, refusing inputs longer than *max_length*.

    No timeout: the length cap is the only cost bound.

    Raises:
        InputTooLongError: ``len(text) > max_length``.
    """
    _check_length(text, max_length)
    return compile_pattern(pattern).search(text) is not None


async def test_async(
    pattern: PatternLike,
    text: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> bool:
    """Search *text* for *pattern*, racing the match against a timer.

    The timer bounds result latency only; see the module docstring.

    Raises:
        InputTooLongError: ``len(text) > max_length``.
        UnsafePatternError: the pattern fails :func:`is_pattern_safe`.
        PatternTimeoutError: no result within *timeout_ms*.
    """
    _check_length(text, max_length)
    if not is_pattern_safe(pattern):
        raise UnsafePatternError(pattern_source(pattern))
    compiled = compile_pattern(pattern)

    async def _match() -> bool:
        # Yield once so the timer is armed before the search holds the loop.
        await asyncio.sleep(0)
        return compiled.search(text) is not None

    try:
        return await asyncio.wait_for(_match(), timeout=timeout_ms / 1000)
    except TimeoutError as exc:
        logger.debug("Pattern %r timed out after %dms", compiled.pattern, timeout_ms)
        raise PatternTimeoutError(timeout_ms) from exc
