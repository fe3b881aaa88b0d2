"""Format catalogue for the prebuilt validators.

Patterns are compiled once at import. Every pattern here must pass
:func:`snapvalidate.domain.regex_guard.is_pattern_safe`, otherwise the
prebuilt validator using it would fail at registration.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel


class PhoneFormat(StrEnum):
    """Supported phone number layouts."""

    US = "us"
    INTERNATIONAL = "international"
    SIMPLE = "simple"


class Country(StrEnum):
    """Countries with a postal code pattern."""

    US = "us"
    CA = "ca"
    UK = "uk"


# ``\Z`` does not match before a trailing newline. Digit and letter checks are
# ASCII-only; ``\s`` keeps Unicode whitespace.
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+\Z")
URL_PATTERN = re.compile(r"^(?ai:https?|ftp)://[^\s/$.?#].[^\s]*\Z")
ALPHANUMERIC_PATTERN = re.compile(r"^[a-zA-Z0-9]+\Z")
NUMERIC_PATTERN = re.compile(r"^\d+\Z", re.ASCII)

PHONE_PATTERNS: dict[str, re.Pattern[str]] = {
    PhoneFormat.US: re.compile(
        r"^\+?1?[-.\s]?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})\Z"
    ),
    PhoneFormat.INTERNATIONAL: re.compile(r"^\+[1-9]\d{1,14}\Z", re.ASCII),
    PhoneFormat.SIMPLE: re.compile(r"^\d{10,15}\Z", re.ASCII),
}

ZIP_PATTERNS: dict[str, re.Pattern[str]] = {
    Country.US: re.compile(r"^\d{5}(-\d{4})?\Z", re.ASCII),
    Country.CA: re.compile(r"^[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d\Z", re.ASCII),
    Country.UK: re.compile(r"^[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}\Z", re.IGNORECASE | re.ASCII),
}

UPPERCASE_PATTERN = re.compile(r"[A-Z]")
LOWERCASE_PATTERN = re.compile(r"[a-z]")
DIGIT_PATTERN = re.compile(r"\d", re.ASCII)
SPECIAL_CHAR_PATTERN = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

CARD_DIGITS_PATTERN = re.compile(r"^\d{13,19}\Z", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s")


def phone_pattern(fmt: str) -> re.Pattern[str]:
    """Pattern for *fmt*; unknown formats fall back to ``simple``."""
    return PHONE_PATTERNS.get(fmt.lower(), PHONE_PATTERNS[PhoneFormat.SIMPLE])


def zip_pattern(country: str) -> re.Pattern[str]:
    """Pattern for *country*; unknown countries fall back to ``us``."""
    return ZIP_PATTERNS.get(country.lower(), ZIP_PATTERNS[Country.US])


def strip_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def luhn_check(number: str) -> bool:
    """Validate a digit string with the Luhn checksum.

    Every second digit from the right is doubled; doubled values above 9
    have 9 subtracted. The number is valid when the sum is divisible by 10.

    Examples:
        >>> luhn_check("4111111111111111")
        True
        >>> luhn_check("1234567890123456")
        False
    """
    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


class PasswordPolicy(BaseModel):
    """Character and length requirements for the password validator."""

    model_config = {"frozen": True}

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = False
