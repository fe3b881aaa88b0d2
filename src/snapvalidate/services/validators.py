"""Prebuilt field validators.

Each factory takes the raw value and returns a configured
:class:`RuleEngine`, so it can be used directly as a schema entry::

    validate({"email": email, "zip": lambda v: zip_code(v, "ca")}, data)

The exact patterns live in :mod:`snapvalidate.domain.formats`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from snapvalidate.domain.formats import (
    ALPHANUMERIC_PATTERN,
    CARD_DIGITS_PATTERN,
    DIGIT_PATTERN,
    EMAIL_PATTERN,
    LOWERCASE_PATTERN,
    NUMERIC_PATTERN,
    SPECIAL_CHAR_PATTERN,
    UPPERCASE_PATTERN,
    URL_PATTERN,
    PasswordPolicy,
    luhn_check,
    phone_pattern,
    strip_whitespace,
    zip_pattern,
)
from snapvalidate.domain.result import Result
from snapvalidate.domain.values import is_empty
from snapvalidate.services.engine import RuleEngine


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def email(value: Any) -> RuleEngine:
    """Email address; surrounding whitespace and case are normalized first."""
    return (
        RuleEngine(value)
        .transform(_normalize_email)
        .required("Email is required")
        .pattern(EMAIL_PATTERN, "Invalid email format")
    )


def phone(value: Any, fmt: str = "us") -> RuleEngine:
    """Phone number in ``us``, ``international`` or ``simple`` layout."""
    return (
        RuleEngine(value)
        .required("Phone number is required")
        .pattern(phone_pattern(fmt), "Invalid phone number format")
    )


def credit_card(value: Any) -> RuleEngine:
    """Card number: 13-19 digits (spaces ignored) passing the Luhn checksum."""
    engine = RuleEngine(value).required("Credit card number is required")

    def check_card() -> Result:
        if is_empty(engine.value):
            return Result.passed()
        digits = strip_whitespace(str(engine.value))
        if CARD_DIGITS_PATTERN.match(digits) is None:
            return Result.failed("Credit card must be 13-19 digits")
        if not luhn_check(digits):
            return Result.failed("Invalid credit card number")
        return Result.passed()

    return engine.add_rule(check_card)


def url(value: Any) -> RuleEngine:
    return (
        RuleEngine(value)
        .required("URL is required")
        .pattern(URL_PATTERN, "Invalid URL format")
    )


def password(value: Any, policy: PasswordPolicy | None = None, **overrides: Any) -> RuleEngine:
    """Password checked against *policy*, with keyword *overrides* applied on top.

    Example::

        password(pw, min_length=12, require_special_chars=True)
    """
    base = policy or PasswordPolicy()
    rules = PasswordPolicy(**{**base.model_dump(), **overrides}) if overrides else base

    engine = (
        RuleEngine(value)
        .required("Password is required")
        .min(rules.min_length, f"Password must be at least {rules.min_length} characters")
    )
    if rules.require_uppercase:
        engine.pattern(UPPERCASE_PATTERN, "Password must contain at least one uppercase letter")
    if rules.require_lowercase:
        engine.pattern(LOWERCASE_PATTERN, "Password must contain at least one lowercase letter")
    if rules.require_numbers:
        engine.pattern(DIGIT_PATTERN, "Password must contain at least one number")
    if rules.require_special_chars:
        engine.pattern(
            SPECIAL_CHAR_PATTERN, "Password must contain at least one special character"
        )
    return engine


def alphanumeric(value: Any) -> RuleEngine:
    return (
        RuleEngine(value)
        .required("This field is required")
        .pattern(ALPHANUMERIC_PATTERN, "Only letters and numbers are allowed")
    )


def numeric(value: Any) -> RuleEngine:
    return (
        RuleEngine(value)
        .required("This field is required")
        .pattern(NUMERIC_PATTERN, "Only numbers are allowed")
    )


def zip_code(value: Any, country: str = "us") -> RuleEngine:
    """Postal code for ``us``, ``ca`` or ``uk``; unknown countries use ``us``."""
    return (
        RuleEngine(value)
        .required("Zip code is required")
        .pattern(zip_pattern(country), "Invalid zip code format")
    )


PREBUILT: dict[str, Callable[..., RuleEngine]] = {
    "email": email,
    "phone": phone,
    "credit-card": credit_card,
    "url": url,
    "password": password,
    "alphanumeric": alphanumeric,
    "numeric": numeric,
    "zip-code": zip_code,
}
