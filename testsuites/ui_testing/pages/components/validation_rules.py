"""
Validation rules for the quiz form.

Each field has two error messages: one for an empty value, one for a value
with the wrong shape. The rules are fixed and never read from the page.
`error_pattern` combines both messages into one case-insensitive alternation,
so a check accepts whichever of the two the page chose to show.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple


ZIP = "zip"
EMAIL = "email"
PHONE = "phone"

# Steps are revealed in this order; the last one finalizes the flow.
FIELD_ORDER: Tuple[str, ...] = (ZIP, EMAIL, PHONE)


@dataclass(frozen=True)
class ValidationRule:
    """Messages and required shape for one form field."""
    field: str
    empty_message: str
    invalid_format_message: str
    pattern: Pattern[str]

    @property
    def messages(self) -> Tuple[str, str]:
        return self.empty_message, self.invalid_format_message

    @property
    def error_pattern(self) -> Pattern[str]:
        return re.compile(
            "|".join(re.escape(message) for message in self.messages),
            re.IGNORECASE,
        )

    def accepts(self, value: str) -> bool:
        return bool(self.pattern.fullmatch(value or ""))

    def expected_message(self, value: str) -> Optional[str]:
        """Message the field should show for `value`; None when it is valid."""
        if not value:
            return self.empty_message
        if self.accepts(value):
            return None
        return self.invalid_format_message

    def matches_error(self, text: str) -> bool:
        return bool(self.error_pattern.search(text or ""))


VALIDATION_RULES: Dict[str, ValidationRule] = {
    ZIP: ValidationRule(
        field=ZIP,
        empty_message="Enter your ZIP code.",
        invalid_format_message="Wrong ZIP code.",
        pattern=re.compile(r"[0-9]{5}"),
    ),
    EMAIL: ValidationRule(
        field=EMAIL,
        empty_message="Enter your email address.",
        invalid_format_message="Wrong email.",
        pattern=re.compile(
            r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}"
        ),
    ),
    PHONE: ValidationRule(
        field=PHONE,
        empty_message="Enter your phone number.",
        invalid_format_message="Wrong phone number.",
        pattern=re.compile(r"[0-9]{10}"),
    ),
}


def rule_for(field: str) -> ValidationRule:
    try:
        return VALIDATION_RULES[field]
    except KeyError:
        raise ValueError(
            f"Unknown form field: {field!r}. Expected one of {FIELD_ORDER}"
        ) from None


def next_field(field: str) -> Optional[str]:
    """Field revealed after `field` is accepted; None after the last one."""
    position = FIELD_ORDER.index(rule_for(field).field)
    if position + 1 < len(FIELD_ORDER):
        return FIELD_ORDER[position + 1]
    return None


def is_last_field(field: str) -> bool:
    return next_field(field) is None


__all__ = [
    "ZIP",
    "EMAIL",
    "PHONE",
    "FIELD_ORDER",
    "ValidationRule",
    "VALIDATION_RULES",
    "rule_for",
    "next_field",
    "is_last_field",
]
