"""
Quiz form test data.

Values are literals on purpose: they describe the accepted shapes (5-digit
ZIP, local@domain.tld email, 10-digit phone) and the edge cases around them.
"""

from typing import Dict, List

VALID_FORM_DATA: Dict[str, str] = {
    "zip": "12345",
    "email": "john.doe@example.com",
    "phone": "1234567890",
}

INVALID_ZIP_CODES: List[str] = [
    "1234",     # too short
    "123456",   # too long
    "abcd",     # letters
    "1234a",    # mixed
    "12-45",    # punctuation
    "",         # empty
]

INVALID_EMAILS: List[str] = [
    "invalid-email",
    "invalid@",
    "@invalid.com",
    "invalid@.com",
    "invalid@com",
    "",
]

INVALID_PHONE_NUMBERS: List[str] = [
    "123456789",        # 9 digits
    "12345678901",      # 11 digits
    "abcd",
    "123-456-7890",     # dashes
    "(123)456-7890",    # parentheses
    "123 456 7890",     # spaces
    "",
]

VALID_EMAILS: List[str] = [
    "user@example.com",
    "first.last+tag@sub.example.org",
]


def case_id(value: str) -> str:
    """Readable pytest id for a data literal."""
    return value or "empty"
