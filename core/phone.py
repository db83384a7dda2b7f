"""
Phone number canonicalization for allow-list comparison.
"""
from typing import Optional

DEFAULT_COUNTRY_CODE = "57"
LOCAL_NUMBER_LENGTH = 10


def digits_only(value: Optional[str]) -> str:
    """Drop every character that is not a decimal digit."""
    if value is None:
        return ""
    return "".join(ch for ch in str(value) if "0" <= ch <= "9")


def normalize_phone(value: Optional[str], country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Map a phone number to its digit-only local form.

    The country code is dropped only when the digit string is longer than a
    local number, so a 10-digit number that happens to start with "57" is
    kept intact. Stripping repeats until neither condition holds, which
    keeps the function idempotent for doubled prefixes.

    Args:
        value: Phone number in any format ("+57 310 123 4567", "3101234567", ...)
        country_code: Prefix to strip from international numbers

    Returns:
        Canonical digits, or "" when the input has none
    """
    digits = digits_only(value)
    if not country_code:
        return digits
    while digits.startswith(country_code) and len(digits) > LOCAL_NUMBER_LENGTH:
        digits = digits[len(country_code):]
    return digits
