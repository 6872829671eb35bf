"""Phone number normalization."""

import re
from decimal import Decimal, InvalidOperation

DOMESTIC_COUNTRY_CODE = "91"


def normalize_phone(phone: str | None) -> str:
    """Map a raw phone string to its canonical international form.

    Non-digits are stripped. Ten remaining digits are treated as a domestic
    number and get the country code prefixed; any other length is kept as
    the digits alone.

    Examples:
        "9876543210" -> "919876543210"
        "+91 98765 43210" -> "919876543210"
        "12345" -> "12345"
    """
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"{DOMESTIC_COUNTRY_CODE}{digits}"
    return digits


def parse_spreadsheet_phone(value: str | None) -> str:
    """Normalize a phone number read from a spreadsheet export.

    Spreadsheets often turn long numbers into scientific notation
    ("9.87654321E+9"); those are expanded back to their digits first.
    Values that cannot be recovered yield an empty string.
    """
    if not value:
        return ""
    cleaned = str(value).replace('"', "").strip()
    if "E+" in cleaned.upper():
        try:
            cleaned = str(int(Decimal(cleaned)))
        except (InvalidOperation, ValueError, OverflowError):
            return ""
    return normalize_phone(cleaned)
