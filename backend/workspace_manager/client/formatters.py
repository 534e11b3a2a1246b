"""
Input formatters: raw keystrokes in, canonical display text out.

All of them are pure and idempotent on their own output.
"""

from __future__ import annotations

import datetime
import re

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s")
_NOT_POSTAL = re.compile(r"[^\d-]")

MAX_CARD_DIGITS = 16
MAX_CVV_DIGITS = 4
MAX_POSTAL_CODE_LENGTH = 10


def _digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def format_phone_number(value: str) -> str:
    """"1234567890" -> "(123) 456-7890"; digits past the 10th are dropped."""
    digits = _digits(value)
    if len(digits) <= 3:
        return digits
    if len(digits) <= 7:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:10]}"


def format_card_number(value: str) -> str:
    """Re-chunk into groups of four. Does not truncate; see limit_card_digits."""
    cleaned = _WHITESPACE.sub("", value)
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def limit_card_digits(value: str) -> str:
    """Keep at most 16 digits of a raw card number entry."""
    return _digits(value)[:MAX_CARD_DIGITS]


def format_expiry_date(value: str) -> str:
    """
    Format as MM/YY, clamping the month into 01..12.

    "" -> "", "1" -> "1", "13" -> "12", "1325" -> "12/25".
    """
    digits = _digits(value)[:4]
    if len(digits) < 2:
        return digits

    month = min(max(int(digits[:2]), 1), 12)
    formatted = f"{month:02d}"
    if len(digits) == 2:
        return formatted
    return f"{formatted}/{digits[2:4]}"


def format_postal_code(value: str) -> str:
    return _NOT_POSTAL.sub("", value)[:MAX_POSTAL_CODE_LENGTH]


def format_card_holder(value: str) -> str:
    return value.upper()


def format_cvv(value: str) -> str:
    return _digits(value)[:MAX_CVV_DIGITS]


def mask_card_number(card_number: str) -> str:
    """Display form used in payment lists: "•••• 4242"."""
    return f"•••• {_WHITESPACE.sub('', card_number)[-4:]}"


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."


def _as_datetime(value: str | datetime.datetime) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(value)


def format_date(value: str | datetime.datetime) -> str:
    """"2024-01-15T10:30:00Z" -> "Jan 15, 2024"."""
    dt = _as_datetime(value)
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_datetime(value: str | datetime.datetime) -> str:
    """"2024-01-15T10:30:00Z" -> "Jan 15, 2024, 10:30 AM"."""
    dt = _as_datetime(value)
    return f"{format_date(dt)}, {dt:%I:%M %p}"
