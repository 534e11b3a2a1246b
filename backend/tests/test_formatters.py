"""Tests for the keystroke formatters."""

import datetime

import pytest

from workspace_manager.client import formatters


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", ""),
        ("123", "123"),
        ("1234", "(123) 4"),
        ("1234567", "(123) 4567"),
        ("12345678", "(123) 456-78"),
        ("1234567890", "(123) 456-7890"),
        ("123456789012", "(123) 456-7890"),
        ("(555) 123-4567", "(555) 123-4567"),
    ],
)
def test_format_phone_number(raw, expected):
    assert formatters.format_phone_number(raw) == expected


def test_card_number_grouping():
    assert formatters.format_card_number("4242424242424242") == "4242 4242 4242 4242"
    assert formatters.format_card_number("4242 42") == "4242 42"
    assert formatters.format_card_number("") == ""


def test_card_digits_are_capped_at_sixteen():
    raw = "4242-4242-4242-4242-9999"
    assert formatters.limit_card_digits(raw) == "4242424242424242"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", ""),
        ("1", "1"),
        ("13", "12"),
        ("00", "01"),
        ("123", "12/3"),
        ("1325", "12/25"),
        ("0527", "05/27"),
        ("05/27", "05/27"),
    ],
)
def test_format_expiry_date(raw, expected):
    assert formatters.format_expiry_date(raw) == expected


def test_format_postal_code():
    assert formatters.format_postal_code("ab12-34 5") == "12-345"
    assert formatters.format_postal_code("12345678901234") == "1234567890"


def test_format_card_holder_and_cvv():
    assert formatters.format_card_holder("john doe") == "JOHN DOE"
    assert formatters.format_cvv("12a345") == "1234"


def test_formatters_are_idempotent():
    samples = {
        formatters.format_phone_number: "5551234567",
        formatters.format_expiry_date: "0929",
        formatters.format_postal_code: "10115-ab",
        formatters.format_cvv: "987",
    }
    for fmt, raw in samples.items():
        once = fmt(raw)
        assert fmt(once) == once


def test_mask_card_number():
    assert formatters.mask_card_number("4242 4242 4242 1234") == "•••• 1234"


def test_truncate():
    assert formatters.truncate("short", 10) == "short"
    assert formatters.truncate("a longer description", 8) == "a longer..."


def test_date_formatting():
    assert formatters.format_date("2024-01-15T10:30:00Z") == "Jan 15, 2024"
    assert formatters.format_datetime("2024-01-15T10:30:00Z") == "Jan 15, 2024, 10:30 AM"
    assert formatters.format_date(datetime.datetime(2024, 3, 5, 18, 0)) == "Mar 5, 2024"
    assert formatters.format_datetime(datetime.datetime(2024, 3, 5, 18, 0)) == "Mar 5, 2024, 06:00 PM"
