import re
from datetime import date, datetime, timedelta, timezone

import pytest

from sales_core.dates import ParsedDate, Unparsed, normalize_date, parse_date


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2025-01-02", "2025-01-02"),
        ("2025-01-02T10:30:00", "2025-01-02"),
        ("2025/03/04", "2025-03-04"),
        ("Jan 2, 2025", "2025-01-02"),
        ("  2025-06-30  ", "2025-06-30"),
    ],
)
def test_general_parse(text, expected):
    assert normalize_date(text) == expected


def test_general_parse_uses_utc_calendar_date():
    assert normalize_date("2025-01-02T23:30:00-05:00") == "2025-01-03"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("02/01/2025", "2025-01-02"),
        ("2-1-2025", "2025-01-02"),
        ("02.01.25", "2025-01-02"),
        ("order placed 5/7/2024", "2024-07-05"),
    ],
)
def test_day_month_year_fallback_is_positional(text, expected):
    assert normalize_date(text) == expected


def test_day_month_fallback_is_not_validated():
    # Known-permissive edge case: day/month ranges are not checked.
    assert normalize_date("31/13/2025") == "2025-13-31"
    assert normalize_date("45/02/2025") == "2025-02-45"


@pytest.mark.parametrize("value", ["", "   ", None, "null", "undefined", "NaN", "not a date", "today", float("nan")])
def test_absent_or_unparseable(value):
    assert normalize_date(value) is None
    assert isinstance(parse_date(value), Unparsed)


def test_tagged_result():
    assert parse_date("2025-01-02") == ParsedDate("2025-01-02")
    assert parse_date("garbage") == Unparsed("garbage")


def test_date_objects():
    assert normalize_date(date(2025, 4, 1)) == "2025-04-01"
    aware = datetime(2025, 4, 1, 22, 0, tzinfo=timezone(timedelta(hours=-4)))
    assert normalize_date(aware) == "2025-04-02"


CANONICAL = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@pytest.mark.parametrize(
    "text",
    ["0099-01-01", "0999-12-31", "1/2", "3/4", "Jan 2", "2025-01-02", "02/01/25", "123/4/2025", "2025-13-45", "20250102"],
)
def test_results_are_always_canonical(text):
    result = normalize_date(text)
    assert result is None or CANONICAL.match(result)


def test_short_years_are_zero_padded():
    assert normalize_date("0099-01-01") == "0099-01-01"
    assert normalize_date("0999-12-31") == "0999-12-31"
    assert normalize_date(date(99, 1, 1)) == "0099-01-01"


def test_text_without_a_year_is_absent():
    assert normalize_date("1/2") is None
    assert normalize_date("3/4") is None


def test_fallback_matches_inside_longer_digit_runs():
    assert normalize_date("123/4/2025") == "2025-04-23"
    assert normalize_date("2025-13-45") == "2045-13-25"
