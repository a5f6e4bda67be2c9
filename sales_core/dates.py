from __future__ import annotations

import math
import re
import warnings
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Union

import pandas as pd


NULL_TOKENS = {"null", "undefined", "none", "nan", "nat", "n/a", "<na>"}

# D[sep]M[sep]Y anywhere in the text, positional; day and month are not range-checked.
DMY_PATTERN = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4}|\d{2})")
YEAR_PATTERN = re.compile(r"\d{4}")


@dataclass(frozen=True)
class ParsedDate:
    value: str


@dataclass(frozen=True)
class Unparsed:
    text: str = ""


DateParse = Union[ParsedDate, Unparsed]


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NA:
        return ""
    return str(value).strip()


def _canonical(ts: date) -> str:
    # strftime("%Y") does not zero-pad years below 1000 on every platform.
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc)


def _general_parse(text: str) -> Optional[str]:
    """Locale-style parse of ISO and month-name date text, as a UTC calendar date."""
    # Text without a four-digit year is left to the fallback.
    if not YEAR_PATTERN.search(text):
        return None
    # Numeric D/M/Y triples are ambiguous; the positional fallback owns them.
    if DMY_PATTERN.match(text):
        return None
    try:
        return _canonical(_to_utc(datetime.fromisoformat(text)))
    except ValueError:
        pass
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            ts = pd.to_datetime(text, utc=True, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return _canonical(ts)


def _fallback_parse(text: str) -> Optional[str]:
    match = DMY_PATTERN.search(text)
    if not match:
        return None
    day, month, year = match.group(1), match.group(2), match.group(3)
    if len(year) == 2:
        year = "20" + year
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def parse_date(value: object) -> DateParse:
    """Parse free-form date input into a tagged result.

    The general parse runs first; the ``D/M/Y`` fallback is only consulted when
    it declines, so a successful general parse is never overwritten.
    """
    if value is pd.NaT:
        return Unparsed()
    if isinstance(value, datetime):
        return ParsedDate(_canonical(_to_utc(value)))
    if isinstance(value, date):
        return ParsedDate(_canonical(value))

    text = _as_text(value)
    if not text or text.lower() in NULL_TOKENS:
        return Unparsed(text)

    parsed = _general_parse(text)
    if parsed is None:
        parsed = _fallback_parse(text)
    if parsed is None:
        return Unparsed(text)
    return ParsedDate(parsed)


def normalize_date(value: object) -> Optional[str]:
    result = parse_date(value)
    if isinstance(result, ParsedDate):
        return result.value
    return None
