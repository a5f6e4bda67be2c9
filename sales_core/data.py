from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from sales_core.dates import normalize_date


logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown"

FIELD_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "date": ("date", "timestamp", "order_date"),
    "category": ("category", "product_category", "segment"),
    "sales": ("sales", "revenue", "amount"),
    "orders": ("orders", "qty"),
    "customer_id": ("customer_id", "customer", "user_id"),
}

FIELD_DEFAULTS: Dict[str, object] = {
    "date": None,
    "category": UNKNOWN_CATEGORY,
    "sales": Decimal(0),
    "orders": Decimal(1),
    "customer_id": "",
}

_NUMERIC_CHARS = set("0123456789.-")


class DataLoadError(ValueError):
    """Raised when a tabular source cannot be parsed into records."""


@dataclass(frozen=True)
class NormalizedRow:
    date: Optional[str] = None
    category: str = UNKNOWN_CATEGORY
    sales: Decimal = Decimal(0)
    orders: Decimal = Decimal(1)
    customer_id: str = ""

    def as_record(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "category": self.category,
            "sales": self.sales,
            "orders": self.orders,
            "customer_id": self.customer_id,
        }


@dataclass(frozen=True)
class DataSet:
    rows: Tuple[NormalizedRow, ...] = field(default_factory=tuple)
    source: str = "empty"

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def categories(self) -> List[str]:
        return sorted({r.category for r in self.rows if r.category})


def is_blank(value: object) -> bool:
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def lower_keys(record: Mapping[Any, object]) -> Dict[str, object]:
    return {str(k).strip().lower(): v for k, v in record.items()}


def resolve_field(record: Mapping[str, object], candidates: Sequence[str]) -> Optional[object]:
    """Return the first present, non-blank value among ``candidates``.

    ``record`` must already have lowercased keys (see ``lower_keys``).
    """
    for key in candidates:
        value = record.get(key)
        if not is_blank(value):
            return value
    return None


def parse_number(value: object) -> Decimal:
    """Coerce text like ``"$1,250.50"`` into a Decimal; anything unparsable is 0."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return Decimal(0)
        return Decimal(str(value))
    s = "".join(ch for ch in str(value) if ch in _NUMERIC_CHARS)
    if not s:
        return Decimal(0)
    try:
        out = Decimal(s)
    except InvalidOperation:
        return Decimal(0)
    return out if out.is_finite() else Decimal(0)


def id_text(value: object) -> str:
    # JSON and pandas hand integer ids back as floats (101.0).
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_row(record: Mapping[Any, object]) -> NormalizedRow:
    lowered = lower_keys(record)
    raw_date = resolve_field(lowered, FIELD_SYNONYMS["date"])
    raw_category = resolve_field(lowered, FIELD_SYNONYMS["category"])
    raw_sales = resolve_field(lowered, FIELD_SYNONYMS["sales"])
    raw_orders = resolve_field(lowered, FIELD_SYNONYMS["orders"])
    raw_customer = resolve_field(lowered, FIELD_SYNONYMS["customer_id"])

    return NormalizedRow(
        date=normalize_date(raw_date),
        category=str(raw_category).strip() if raw_category is not None else UNKNOWN_CATEGORY,
        sales=parse_number(raw_sales) if raw_sales is not None else FIELD_DEFAULTS["sales"],
        orders=parse_number(raw_orders) if raw_orders is not None else FIELD_DEFAULTS["orders"],
        customer_id=id_text(raw_customer) if raw_customer is not None else "",
    )


def standardize_rows(records: Iterable[Mapping[Any, object]]) -> Tuple[NormalizedRow, ...]:
    rows = tuple(normalize_row(r) for r in records)
    defaulted = sum(1 for r in rows if r.date is None or r.category == UNKNOWN_CATEGORY)
    if defaulted:
        logger.debug("standardize_rows: %d of %d rows missing a date or category", defaulted, len(rows))
    return rows


def load_dataset(records: Iterable[Mapping[Any, object]], *, source: str = "records") -> DataSet:
    dataset = DataSet(rows=standardize_rows(records), source=source)
    logger.info("Loaded %d rows from %s", len(dataset), source)
    return dataset


# ---------------- Loaders ----------------
def read_csv_records(source: bytes | str) -> List[Dict[str, object]]:
    """Parse header-first CSV content into raw records (all values as text)."""
    try:
        if isinstance(source, bytes):
            source = source.decode("utf-8-sig")
        df = pd.read_csv(io.StringIO(source), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except UnicodeDecodeError as exc:
        raise DataLoadError(f"file is not UTF-8 text ({exc.reason})") from exc
    except pd.errors.EmptyDataError as exc:
        raise DataLoadError("no columns to parse") from exc
    except pd.errors.ParserError as exc:
        raise DataLoadError(str(exc).strip()) from exc
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


def load_csv(source: bytes | str) -> DataSet:
    return load_dataset(read_csv_records(source), source="upload")


# (date, category, sales, orders, customer_id)
SAMPLE_RECORDS: Tuple[Tuple[str, str, str, int, str], ...] = (
    ("2025-01-02", "Electronics", "1250.50", 4, "C001"),
    ("2025-01-03", "Clothing", "420.00", 2, "C002"),
    ("2025-01-04", "Electronics", "980.00", 3, "C003"),
    ("2025-01-05", "Home", "150.00", 1, "C004"),
    ("2025-01-07", "Groceries", "240.00", 5, "C002"),
    ("2025-02-02", "Electronics", "1300.00", 6, "C005"),
    ("2025-02-12", "Clothing", "610.00", 4, "C006"),
    ("2025-03-01", "Sports", "220.00", 1, "C007"),
    ("2025-03-15", "Home", "330.00", 2, "C004"),
    ("2025-03-20", "Electronics", "980.00", 3, "C001"),
    ("2025-03-25", "Beauty", "180.50", 2, "C008"),
    ("2025-03-28", "Toys", "95.00", 1, "C009"),
    ("2025-04-02", "Books", "42.99", 1, "C010"),
    ("2025-04-05", "Electronics", "2100.00", 5, "C011"),
    ("2025-04-07", "Clothing", "315.00", 3, "C012"),
    ("2025-04-10", "Home", "450.00", 2, "C013"),
    ("2025-04-14", "Groceries", "135.25", 4, "C014"),
    ("2025-04-18", "Automotive", "780.00", 2, "C015"),
    ("2025-04-21", "Sports", "295.00", 3, "C016"),
    ("2025-04-25", "Beauty", "155.60", 2, "C017"),
    ("2025-05-01", "Electronics", "1800.00", 6, "C018"),
    ("2025-05-03", "Home", "220.00", 1, "C019"),
    ("2025-05-05", "Toys", "140.00", 2, "C020"),
    ("2025-05-07", "Clothing", "310.00", 3, "C021"),
    ("2025-05-10", "Groceries", "98.50", 3, "C022"),
    ("2025-05-12", "Books", "62.00", 1, "C023"),
    ("2025-05-15", "Beauty", "200.00", 3, "C024"),
    ("2025-05-17", "Automotive", "950.00", 2, "C025"),
    ("2025-05-20", "Home", "330.00", 2, "C026"),
    ("2025-05-23", "Electronics", "2700.00", 5, "C027"),
    ("2025-05-25", "Clothing", "150.00", 1, "C028"),
    ("2025-05-28", "Groceries", "120.00", 4, "C029"),
    ("2025-06-01", "Sports", "340.00", 3, "C030"),
    ("2025-06-04", "Books", "55.00", 1, "C031"),
    ("2025-06-07", "Beauty", "180.00", 2, "C032"),
    ("2025-06-10", "Electronics", "3200.00", 7, "C033"),
    ("2025-06-14", "Home", "410.00", 2, "C034"),
    ("2025-06-17", "Automotive", "890.00", 2, "C035"),
    ("2025-06-20", "Groceries", "115.00", 3, "C036"),
    ("2025-06-23", "Clothing", "275.00", 2, "C037"),
    ("2025-06-26", "Toys", "130.00", 1, "C038"),
    ("2025-06-29", "Sports", "250.00", 2, "C039"),
    ("2025-07-02", "Books", "80.00", 1, "C040"),
    ("2025-07-05", "Beauty", "210.00", 3, "C041"),
    ("2025-07-08", "Home", "295.00", 2, "C042"),
    ("2025-07-11", "Electronics", "1700.00", 5, "C043"),
    ("2025-07-15", "Clothing", "265.00", 3, "C044"),
    ("2025-07-18", "Sports", "320.00", 2, "C045"),
    ("2025-07-21", "Toys", "160.00", 1, "C046"),
    ("2025-07-24", "Groceries", "140.00", 4, "C047"),
    ("2025-07-27", "Home", "360.00", 2, "C048"),
    ("2025-07-30", "Electronics", "2500.00", 6, "C049"),
    ("2025-08-02", "Books", "75.00", 1, "C050"),
    ("2025-08-05", "Beauty", "195.00", 2, "C051"),
    ("2025-08-08", "Automotive", "1020.00", 3, "C052"),
    ("2025-08-12", "Home", "430.00", 2, "C053"),
    ("2025-08-15", "Clothing", "345.00", 3, "C054"),
    ("2025-08-18", "Groceries", "125.00", 5, "C055"),
    ("2025-08-21", "Sports", "280.00", 2, "C056"),
    ("2025-08-25", "Electronics", "1950.00", 4, "C057"),
    ("2025-08-28", "Beauty", "210.00", 3, "C058"),
    ("2025-09-01", "Clothing", "375.00", 2, "C059"),
    ("2025-09-03", "Electronics", "2650.00", 6, "C060"),
    ("2025-09-05", "Groceries", "145.00", 4, "C061"),
    ("2025-09-07", "Books", "65.00", 1, "C062"),
    ("2025-09-09", "Beauty", "185.00", 2, "C063"),
    ("2025-09-11", "Home", "370.00", 2, "C064"),
    ("2025-09-13", "Sports", "415.00", 3, "C065"),
    ("2025-09-15", "Toys", "145.00", 1, "C066"),
    ("2025-09-17", "Automotive", "890.00", 2, "C067"),
    ("2025-09-19", "Electronics", "3100.00", 7, "C068"),
    ("2025-09-21", "Home", "450.00", 2, "C069"),
    ("2025-09-23", "Books", "70.00", 1, "C070"),
    ("2025-09-25", "Beauty", "230.00", 3, "C071"),
    ("2025-09-27", "Clothing", "280.00", 3, "C072"),
    ("2025-09-29", "Groceries", "110.00", 3, "C073"),
    ("2025-09-30", "Electronics", "1850.00", 4, "C074"),
    ("2025-10-02", "Sports", "320.00", 2, "C075"),
    ("2025-10-04", "Toys", "140.00", 1, "C076"),
    ("2025-10-06", "Books", "88.00", 1, "C077"),
    ("2025-10-08", "Automotive", "1050.00", 3, "C078"),
    ("2025-10-10", "Home", "390.00", 2, "C079"),
    ("2025-10-12", "Beauty", "210.00", 2, "C080"),
    ("2025-10-14", "Clothing", "315.00", 2, "C081"),
    ("2025-10-16", "Groceries", "95.00", 3, "C082"),
    ("2025-10-18", "Electronics", "2400.00", 5, "C083"),
    ("2025-10-20", "Sports", "355.00", 3, "C084"),
    ("2025-10-22", "Home", "410.00", 2, "C085"),
    ("2025-10-24", "Books", "77.00", 1, "C086"),
    ("2025-10-26", "Beauty", "195.00", 2, "C087"),
    ("2025-10-28", "Automotive", "1120.00", 3, "C088"),
    ("2025-10-30", "Toys", "155.00", 2, "C089"),
    ("2025-11-01", "Clothing", "440.00", 3, "C090"),
    ("2025-11-03", "Electronics", "2650.00", 6, "C091"),
    ("2025-11-05", "Home", "385.00", 2, "C092"),
    ("2025-11-07", "Groceries", "130.00", 4, "C093"),
    ("2025-11-09", "Beauty", "210.00", 3, "C094"),
    ("2025-11-11", "Books", "60.00", 1, "C095"),
    ("2025-11-13", "Toys", "160.00", 1, "C096"),
    ("2025-11-15", "Sports", "390.00", 3, "C097"),
    ("2025-11-17", "Home", "330.00", 2, "C098"),
    ("2025-11-19", "Clothing", "285.00", 2, "C099"),
    ("2025-11-21", "Automotive", "920.00", 2, "C100"),
    ("2025-11-23", "Electronics", "3100.00", 7, "C101"),
    ("2025-11-25", "Beauty", "240.00", 3, "C102"),
    ("2025-11-27", "Home", "380.00", 2, "C103"),
    ("2025-11-29", "Books", "65.00", 1, "C104"),
    ("2025-12-01", "Toys", "190.00", 2, "C105"),
    ("2025-12-03", "Electronics", "4200.00", 8, "C106"),
    ("2025-12-05", "Clothing", "310.00", 3, "C107"),
    ("2025-12-07", "Groceries", "120.00", 4, "C108"),
    ("2025-12-09", "Beauty", "260.00", 3, "C109"),
    ("2025-12-11", "Books", "95.00", 1, "C110"),
    ("2025-12-13", "Home", "490.00", 3, "C111"),
    ("2025-12-15", "Sports", "460.00", 3, "C112"),
    ("2025-12-17", "Automotive", "1150.00", 3, "C113"),
    ("2025-12-19", "Clothing", "355.00", 3, "C114"),
    ("2025-12-21", "Electronics", "3900.00", 6, "C115"),
    ("2025-12-23", "Toys", "260.00", 2, "C116"),
    ("2025-12-25", "Beauty", "310.00", 3, "C117"),
    ("2025-12-27", "Home", "420.00", 2, "C118"),
    ("2025-12-29", "Groceries", "150.00", 4, "C119"),
    ("2025-12-31", "Electronics", "4500.00", 9, "C120"),
)


def sample_records() -> List[Dict[str, object]]:
    return [
        {"date": d, "category": c, "sales": s, "orders": o, "customer_id": cid}
        for d, c, s, o, cid in SAMPLE_RECORDS
    ]


def load_sample() -> DataSet:
    return load_dataset(sample_records(), source="sample")


# ---------------- Display helpers ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency(value: object, decimals: int = 2) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    rounded = round_half_up(value, decimals)
    return f"${rounded:,.{decimals}f}"
