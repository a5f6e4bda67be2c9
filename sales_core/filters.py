from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple

from sales_core.data import NormalizedRow
from sales_core.dates import normalize_date


logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
ALL_CATEGORY_TOKENS = {"", ALL_CATEGORIES, "__all__"}
PREVIEW_LIMIT_DEFAULT = 5
PREVIEW_LIMIT_MAX = 200


@dataclass(frozen=True)
class FilterSelection:
    category: str = ALL_CATEGORIES
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    preview_limit: int = PREVIEW_LIMIT_DEFAULT

    @property
    def all_categories(self) -> bool:
        return self.category == ALL_CATEGORIES


def _date_bound(raw: Mapping[str, object], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or value == "":
        return None
    canonical = normalize_date(value)
    if canonical is None:
        logger.warning("Ignoring unparseable %s bound: %r", key, value)
    return canonical


def normalize_filters(raw: Mapping[str, object] | None) -> FilterSelection:
    raw = raw or {}

    category = raw.get("category")
    category = "" if category is None else str(category)
    if category in ALL_CATEGORY_TOKENS:
        category = ALL_CATEGORIES

    preview_limit = raw.get("preview_limit", PREVIEW_LIMIT_DEFAULT)
    try:
        preview_limit = int(preview_limit)
    except (TypeError, ValueError):
        preview_limit = PREVIEW_LIMIT_DEFAULT
    preview_limit = max(1, min(PREVIEW_LIMIT_MAX, preview_limit))

    return FilterSelection(
        category=category,
        date_from=_date_bound(raw, "date_from"),
        date_to=_date_bound(raw, "date_to"),
        preview_limit=preview_limit,
    )


def row_matches(row: NormalizedRow, selection: FilterSelection) -> bool:
    if not selection.all_categories and row.category != selection.category:
        return False
    # Rows without a date pass both bounds.
    if selection.date_from and row.date and row.date < selection.date_from:
        return False
    if selection.date_to and row.date and row.date > selection.date_to:
        return False
    return True


def apply_filters(rows: Iterable[NormalizedRow], selection: FilterSelection) -> Tuple[NormalizedRow, ...]:
    return tuple(r for r in rows if row_matches(r, selection))
