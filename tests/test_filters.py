from decimal import Decimal

from sales_core.data import NormalizedRow
from sales_core.filters import (
    ALL_CATEGORIES,
    PREVIEW_LIMIT_DEFAULT,
    FilterSelection,
    apply_filters,
    normalize_filters,
)


def _row(date, category="Home"):
    return NormalizedRow(date=date, category=category, sales=Decimal(1))


def test_lower_bound_keeps_later_rows():
    rows = (_row("2025-01-01"), _row("2025-02-01"))
    out = apply_filters(rows, FilterSelection(date_from="2025-01-15"))
    assert out == (rows[1],)


def test_bounds_are_inclusive():
    rows = (_row("2025-01-01"), _row("2025-01-15"), _row("2025-01-31"))
    out = apply_filters(rows, FilterSelection(date_from="2025-01-15", date_to="2025-01-31"))
    assert out == rows[1:]


def test_rows_without_date_pass_any_range():
    undated = _row(None)
    assert apply_filters((undated,), FilterSelection(date_from="2030-01-01")) == (undated,)
    assert apply_filters((undated,), FilterSelection(date_to="1999-01-01")) == (undated,)


def test_category_is_exact_and_case_sensitive(rows):
    out = apply_filters(rows, FilterSelection(category="Electronics"))
    assert [r.category for r in out] == ["Electronics", "Electronics"]
    assert apply_filters(rows, FilterSelection(category="electronics")) == ()


def test_all_categories_preserves_order(rows):
    assert apply_filters(rows, FilterSelection()) == rows


def test_filtering_does_not_mutate_input(rows):
    before = tuple(rows)
    apply_filters(rows, FilterSelection(category="Home", date_from="2025-01-01"))
    assert rows == before


def test_normalize_filters_defaults():
    f = normalize_filters(None)
    assert f == FilterSelection(category=ALL_CATEGORIES, date_from=None, date_to=None, preview_limit=PREVIEW_LIMIT_DEFAULT)


def test_normalize_filters_all_tokens():
    for token in ("", "all", "__all__", None):
        assert normalize_filters({"category": token}).all_categories


def test_category_named_like_the_sentinel_is_exact():
    rows = (_row("2025-01-01", "ALL"), _row("2025-01-02", "Home"), _row("2025-01-03", "All"))
    f = normalize_filters({"category": "ALL"})
    assert not f.all_categories
    assert apply_filters(rows, f) == (rows[0],)


def test_normalize_filters_canonicalizes_bounds():
    f = normalize_filters({"category": "Home", "date_from": "15/01/2025", "date_to": "2025-02-01"})
    assert f.category == "Home"
    assert f.date_from == "2025-01-15"
    assert f.date_to == "2025-02-01"


def test_normalize_filters_drops_unparseable_bound(caplog):
    f = normalize_filters({"date_from": "whenever"})
    assert f.date_from is None
    assert "Ignoring unparseable date_from" in caplog.text


def test_preview_limit_is_clamped():
    assert normalize_filters({"preview_limit": 0}).preview_limit == 1
    assert normalize_filters({"preview_limit": 10_000}).preview_limit == 200
    assert normalize_filters({"preview_limit": "abc"}).preview_limit == PREVIEW_LIMIT_DEFAULT
