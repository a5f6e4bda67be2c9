from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from sales_core.data import UNKNOWN_CATEGORY, DataSet, NormalizedRow, format_currency, round_half_up
from sales_core.filters import FilterSelection, apply_filters, normalize_filters


@dataclass(frozen=True)
class Kpis:
    total_sales: Decimal
    total_orders: Decimal
    avg_order_value: Decimal
    unique_customers: int


def compute_kpis(rows: Sequence[NormalizedRow]) -> Kpis:
    total_sales = sum((r.sales for r in rows), Decimal(0))
    total_orders = sum((r.orders for r in rows), Decimal(0))
    # Only the grand total is floor-guarded; per-row zero orders still count as zero.
    denominator = total_orders or Decimal(1)
    customers = {r.customer_id for r in rows if r.customer_id}
    return Kpis(
        total_sales=total_sales,
        total_orders=total_orders,
        avg_order_value=total_sales / denominator,
        unique_customers=len(customers),
    )


def sales_by_category(rows: Iterable[NormalizedRow]) -> Dict[str, Decimal]:
    agg: Dict[str, Decimal] = {}
    for r in rows:
        key = r.category or UNKNOWN_CATEGORY
        agg[key] = agg.get(key, Decimal(0)) + r.sales
    # sorted() is stable, so equal sums keep first-seen order.
    ranked = sorted(agg.items(), key=lambda kv: kv[1], reverse=True)
    return dict(ranked)


def sales_by_date(rows: Iterable[NormalizedRow]) -> Dict[str, Decimal]:
    agg: Dict[str, Decimal] = {}
    for r in rows:
        if not r.date:
            continue
        agg[r.date] = agg.get(r.date, Decimal(0)) + r.sales
    return {d: agg[d] for d in sorted(agg)}


def _series_records(series: Dict[str, Decimal], key: str) -> List[Dict[str, Any]]:
    return [{key: k, "sales": v} for k, v in series.items()]


def prepare_context(filters: dict | FilterSelection, dataset: DataSet) -> Dict[str, Any]:
    filt = filters if isinstance(filters, FilterSelection) else normalize_filters(filters)
    filtered_rows = apply_filters(dataset.rows, filt)
    return {
        "filters": filt,
        "source": dataset.source,
        "rows": dataset.rows,
        "filtered_rows": filtered_rows,
        "categories": dataset.categories,
    }


def compute_overview(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rows: Sequence[NormalizedRow] = ctx.get("filtered_rows", ())
    kpis = compute_kpis(rows)

    return {
        "filters": asdict(filters),
        "source": ctx.get("source"),
        "kpis": asdict(kpis),
        "display": {
            "total_sales": format_currency(kpis.total_sales),
            "avg_order_value": format_currency(kpis.avg_order_value),
            "unique_customers": str(kpis.unique_customers),
            "avg_order_value_rounded": round_half_up(kpis.avg_order_value, 2),
        },
        "series": {
            "by_category": _series_records(sales_by_category(rows), "category"),
            "by_date": _series_records(sales_by_date(rows), "date"),
        },
        "preview": [r.as_record() for r in rows[: filters.preview_limit]],
        "row_counts": {
            "total_rows": len(ctx.get("rows", ())),
            "filtered_rows": len(rows),
        },
        "categories": ctx.get("categories", []),
    }
