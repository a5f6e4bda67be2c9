from decimal import Decimal

from sales_core.data import NormalizedRow, standardize_rows
from sales_core.export import EXPORT_COLUMNS, read_csv_text, to_csv_text


def test_header_and_quoting():
    rows = [
        NormalizedRow("2025-01-02", 'Home, "Garden"', Decimal("10.50"), Decimal("2"), "C1"),
        NormalizedRow(None, "Toys", Decimal("0"), Decimal("1"), ""),
    ]
    text = to_csv_text(rows)
    lines = text.splitlines()
    assert lines[0] == ",".join(EXPORT_COLUMNS)
    assert lines[1] == '2025-01-02,"Home, ""Garden""",10.50,2,C1'
    assert lines[2] == ",Toys,0,1,"


def test_empty_export_has_header_only():
    assert to_csv_text([]) == "date,category,sales,orders,customer_id\n"


def test_round_trip_preserves_values():
    rows = standardize_rows(
        [
            {"date": "2025-01-02", "category": 'Say "hi", world', "sales": "1250.50", "orders": "3", "customer_id": "A,1"},
            {"date": "", "category": "Plain", "sales": "-4.25", "orders": "0", "customer_id": 'q"uote'},
            {"date": "2025-12-31", "category": "Multi\nline", "sales": "7", "orders": "1", "customer_id": ""},
        ]
    )
    decoded = read_csv_text(to_csv_text(rows))
    assert decoded[0] == {
        "date": "2025-01-02",
        "category": 'Say "hi", world',
        "sales": "1250.50",
        "orders": "3",
        "customer_id": "A,1",
    }
    assert decoded[1]["customer_id"] == 'q"uote'
    assert decoded[2]["category"] == "Multi\nline"
    assert standardize_rows(decoded) == rows
