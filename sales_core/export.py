"""Delimited-text export of normalized rows.

Values containing the delimiter, a quote or a line break are quoted, with
embedded quotes doubled (``csv.QUOTE_MINIMAL``). A missing date is an empty
field.
"""

from __future__ import annotations

import csv
import io
from typing import Dict, Iterable, List

import pandas as pd

from sales_core.data import NormalizedRow


EXPORT_COLUMNS = ["date", "category", "sales", "orders", "customer_id"]
EXPORT_FILENAME = "clean_data.csv"


def rows_to_frame(rows: Iterable[NormalizedRow]) -> pd.DataFrame:
    records = [
        {col: ("" if value is None else str(value)) for col, value in r.as_record().items()}
        for r in rows
    ]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS, dtype=object)


def to_csv_text(rows: Iterable[NormalizedRow], *, delimiter: str = ",") -> str:
    df = rows_to_frame(rows)
    return df.to_csv(index=False, sep=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def read_csv_text(text: str, *, delimiter: str = ",") -> List[Dict[str, str]]:
    df = pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, keep_default_na=False)
    return df.to_dict(orient="records")
