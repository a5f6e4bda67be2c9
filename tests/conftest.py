"""Shared fixtures.

The API keeps the current data set on ``app.state``. Each API test gets a
client whose data set is reset to the built-in sample, so a load in one test
never leaks into the next.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from sales_core.data import NormalizedRow


@pytest.fixture
def rows() -> tuple[NormalizedRow, ...]:
    return (
        NormalizedRow(date="2025-01-01", category="Electronics", sales=Decimal("100"), orders=Decimal("2"), customer_id="A"),
        NormalizedRow(date="2025-02-01", category="Clothing", sales=Decimal("50"), orders=Decimal("1"), customer_id="B"),
        NormalizedRow(date=None, category="Electronics", sales=Decimal("25.50"), orders=Decimal("1"), customer_id=""),
        NormalizedRow(date="2025-02-01", category="Home", sales=Decimal("10"), orders=Decimal("0"), customer_id="A"),
    )


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    from fastapi.testclient import TestClient

    from sales_api.main import app
    from sales_core.data import load_sample

    monkeypatch.delenv("TELEGRAM_TOKEN", raising=False)
    monkeypatch.delenv("CHAT_ID", raising=False)
    app.state.dataset = load_sample()
    with TestClient(app) as c:
        yield c
