# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from dealmatch.api.http import app
from dealmatch.domain.property import BuyerRecord, PropertyRecord

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def springfield_property() -> PropertyRecord:
    """Scored wholesale deal used across the matcher tests."""
    return PropertyRecord(
        id="P-100",
        address="123 Main St, Springfield, IL 62704",
        asking_price=180_000,
        deal_type="Wholesaling",
        arv=260_000,
        repair_estimate=30_000,
    )


@pytest.fixture
def make_buyer():
    def _make(days_old: int | None = None, **kwargs) -> BuyerRecord:
        if days_old is not None:
            kwargs.setdefault("created_at", NOW - timedelta(days=days_old))
        kwargs.setdefault("id", "B-1")
        kwargs.setdefault("name", "Test Buyer")
        return BuyerRecord(**kwargs)

    return _make
