# src/dealmatch/adapters/storage.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from dealmatch.domain.property import BuyerRecord

# sheet headers -> record fields
_BUYER_COLUMNS = {
    "buyer id": "id",
    "buyer_id": "id",
    "name": "name",
    "buyer name": "name",
    "email": "email",
    "phone": "phone",
    "max budget": "max_budget",
    "max_price": "max_budget",
    "maxprice": "max_budget",
    "investment type": "investment_type",
    "preferred areas": "preferred_areas",
    "preferred locations": "preferred_areas",
    "cash verified": "cash_verified",
    "verified": "cash_verified",
    "status": "status",
    "active": "active",
    "date added": "created_at",
    "created": "created_at",
}


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # NaN -> None so record validators see "missing", not a float
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def read_buyers_frame(df: pd.DataFrame) -> list[BuyerRecord]:
    renamed = df.rename(columns=lambda c: _BUYER_COLUMNS.get(str(c).strip().lower(), str(c).strip()))
    return [BuyerRecord(**row) for row in _records(renamed)]


def load_buyers_csv(path: str | Path) -> list[BuyerRecord]:
    """Read a buyers export (CSV, one row per buyer) into BuyerRecords."""
    df = pd.read_csv(path, dtype=str, keep_default_na=True)
    return read_buyers_frame(df)


def load_json(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
