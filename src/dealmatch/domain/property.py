# src/dealmatch/domain/property.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from dealmatch.domain.errors import InvalidInput

ExitStrategy = Literal["wholesale", "subject_to", "wraparound", "default"]
MarketTrend = Literal["up", "stable", "down"]
ConfidenceTier = Literal["high", "medium", "low"]

_TRUTHY = {"true", "yes", "y", "1", "x", "t"}

_STRATEGY_ALIASES = {
    "wholesale": "wholesale",
    "wholesaling": "wholesale",
    "assignment": "wholesale",
    "subject_to": "subject_to",
    "subject-to": "subject_to",
    "subject to": "subject_to",
    "sub2": "subject_to",
    "wraparound": "wraparound",
    "wrap": "wraparound",
    "wrap mortgage": "wraparound",
}


def normalize_strategy(strategy: str | None) -> str:
    s = str(strategy or "").strip().lower()
    return _STRATEGY_ALIASES.get(s, "default")


def to_num(val: Any, default: float = 0.0) -> float:
    """
    Lenient numeric coercion used across every record.

    Returns `default` when missing/blank/garbage, strips "$", "," and "%".
    """
    if val is None:
        return default
    if isinstance(val, (int, float)):
        f = float(val)
        return f if f == f else default  # NaN
    if isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            return default
        try:
            return float(s)
        except ValueError:
            return default
    return default


def to_flag(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    if isinstance(val, (int, float)):
        return val != 0
    return str(val).strip().lower() in _TRUTHY


def _to_optional_num(val: Any) -> float | None:
    if val is None or (isinstance(val, str) and not val.strip()):
        return None
    f = to_num(val, default=float("nan"))
    return None if f != f else f


def _to_optional_text(val: Any) -> str | None:
    if val is None:
        return None
    if isinstance(val, (list, tuple, set)):
        val = ", ".join(str(v) for v in val if v is not None)
    s = str(val).strip()
    return s or None


def _to_datetime(val: Any) -> datetime | None:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        dt = val
    elif isinstance(val, date):
        dt = datetime(val.year, val.month, val.day)
    else:
        try:
            dt = datetime.fromisoformat(str(val).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ComparableSale(_Record):
    sale_price: float = 0.0
    sqft: float = 0.0
    bedrooms: float = 0.0
    bathrooms: float = 0.0
    year_built: int = 0
    condition: float = 0.0
    sale_date: date | None = None

    @field_validator("sale_price", "sqft", "bedrooms", "bathrooms", "condition", mode="before")
    @classmethod
    def _num(cls, v: Any) -> float:
        return to_num(v)

    @field_validator("year_built", mode="before")
    @classmethod
    def _year(cls, v: Any) -> int:
        return int(to_num(v))

    @field_validator("sale_date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> date | None:
        dt = _to_datetime(v)
        return dt.date() if dt else None


_NUMERIC_FIELDS = (
    "sqft",
    "bedrooms",
    "bathrooms",
    "lot_size",
    "condition",
    "condition_after_repair",
    "roof_age",
    "hvac_age",
    "plumbing_condition",
    "electrical_condition",
    "asking_price",
    "existing_mortgage_balance",
    "monthly_rent",
    "estimated_arv",
    "market_value",
    "days_on_market",
    "monthly_payment",
    "interest_rate",
    "remaining_term",
    "loan_to_value",
)

_FLAG_FIELDS = (
    "foundation_issues",
    "inspection_report",
    "title_issues",
    "structural_damage",
    "financing_contingent",
    "probate",
    "divorce",
    "liens",
    "late_payments",
    "bankruptcy_history",
    "multiple_mortgages",
    "adjustable_rate",
    "balloon_payment",
    "archived",
)

# which component may write which classification field
FIELD_OWNERS: dict[str, frozenset[str]] = {
    "valuation": frozenset({"arv", "arv_confidence"}),
    "repairs": frozenset({"repair_estimate"}),
    "offer": frozenset({"mao"}),
    "scorer": frozenset({"deal_score", "risk_score", "deal_class", "archived"}),
}


@dataclass(frozen=True)
class PropertyUpdate:
    """A partial update issued by one component for the fields it owns."""
    owner: str
    fields: dict[str, Any] = field(default_factory=dict)


class PropertyRecord(_Record):
    id: str = ""

    address: str = ""
    city: str = ""
    state: str = ""
    zipcode: str = ""

    # physical
    sqft: float = 0.0
    bedrooms: float = 0.0
    bathrooms: float = 0.0
    year_built: int = 0
    lot_size: float = 0.0

    # condition signals (1-10, 0 = unknown)
    condition: float = 0.0
    condition_after_repair: float = 0.0
    roof_age: float = 0.0
    hvac_age: float = 0.0
    plumbing_condition: float = 0.0
    electrical_condition: float = 0.0
    foundation_issues: bool = False
    cosmetic_needs: str | None = None
    inspection_report: bool = False

    # financial inputs
    asking_price: float = 0.0
    existing_mortgage_balance: float = 0.0
    monthly_rent: float = 0.0
    estimated_arv: float = 0.0
    market_value: float = 0.0

    # qualitative signals
    exit_strategy: str = "wholesale"
    deal_type: str | None = None
    seller_motivation: float | None = None
    location_score: float | None = None
    market_trend: str = "stable"
    days_on_market: float = 0.0
    seller_reliability: float | None = None
    title_issues: bool = False
    structural_damage: bool = False
    financing_contingent: bool = False
    probate: bool = False
    divorce: bool = False
    liens: bool = False
    zoning: str | None = None
    competition: str | None = None
    economic_factors: str | None = None

    # existing loan (subject-to / wraparound)
    monthly_payment: float = 0.0
    interest_rate: float = 0.0        # percent, e.g. 4.5
    remaining_term: float = 0.0       # months
    late_payments: bool = False
    bankruptcy_history: bool = False
    multiple_mortgages: bool = False
    adjustable_rate: bool = False
    balloon_payment: bool = False
    lender_type: str | None = None
    payment_history: str | None = None
    loan_to_value: float = 0.0
    appreciation: float | None = None

    # classification state
    arv: float | None = None
    arv_confidence: ConfidenceTier | None = None
    repair_estimate: float | None = None
    mao: float | None = None
    deal_score: float | None = None
    risk_score: float | None = None
    deal_class: str | None = None
    archived: bool = False

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _num(cls, v: Any) -> float:
        return to_num(v)

    @field_validator("year_built", mode="before")
    @classmethod
    def _year(cls, v: Any) -> int:
        return int(to_num(v))

    @field_validator(*_FLAG_FIELDS, mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return to_flag(v)

    @field_validator("seller_motivation", "location_score", "seller_reliability", "appreciation", mode="before")
    @classmethod
    def _optional_num(cls, v: Any) -> float | None:
        return _to_optional_num(v)

    @field_validator("id", "address", "city", "state", "zipcode", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("cosmetic_needs", "deal_type", "zoning", "competition", "economic_factors",
                     "lender_type", "payment_history", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:
        return _to_optional_text(v)

    @field_validator("exit_strategy", mode="before")
    @classmethod
    def _strategy(cls, v: Any) -> str:
        # blank -> wholesale; unknown spellings -> default
        if v is None or not str(v).strip():
            return "wholesale"
        return normalize_strategy(v)

    @field_validator("market_trend", mode="before")
    @classmethod
    def _trend(cls, v: Any) -> str:
        t = str(v or "stable").strip().lower()
        if t in {"up", "rising", "appreciating"}:
            return "up"
        if t in {"down", "declining", "falling"}:
            return "down"
        return "stable"

    @field_validator("arv", "repair_estimate", "mao", mode="before")
    @classmethod
    def _non_negative(cls, v: Any) -> float | None:
        if v is None:
            return None
        return max(to_num(v), 0.0)

    @property
    def equity_spread(self) -> float:
        """ARV minus acquisition price minus repairs (0 when ARV is unknown)."""
        if not self.arv:
            return 0.0
        return float(self.arv) - self.asking_price - float(self.repair_estimate or 0.0)

    def apply(self, update: PropertyUpdate) -> PropertyRecord:
        """
        Return a new record with the update merged in.

        Changing ARV or repairs without a fresh MAO clears MAO: it must be
        recomputed by the offer calculator, never carried over.
        """
        owned = FIELD_OWNERS.get(update.owner)
        if owned is None:
            raise InvalidInput(f"unknown update owner: {update.owner}")
        foreign = set(update.fields) - owned
        if foreign:
            raise InvalidInput(f"{update.owner} may not write {sorted(foreign)}")

        changes = dict(update.fields)
        for k in ("arv", "repair_estimate", "mao"):
            if k in changes and changes[k] is not None:
                changes[k] = max(float(changes[k]), 0.0)

        touches_inputs = any(
            k in changes and changes[k] != getattr(self, k) for k in ("arv", "repair_estimate")
        )
        if touches_inputs and "mao" not in changes:
            changes["mao"] = None

        return self.model_copy(update=changes)


class BuyerRecord(_Record):
    id: str = ""
    name: str = ""
    email: str | None = None
    phone: str | None = None

    max_budget: float | None = None
    investment_type: str | None = None
    preferred_areas: str | None = None

    cash_verified: bool = False
    active: bool = True
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _status_to_active(cls, data: Any) -> Any:
        if isinstance(data, dict) and "active" not in data and "status" in data:
            data = dict(data)
            data["active"] = str(data.get("status") or "").strip().lower() == "active"
        return data

    @field_validator("id", "name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("email", "phone", "investment_type", "preferred_areas", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:
        return _to_optional_text(v)

    @field_validator("max_budget", mode="before")
    @classmethod
    def _budget(cls, v: Any) -> float | None:
        f = _to_optional_num(v)
        # zero budget is treated the same as an unstated one
        return f if f and f > 0 else None

    @field_validator("cash_verified", "active", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return to_flag(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _created(cls, v: Any) -> datetime | None:
        return _to_datetime(v)
