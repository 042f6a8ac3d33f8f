# src/dealmatch/domain/results.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

from dealmatch.domain.property import BuyerRecord, PropertyUpdate

Confidence = Literal["high", "medium", "low"]
Viability = Literal["insufficient_data", "pursue", "negotiate", "pass"]
Action = Literal["STRONG BUY", "BUY", "CONSIDER", "PASS"]


# ----------------------------
# Valuation
# ----------------------------

@dataclass
class CompAdjustment:
    factor: str
    adjustment: float


@dataclass
class AdjustedComp:
    comp: str                       # "Comp 1", "Comp 2", ...
    original_price: float
    adjusted_price: float
    adjustments: List[CompAdjustment]


@dataclass
class ValuationResult:
    arv: float
    confidence: Confidence
    adjustments: List[AdjustedComp]
    comp_count: int
    value_low: float
    value_high: float
    coefficient_of_variation_pct: Optional[float]  # None without comps

    def to_update(self) -> PropertyUpdate:
        return PropertyUpdate("valuation", {"arv": self.arv, "arv_confidence": self.confidence})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RepairLineItem:
    item: str
    cost: float
    note: str


@dataclass
class RepairEstimate:
    total_estimate: float
    breakdown: List[RepairLineItem]
    confidence: Confidence
    per_square_foot: float

    def to_update(self) -> PropertyUpdate:
        return PropertyUpdate("repairs", {"repair_estimate": self.total_estimate})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ----------------------------
# Offers
# ----------------------------

@dataclass
class OfferResult:
    strategy: str
    mao: float
    suggested_offer: float
    counter_low: float
    counter_high: float
    breakdown: Dict[str, float]
    note: str

    def to_update(self) -> PropertyUpdate:
        return PropertyUpdate("offer", {"mao": self.mao})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OfferViability:
    status: Viability
    message: str
    surplus: float = 0.0   # MAO - asking, when positive
    gap: float = 0.0       # asking - MAO, when positive

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ----------------------------
# Scoring
# ----------------------------

@dataclass
class Recommendation:
    action: Action
    message: str
    priority: Literal["high", "medium", "low", "none"]


@dataclass
class SwotAnalysis:
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    threats: List[str] = field(default_factory=list)


@dataclass
class DealVerdict:
    deal_score: float
    risk_score: float
    success_probability: float
    recommendation: Recommendation
    grade: str
    metrics: Dict[str, float]
    analysis: SwotAnalysis
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_update(self) -> PropertyUpdate:
        return PropertyUpdate(
            "scorer",
            {
                "deal_score": self.deal_score,
                "risk_score": self.risk_score,
                "deal_class": self.recommendation.action,
                # a pass retires the record
                "archived": self.recommendation.action == "PASS",
            },
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ----------------------------
# Matching
# ----------------------------

@dataclass
class MatchResult:
    buyer: BuyerRecord
    property_id: str
    score: int
    confidence: str
    breakdown: Dict[str, float]
    reasons: List[str]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "buyer_id": self.buyer.id,
            "buyer_name": self.buyer.name,
            "buyer_email": self.buyer.email,
            "property_id": self.property_id,
            "score": self.score,
            "confidence": self.confidence,
            "breakdown": dict(self.breakdown),
            "reasons": list(self.reasons),
        }
