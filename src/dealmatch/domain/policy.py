# src/dealmatch/domain/policy.py
"""
Every weight, threshold and dollar coefficient the engine uses.

The algorithm modules never hard-code numbers; they read them from a
`ScoringPolicy`. Policies are frozen so a market-specific variant is built
with `dataclasses.replace` rather than by mutating the defaults.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


# ----------------------------
# Valuation
# ----------------------------

@dataclass(frozen=True)
class ValuationPolicy:
    per_sqft: float = 50.0
    per_bedroom: float = 5000.0
    per_bathroom: float = 3000.0
    per_year: float = 1000.0
    per_condition_point: float = 5000.0

    default_post_repair_condition: float = 8.0
    default_comp_condition: float = 7.0

    # coefficient of variation breakpoints
    cv_high: float = 0.05
    cv_medium: float = 0.15


@dataclass(frozen=True)
class RepairPolicy:
    min_rate_per_sqft: float = 15.0   # condition 10
    max_rate_per_sqft: float = 50.0   # condition 1
    default_condition: float = 5.0

    roof_age_threshold: float = 15.0
    roof_cost_per_sqft: float = 4.0

    hvac_age_threshold: float = 12.0
    hvac_base_cost: float = 5000.0
    hvac_large_home_sqft: float = 2000.0
    hvac_large_home_extra: float = 2000.0

    system_condition_threshold: float = 5.0
    plumbing_base_cost: float = 3000.0
    plumbing_per_sqft: float = 2.0
    electrical_base_cost: float = 2500.0
    electrical_per_sqft: float = 3.0

    foundation_cost: float = 8000.0

    cosmetic_costs: Mapping[str, float] = field(
        default_factory=lambda: _frozen({"light": 3000.0, "medium": 8000.0, "heavy": 15000.0})
    )
    default_cosmetic_tier: str = "medium"

    contingency_pct: float = 0.10


# ----------------------------
# Offers
# ----------------------------

@dataclass(frozen=True)
class StrategyTerms:
    max_offer_pct: float
    assignment_fee_applies: bool = False


@dataclass(frozen=True)
class OfferPolicy:
    strategies: Mapping[str, StrategyTerms] = field(
        default_factory=lambda: _frozen(
            {
                "wholesale": StrategyTerms(max_offer_pct=0.70, assignment_fee_applies=True),
                "subject_to": StrategyTerms(max_offer_pct=0.80),
                "wraparound": StrategyTerms(max_offer_pct=0.85),
                "default": StrategyTerms(max_offer_pct=0.70),
            }
        )
    )
    holding_cost_per_month: float = 500.0
    default_holding_months: int = 3
    target_profit: float = 15000.0
    assignment_fee: float = 10000.0
    closing_cost_pct: float = 0.03

    initial_offer_ratio: float = 0.85
    counter_low_ratio: float = 0.90
    counter_high_ratio: float = 1.00

    # MAO >= this share of asking => negotiable
    negotiable_fraction: float = 0.85


# ----------------------------
# Deal & risk scoring
# ----------------------------

@dataclass(frozen=True)
class DealScorePolicy:
    weights: Mapping[str, float] = field(
        default_factory=lambda: _frozen(
            {
                "equity": 0.25,
                "valuation_confidence": 0.20,
                "condition": 0.15,
                "motivation": 0.15,
                "location": 0.10,
                "market_trend": 0.10,
                "days_on_market": 0.05,
            }
        )
    )
    equity_ratio_ceiling: float = 0.25
    confidence_scalars: Mapping[str, float] = field(
        default_factory=lambda: _frozen({"high": 1.0, "medium": 0.7, "low": 0.4})
    )
    trend_scalars: Mapping[str, float] = field(
        default_factory=lambda: _frozen({"up": 1.0, "stable": 0.7, "down": 0.4})
    )
    days_on_market_ceiling: float = 90.0

    default_condition: float = 5.0
    default_motivation: float = 0.5
    default_location: float = 0.5

    # (min deal score, max risk score, min equity spread)
    strong_buy: tuple[float, float, float] = (75.0, 30.0, 20000.0)
    buy: tuple[float, float, float] = (60.0, 50.0, 10000.0)
    consider: tuple[float, float] = (45.0, 60.0)

    success_deal_weight: float = 0.7
    success_floor: float = 5.0
    success_ceiling: float = 95.0

    assignment_fee_spread_share: float = 0.5


@dataclass(frozen=True)
class RiskPolicy:
    title_issues: float = 25.0
    structural: float = 20.0
    declining_market: float = 15.0
    seller_reliability: float = 15.0
    default_seller_reliability: float = 7.0
    financing_contingent: float = 7.5
    legal_complexity: float = 10.0


@dataclass(frozen=True)
class SubjectToPolicy:
    equity_points: float = 30.0
    equity_ceiling: float = 100000.0
    cashflow_points: float = 25.0
    cashflow_ceiling: float = 500.0
    rate_points: float = 15.0
    rate_ceiling_pct: float = 8.0
    term_points: float = 15.0
    term_ceiling_months: float = 360.0
    condition_points: float = 10.0
    motivation_points: float = 5.0

    base_risk: float = 20.0
    late_payments: float = 15.0
    bankruptcy: float = 20.0
    multiple_liens: float = 10.0
    adjustable_rate: float = 15.0
    balloon_payment: float = 20.0

    # (min deal score, max risk score, min monthly cash flow)
    strong_buy: tuple[float, float, float] = (70.0, 40.0, 300.0)
    buy: tuple[float, float, float] = (55.0, 55.0, 100.0)
    consider_min_score: float = 40.0

    default_appreciation: float = 0.03
    high_ltv: float = 0.9


# ----------------------------
# Buyer matching
# ----------------------------

@dataclass(frozen=True)
class MatchPolicy:
    budget_points: float = 30.0
    budget_overage_tolerance: float = 0.10
    budget_overage_points: float = 10.0
    budget_missing_points: float = 15.0

    strategy_points: float = 25.0
    strategy_missing_points: float = 10.0

    location_points: float = 25.0
    location_state_points: float = 15.0
    location_keyword_points: float = 10.0
    location_missing_points: float = 12.0

    verified_points: float = 10.0

    recency_points: float = 10.0
    recency_partial_points: float = 5.0
    recency_full_days: int = 30
    recency_partial_days: int = 90

    min_score: float = 50.0

    # descending (floor, label)
    confidence_breakpoints: tuple[tuple[float, str], ...] = (
        (80.0, "very high"),
        (70.0, "high"),
        (50.0, "medium"),
    )

    # explicit deal-type <-> investment-type verdicts that override substring containment
    strategy_overrides: Mapping[frozenset, bool] = field(
        default_factory=lambda: _frozen(
            {
                frozenset({"wholesaling", "fix & flip"}): True,
                frozenset({"wholesaling", "wholesale buyer"}): True,
                frozenset({"sub2", "subject-to"}): True,
                frozenset({"sub2", "creative finance"}): True,
                frozenset({"land", "commercial"}): False,
            }
        )
    )


@dataclass(frozen=True)
class ScoringPolicy:
    valuation: ValuationPolicy = field(default_factory=ValuationPolicy)
    repairs: RepairPolicy = field(default_factory=RepairPolicy)
    offers: OfferPolicy = field(default_factory=OfferPolicy)
    deal: DealScorePolicy = field(default_factory=DealScorePolicy)
    risk: RiskPolicy = field(default_factory=RiskPolicy)
    subject_to: SubjectToPolicy = field(default_factory=SubjectToPolicy)
    matching: MatchPolicy = field(default_factory=MatchPolicy)


DEFAULT_POLICY = ScoringPolicy()


def policy_from_config(cfg, base: ScoringPolicy = DEFAULT_POLICY) -> ScoringPolicy:
    """Overlay the market knobs exposed through AppConfig onto a base policy."""
    offers = replace(
        base.offers,
        holding_cost_per_month=float(cfg.HOLDING_COST_PER_MONTH),
        default_holding_months=int(cfg.DEFAULT_HOLDING_MONTHS),
        target_profit=float(cfg.TARGET_PROFIT),
        assignment_fee=float(cfg.ASSIGNMENT_FEE),
        closing_cost_pct=float(cfg.CLOSING_COST_PCT),
    )
    matching = replace(base.matching, min_score=float(cfg.MIN_MATCH_SCORE))
    return replace(base, offers=offers, matching=matching)
