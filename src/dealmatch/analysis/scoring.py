# src/dealmatch/analysis/scoring.py
from __future__ import annotations

from typing import Dict, Mapping

from dealmatch.domain.policy import DEFAULT_POLICY, DealScorePolicy, RiskPolicy
from dealmatch.domain.property import PropertyRecord
from dealmatch.domain.results import DealVerdict, Recommendation, SwotAnalysis


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(float(x), hi))


def unit_scale(value: float | None, default: float) -> float:
    """
    Normalize a 0-1 signal. Values of 1 and above are read as a 1-10
    rating, so both 0.8 and 8 mean "80%" and a rating of 1 means 10%.
    """
    if value is None:
        return default
    v = float(value)
    if v >= 1.0:
        v = v / 10.0
    return clamp(v, 0.0, 1.0)


_GRADES = (
    (90.0, "A+"),
    (85.0, "A"),
    (80.0, "A-"),
    (75.0, "B+"),
    (70.0, "B"),
    (65.0, "B-"),
    (60.0, "C+"),
    (55.0, "C"),
    (50.0, "C-"),
    (45.0, "D+"),
    (40.0, "D"),
)


def grade(score: float) -> str:
    for floor, letter in _GRADES:
        if score >= floor:
            return letter
    return "F"


# =====================================================================
# Deal score
# =====================================================================


def confidence_scalar(confidence: str | float | None, policy: DealScorePolicy) -> float:
    if confidence is None:
        return policy.confidence_scalars["low"]
    if isinstance(confidence, (int, float)):
        return clamp(confidence, 0.0, 1.0)
    return policy.confidence_scalars.get(str(confidence).lower(), policy.confidence_scalars["low"])


def deal_score_components(
    *,
    equity_ratio: float,
    valuation_confidence: str | float | None,
    condition: float | None,
    motivation: float | None,
    location: float | None,
    market_trend: str | None,
    days_on_market: float | None,
    policy: DealScorePolicy = DEFAULT_POLICY.deal,
) -> Dict[str, float]:
    """Each factor normalized to [0, 1] before weighting."""
    c = condition or policy.default_condition
    trend = str(market_trend or "stable").lower()
    dom = max(float(days_on_market or 0.0), 0.0)

    return {
        "equity": clamp(equity_ratio / policy.equity_ratio_ceiling, 0.0, 1.0),
        "valuation_confidence": confidence_scalar(valuation_confidence, policy),
        # worse condition = more room for the investor
        "condition": clamp((10.0 - float(c)) / 10.0, 0.0, 1.0),
        "motivation": unit_scale(motivation, policy.default_motivation),
        "location": unit_scale(location, policy.default_location),
        "market_trend": policy.trend_scalars.get(trend, policy.trend_scalars["stable"]),
        "days_on_market": min(dom / policy.days_on_market_ceiling, 1.0),
    }


def weighted_score(components: Mapping[str, float], weights: Mapping[str, float]) -> float:
    total = sum(weights[k] * components.get(k, 0.0) for k in weights)
    return round(clamp(total * 100.0, 0.0, 100.0), 1)


# =====================================================================
# Risk score
# =====================================================================


def risk_score(prop: PropertyRecord, policy: RiskPolicy = DEFAULT_POLICY.risk) -> float:
    """
    Additive hazard score; lower is better. Not a weighted split of 100,
    just penalties that are clamped at the end.
    """
    risk = 0.0

    if prop.title_issues:
        risk += policy.title_issues

    if prop.foundation_issues or prop.structural_damage:
        risk += policy.structural

    if prop.market_trend == "down":
        risk += policy.declining_market

    reliability = prop.seller_reliability
    if reliability is None:
        reliability = policy.default_seller_reliability
    reliability = clamp(reliability, 0.0, 10.0)
    risk += (10.0 - reliability) / 10.0 * policy.seller_reliability

    if prop.financing_contingent:
        risk += policy.financing_contingent

    if prop.probate or prop.divorce or prop.liens:
        risk += policy.legal_complexity

    return round(clamp(risk, 0.0, 100.0), 1)


def success_probability(
    deal_score: float,
    risk_score: float,
    policy: DealScorePolicy = DEFAULT_POLICY.deal,
) -> float:
    w = policy.success_deal_weight
    p = deal_score * w + (100.0 - risk_score) * (1.0 - w)
    # never claim certainty either way
    return round(clamp(p, policy.success_floor, policy.success_ceiling), 1)


def recommend(
    deal_score: float,
    risk_score: float,
    equity_spread: float,
    policy: DealScorePolicy = DEFAULT_POLICY.deal,
) -> Recommendation:
    s_min, r_max, e_min = policy.strong_buy
    if deal_score >= s_min and risk_score <= r_max and equity_spread >= e_min:
        return Recommendation(
            "STRONG BUY",
            "Excellent deal with strong fundamentals. Proceed with confidence.",
            "high",
        )
    s_min, r_max, e_min = policy.buy
    if deal_score >= s_min and risk_score <= r_max and equity_spread >= e_min:
        return Recommendation(
            "BUY",
            "Good deal with acceptable risk. Proceed with standard due diligence.",
            "medium",
        )
    s_min, r_max = policy.consider
    if deal_score >= s_min and risk_score <= r_max:
        return Recommendation(
            "CONSIDER",
            "Marginal deal. Proceed only if you can negotiate better terms.",
            "low",
        )
    return Recommendation(
        "PASS",
        "Deal does not meet investment criteria. Risk outweighs potential reward.",
        "none",
    )


# =====================================================================
# Qualitative tags (explanatory only, never fed back into scores)
# =====================================================================


def identify_swot(
    prop: PropertyRecord,
    *,
    deal_score: float,
    risk_score: float,
    equity_spread: float,
) -> SwotAnalysis:
    out = SwotAnalysis()

    if equity_spread > 30000:
        out.strengths.append("Strong equity position")
    if unit_scale(prop.seller_motivation, 0.0) >= 0.8:
        out.strengths.append("Highly motivated seller")
    if prop.days_on_market > 60:
        out.strengths.append("Extended market time creates negotiation leverage")
    if unit_scale(prop.location_score, 0.0) >= 0.7:
        out.strengths.append("Desirable location")
    if deal_score >= 70:
        out.strengths.append("Above-average deal metrics")

    if 0 < prop.condition <= 4:
        out.weaknesses.append("Significant repairs needed")
    if prop.title_issues:
        out.weaknesses.append("Title issues present")
    if prop.foundation_issues:
        out.weaknesses.append("Foundation concerns")
    if risk_score > 50:
        out.weaknesses.append("Elevated overall risk profile")

    if (prop.zoning or "").lower() == "multi-family":
        out.opportunities.append("Potential for unit conversion")
    if prop.lot_size > 10000:
        out.opportunities.append("Large lot - subdivision potential")
    if prop.market_trend == "up":
        out.opportunities.append("Appreciating market")
    out.opportunities.append("Assignment fee opportunity")

    if prop.market_trend == "down":
        out.threats.append("Declining market values")
    if (prop.competition or "").lower() == "high":
        out.threats.append("High investor competition in area")
    if (prop.economic_factors or "").lower() == "negative":
        out.threats.append("Negative local economic indicators")

    return out


# =====================================================================
# Wholesale verdict
# =====================================================================


def score_wholesale_deal(
    prop: PropertyRecord,
    *,
    valuation_confidence: str | float | None = None,
    deal_policy: DealScorePolicy = DEFAULT_POLICY.deal,
    risk_policy: RiskPolicy = DEFAULT_POLICY.risk,
) -> DealVerdict:
    """
    Score a record that already carries ARV, repairs and MAO.

    Missing ARV degrades to a zero equity ratio instead of dividing by zero.
    """
    arv = float(prop.arv or 0.0)
    price = float(prop.asking_price or 0.0)
    mao = float(prop.mao or 0.0)
    spread = prop.equity_spread
    equity_ratio = spread / arv if arv > 0 else 0.0

    components = deal_score_components(
        equity_ratio=equity_ratio,
        valuation_confidence=valuation_confidence or prop.arv_confidence,
        condition=prop.condition,
        motivation=prop.seller_motivation,
        location=prop.location_score,
        market_trend=prop.market_trend,
        days_on_market=prop.days_on_market,
        policy=deal_policy,
    )
    d_score = weighted_score(components, deal_policy.weights)
    r_score = risk_score(prop, risk_policy)

    fee_estimate = max(min(spread * deal_policy.assignment_fee_spread_share, mao - price), 0.0)
    roi = fee_estimate / price * 100.0 if price > 0 else 0.0
    margin = spread / arv * 100.0 if arv > 0 else 0.0

    metrics = {
        "max_allowable_offer": round(mao),
        "equity_spread": round(spread),
        "assignment_fee_estimate": round(fee_estimate),
        "roi_pct": round(roi, 1),
        "profit_margin_pct": round(margin, 1),
    }

    return DealVerdict(
        deal_score=d_score,
        risk_score=r_score,
        success_probability=success_probability(d_score, r_score, deal_policy),
        recommendation=recommend(d_score, r_score, spread, deal_policy),
        grade=grade(d_score),
        metrics=metrics,
        analysis=identify_swot(prop, deal_score=d_score, risk_score=r_score, equity_spread=spread),
        extras={"components": {k: round(v, 3) for k, v in components.items()}},
    )
