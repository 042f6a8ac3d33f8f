# src/dealmatch/analysis/offers.py
from __future__ import annotations

from dealmatch.domain.policy import DEFAULT_POLICY, OfferPolicy
from dealmatch.domain.property import normalize_strategy
from dealmatch.domain.results import OfferResult, OfferViability

_STRATEGY_NOTES = {
    "wholesale": "Wholesale: {pct:.0f}% rule less assignment fee; assign contract to end buyer.",
    "subject_to": "Subject-to: {pct:.0f}% of ARV; existing financing stays in place.",
    "wraparound": "Wraparound: {pct:.0f}% of ARV; resell on seller-financed wrap note.",
    "default": "Standard {pct:.0f}% rule.",
}


def calculate_offer(
    arv: float,
    repair_estimate: float,
    strategy: str | None = "wholesale",
    holding_months: float | None = None,
    policy: OfferPolicy = DEFAULT_POLICY.offers,
) -> OfferResult:
    """
    Maximum allowable offer for an exit strategy.

      MAO = ARV * max_offer_pct
            - repairs
            - holding_months * holding_cost_per_month
            - target_profit
            - assignment_fee          (wholesale only)
      MAO -= MAO * closing_cost_pct

    A negative MAO is clamped to zero; we never suggest a negative offer.
    """
    key = normalize_strategy(strategy)
    terms = policy.strategies.get(key) or policy.strategies["default"]

    arv = max(float(arv or 0.0), 0.0)
    repairs = max(float(repair_estimate or 0.0), 0.0)
    months = policy.default_holding_months if holding_months is None else max(float(holding_months), 0.0)

    max_offer = arv * terms.max_offer_pct
    holding = months * policy.holding_cost_per_month
    fee = policy.assignment_fee if terms.assignment_fee_applies else 0.0

    running = max_offer - repairs - holding - policy.target_profit - fee
    closing = running * policy.closing_cost_pct if running > 0 else 0.0
    mao = max(running - closing, 0.0)

    breakdown = {
        "arv": round(arv),
        "max_offer_pct": terms.max_offer_pct,
        "max_offer_value": round(max_offer),
        "repair_estimate": round(repairs),
        "holding_months": months,
        "holding_costs": round(holding),
        "target_profit": round(policy.target_profit),
        "assignment_fee": round(fee),
        "closing_costs": round(closing),
    }

    return OfferResult(
        strategy=key,
        mao=round(mao),
        suggested_offer=round(mao * policy.initial_offer_ratio),
        counter_low=round(mao * policy.counter_low_ratio),
        counter_high=round(mao * policy.counter_high_ratio),
        breakdown=breakdown,
        note=_STRATEGY_NOTES[key].format(pct=terms.max_offer_pct * 100.0),
    )


def check_viability(
    mao: float,
    asking_price: float,
    policy: OfferPolicy = DEFAULT_POLICY.offers,
) -> OfferViability:
    asking = float(asking_price or 0.0)
    mao = float(mao or 0.0)

    if asking <= 0:
        return OfferViability("insufficient_data", "Asking price unknown; cannot judge the offer.")

    if mao > asking:
        surplus = round(mao - asking)
        return OfferViability(
            "pursue",
            f"Pursue immediately: MAO exceeds asking by ${surplus:,}.",
            surplus=surplus,
        )

    gap = round(asking - mao)
    if mao >= asking * policy.negotiable_fraction:
        return OfferViability(
            "negotiate",
            f"Negotiable: try to close a ${gap:,} gap to asking.",
            gap=gap,
        )

    return OfferViability("pass", f"Pass: ${gap:,} gap to asking is too large.", gap=gap)
