# src/dealmatch/analysis/subject_to.py
from __future__ import annotations

import math
from typing import Any, Dict, List

from dealmatch.analysis.scoring import clamp, grade, success_probability, unit_scale
from dealmatch.domain.policy import DEFAULT_POLICY, DealScorePolicy, SubjectToPolicy
from dealmatch.domain.property import PropertyRecord
from dealmatch.domain.results import DealVerdict, Recommendation, SwotAnalysis

_EXIT_STRATEGIES = (
    {"strategy": "Wrap Mortgage", "viability": "high", "notes": "Sell with seller financing at a higher rate"},
    {"strategy": "Lease Option", "viability": "high", "notes": "Lease with option to purchase"},
    {"strategy": "Refinance", "viability": "medium", "notes": "Refinance into your own loan after seasoning"},
    {"strategy": "Sell Outright", "viability": "medium", "notes": "Pay off existing loan at sale"},
)


def _arv(prop: PropertyRecord) -> float:
    return float(prop.arv if prop.arv is not None else prop.estimated_arv or 0.0)


def monthly_cashflow(prop: PropertyRecord) -> float:
    return float(prop.monthly_rent) - float(prop.monthly_payment)


def subject_to_deal_score(prop: PropertyRecord, policy: SubjectToPolicy = DEFAULT_POLICY.subject_to) -> float:
    equity_position = _arv(prop) - prop.existing_mortgage_balance
    cashflow = monthly_cashflow(prop)
    condition = prop.condition or 5.0

    score = (
        clamp(equity_position / policy.equity_ceiling, 0.0, 1.0) * policy.equity_points
        + clamp(cashflow / policy.cashflow_ceiling, 0.0, 1.0) * policy.cashflow_points
        # lower rate is better
        + clamp((policy.rate_ceiling_pct - prop.interest_rate) / policy.rate_ceiling_pct, 0.0, 1.0)
        * policy.rate_points
        + clamp(prop.remaining_term / policy.term_ceiling_months, 0.0, 1.0) * policy.term_points
        + clamp(condition / 10.0, 0.0, 1.0) * policy.condition_points
        + unit_scale(prop.seller_motivation, 0.5) * policy.motivation_points
    )
    return round(clamp(score, 0.0, 100.0), 1)


def subject_to_risk_score(prop: PropertyRecord, policy: SubjectToPolicy = DEFAULT_POLICY.subject_to) -> float:
    # due-on-sale exposure is always present
    risk = policy.base_risk
    if prop.late_payments:
        risk += policy.late_payments
    if prop.bankruptcy_history:
        risk += policy.bankruptcy
    if prop.multiple_mortgages or prop.liens:
        risk += policy.multiple_liens
    if prop.adjustable_rate:
        risk += policy.adjustable_rate
    if prop.balloon_payment:
        risk += policy.balloon_payment
    return round(clamp(risk, 0.0, 100.0), 1)


def recommend_subject_to(
    deal_score: float,
    risk_score: float,
    cashflow: float,
    policy: SubjectToPolicy = DEFAULT_POLICY.subject_to,
) -> Recommendation:
    s_min, r_max, cf_min = policy.strong_buy
    if deal_score >= s_min and risk_score <= r_max and cashflow >= cf_min:
        return Recommendation(
            "STRONG BUY",
            "Excellent Sub2 opportunity with strong cashflow and manageable risk.",
            "high",
        )
    s_min, r_max, cf_min = policy.buy
    if deal_score >= s_min and risk_score <= r_max and cashflow >= cf_min:
        return Recommendation(
            "BUY",
            "Solid Sub2 deal. Ensure proper legal structure and insurance.",
            "medium",
        )
    if deal_score >= policy.consider_min_score:
        return Recommendation("CONSIDER", "Marginal Sub2 deal. May work with creative exit strategy.", "low")
    return Recommendation("PASS", "Sub2 risk too high for potential returns.", "none")


def assess_due_on_sale(prop: PropertyRecord, policy: SubjectToPolicy = DEFAULT_POLICY.subject_to) -> Dict[str, Any]:
    """Likelihood that the lender calls the loan after transfer."""
    level = "low"
    factors: List[str] = []

    lender = (prop.lender_type or "").lower()
    if lender == "portfolio":
        factors.append("Portfolio lender - typically less aggressive")
    elif lender == "national":
        level = "medium"
        factors.append("National lender - moderate enforcement")

    if (prop.payment_history or "").lower() == "perfect":
        factors.append("Perfect payment history reduces risk")

    if prop.loan_to_value > policy.high_ltv:
        level = "medium"
        factors.append("High LTV may trigger lender attention")

    return {"level": level, "factors": factors}


def equity_buildup(balance: float, monthly_payment: float, rate_pct: float, months: int) -> float:
    """Principal paid down over `months` of a simple amortization."""
    r = rate_pct / 100.0 / 12.0
    principal_paid = 0.0
    for _ in range(months):
        if balance <= 0:
            break
        interest = balance * r
        principal = min(monthly_payment - interest, balance)
        principal_paid += principal
        balance -= principal
    return round(principal_paid)


def holding_period_analysis(prop: PropertyRecord, policy: SubjectToPolicy = DEFAULT_POLICY.subject_to) -> Dict[str, Any]:
    cashflow = monthly_cashflow(prop)
    appreciation = prop.appreciation if prop.appreciation is not None else policy.default_appreciation
    arv = _arv(prop)

    if cashflow > 0:
        break_even: Any = "Immediate positive cashflow"
    elif arv > 0 and appreciation > 0:
        break_even = math.ceil(abs(cashflow) * 12 / (arv * appreciation))
    else:
        break_even = None

    return {
        "break_even_months": break_even,
        "five_year_projection": {
            "cashflow": round(cashflow * 60),
            "appreciation": round(arv * (1 + appreciation) ** 5 - arv),
            "equity_buildup": equity_buildup(
                prop.existing_mortgage_balance, prop.monthly_payment, prop.interest_rate, 60
            ),
        },
    }


def _swot(prop: PropertyRecord, cashflow: float, policy: SubjectToPolicy) -> SwotAnalysis:
    out = SwotAnalysis()
    if 0 < prop.interest_rate < 5:
        out.strengths.append("Below-market interest rate")
    if prop.remaining_term > 240:
        out.strengths.append("Long remaining loan term")
    if cashflow > 400:
        out.strengths.append("Strong monthly cashflow")
    if (prop.payment_history or "").lower() == "perfect":
        out.strengths.append("Perfect payment history")

    if prop.adjustable_rate:
        out.weaknesses.append("Adjustable rate mortgage")
    if prop.balloon_payment:
        out.weaknesses.append("Balloon payment pending")
    if prop.late_payments:
        out.weaknesses.append("History of late payments")
    if prop.loan_to_value > policy.high_ltv:
        out.weaknesses.append("Limited equity cushion")
    return out


def score_subject_to_deal(
    prop: PropertyRecord,
    *,
    policy: SubjectToPolicy = DEFAULT_POLICY.subject_to,
    deal_policy: DealScorePolicy = DEFAULT_POLICY.deal,
) -> DealVerdict:
    arv = _arv(prop)
    equity_position = arv - prop.existing_mortgage_balance
    cashflow = monthly_cashflow(prop)
    price = prop.asking_price
    coc = cashflow * 12 / price * 100.0 if price > 0 else 0.0

    d_score = subject_to_deal_score(prop, policy)
    r_score = subject_to_risk_score(prop, policy)

    return DealVerdict(
        deal_score=d_score,
        risk_score=r_score,
        success_probability=success_probability(d_score, r_score, deal_policy),
        recommendation=recommend_subject_to(d_score, r_score, cashflow, policy),
        grade=grade(d_score),
        metrics={
            "equity_position": round(equity_position),
            "equity_capture": round(equity_position - price),
            "monthly_cashflow": round(cashflow),
            "annual_cashflow": round(cashflow * 12),
            "cash_on_cash_return_pct": round(coc, 1),
            "interest_rate_pct": round(prop.interest_rate, 2),
        },
        analysis=_swot(prop, cashflow, policy),
        extras={
            "due_on_sale_risk": assess_due_on_sale(prop, policy),
            "exit_strategies": [dict(e) for e in _EXIT_STRATEGIES],
            "holding_period": holding_period_analysis(prop, policy),
        },
    )
