import pytest

from dealmatch.analysis.subject_to import (
    assess_due_on_sale,
    equity_buildup,
    holding_period_analysis,
    score_subject_to_deal,
    subject_to_deal_score,
    subject_to_risk_score,
)
from dealmatch.domain.property import PropertyRecord


def _loan(**kw) -> PropertyRecord:
    base = dict(
        address="44 Oak Ave, Tulsa, OK 74103",
        asking_price=160_000,
        monthly_rent=1800,
        monthly_payment=1200,
        estimated_arv=250_000,
        existing_mortgage_balance=150_000,
        interest_rate=4,
        remaining_term=300,
        condition=7,
    )
    base.update(kw)
    return PropertyRecord(**base)


def test_favorable_loan_scores_high():
    v = score_subject_to_deal(_loan())

    assert v.deal_score == pytest.approx(84.5)
    assert v.risk_score == pytest.approx(20.0)  # due-on-sale floor
    assert v.recommendation.action == "STRONG BUY"
    assert v.metrics["monthly_cashflow"] == 600
    assert v.metrics["annual_cashflow"] == 7_200
    assert v.metrics["equity_position"] == 100_000
    assert v.metrics["cash_on_cash_return_pct"] == pytest.approx(4.5)


def test_scored_arv_wins_over_record_estimate():
    assert subject_to_deal_score(_loan(arv=160_000)) < subject_to_deal_score(_loan())


def test_every_loan_hazard_saturates_risk():
    prop = _loan(
        late_payments=True,
        bankruptcy_history=True,
        multiple_mortgages=True,
        adjustable_rate=True,
        balloon_payment=True,
    )
    assert subject_to_risk_score(prop) == 100.0


def test_negative_cashflow_blocks_buy():
    v = score_subject_to_deal(_loan(monthly_rent=900))
    assert v.recommendation.action in ("CONSIDER", "PASS")


def test_due_on_sale_levels():
    assert assess_due_on_sale(_loan(lender_type="Portfolio"))["level"] == "low"
    assert assess_due_on_sale(_loan(lender_type="National"))["level"] == "medium"
    high_ltv = assess_due_on_sale(_loan(loan_to_value=0.95))
    assert high_ltv["level"] == "medium"
    assert "High LTV may trigger lender attention" in high_ltv["factors"]


def test_equity_buildup_without_interest_is_straight_paydown():
    assert equity_buildup(100_000, 1_000, 0, 60) == 60_000


def test_equity_buildup_stops_at_payoff():
    assert equity_buildup(5_000, 1_000, 0, 60) == 5_000


def test_holding_period_reports_immediate_cashflow():
    out = holding_period_analysis(_loan())
    assert out["break_even_months"] == "Immediate positive cashflow"
    assert out["five_year_projection"]["cashflow"] == 36_000
    assert out["five_year_projection"]["equity_buildup"] > 0


def test_holding_period_break_even_from_appreciation():
    out = holding_period_analysis(_loan(monthly_rent=1100, appreciation=0.03))
    # -100/month against 7,500/yr of appreciation
    assert out["break_even_months"] == 1


def test_extras_carry_exit_strategies():
    v = score_subject_to_deal(_loan())
    names = [e["strategy"] for e in v.extras["exit_strategies"]]
    assert names[0] == "Wrap Mortgage"
    assert "Below-market interest rate" in v.analysis.strengths
    assert "Long remaining loan term" in v.analysis.strengths
