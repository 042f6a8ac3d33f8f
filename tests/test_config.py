import pytest
from pydantic import ValidationError

from dealmatch.adapters.config import AppConfig
from dealmatch.domain.policy import DEFAULT_POLICY, policy_from_config


def test_defaults_match_default_policy():
    cfg = AppConfig()
    policy = policy_from_config(cfg)
    assert policy.offers.closing_cost_pct == pytest.approx(DEFAULT_POLICY.offers.closing_cost_pct)
    assert policy.offers.target_profit == DEFAULT_POLICY.offers.target_profit
    assert policy.matching.min_score == DEFAULT_POLICY.matching.min_score


def test_percent_like_closing_cost():
    assert AppConfig(CLOSING_COST_PCT="5%").CLOSING_COST_PCT == pytest.approx(0.05)
    assert AppConfig(CLOSING_COST_PCT="0.04").CLOSING_COST_PCT == pytest.approx(0.04)
    assert AppConfig(CLOSING_COST_PCT=3).CLOSING_COST_PCT == pytest.approx(0.03)


def test_amounts_accept_currency_strings():
    assert AppConfig(TARGET_PROFIT="$20,000").TARGET_PROFIT == 20_000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"CLOSING_COST_PCT": "-1"},
        {"ASSIGNMENT_FEE": -5},
        {"MIN_MATCH_SCORE": 120},
        {"MATCH_WORKERS": -2},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValidationError):
        AppConfig(**kwargs)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEALMATCH_MIN_MATCH_SCORE", "65")
    monkeypatch.setenv("DEALMATCH_HOLDING_COST_PER_MONTH", "750")
    policy = policy_from_config(AppConfig())
    assert policy.matching.min_score == 65
    assert policy.offers.holding_cost_per_month == 750
    # untouched knobs survive
    assert policy.offers.strategies == DEFAULT_POLICY.offers.strategies
    assert policy.valuation == DEFAULT_POLICY.valuation
