import pytest

from dealmatch.domain.errors import InvalidInput, MissingCollaborator
from dealmatch.domain.policy import DEFAULT_POLICY
from dealmatch.services.deal_analyzer import (
    analyze_subject_to_deal,
    analyze_wholesale_deal,
    evaluate_and_match,
)
from dealmatch.services.validation import validate_and_prepare_payload

PAYLOAD = {
    "id": "P-7",
    "address": "88 Walnut St, Springfield, IL 62704",
    "askingPrice": "$120,000",
    "sqft": 1400,
    "bedrooms": 3,
    "bathrooms": 2,
    "yearBuilt": 1978,
    "condition": 4,
    "roofAge": 18,
    "sellerMotivation": 8,
    "locationScore": 7,
    "marketTrend": "up",
    "daysOnMarket": 75,
    "exitStrategy": "Wholesaling",
}

COMPS = [
    {"salePrice": 240_000, "sqft": 1450, "bedrooms": 3, "bathrooms": 2, "yearBuilt": 1980, "condition": 8},
    {"salePrice": 232_000, "sqft": 1380, "bedrooms": 3, "bathrooms": 2, "yearBuilt": 1975, "condition": 8},
    {"salePrice": 245_000, "sqft": 1500, "bedrooms": 3, "bathrooms": 2, "yearBuilt": 1982, "condition": 8},
]


def test_pipeline_threads_each_stage_into_the_record():
    out = analyze_wholesale_deal(PAYLOAD, COMPS, policy=DEFAULT_POLICY)
    prop = out["property"]

    assert prop["arv"] == out["valuation"]["arv"]
    assert prop["arv_confidence"] == out["valuation"]["confidence"]
    assert prop["repair_estimate"] == out["repairs"]["total_estimate"]
    assert prop["mao"] == out["offer"]["mao"]
    assert prop["deal_score"] == out["verdict"]["deal_score"]
    assert prop["deal_class"] == out["verdict"]["recommendation"]["action"]
    assert out["offer"]["strategy"] == "wholesale"
    assert out["valuation"]["comp_count"] == 3
    assert set(out) >= {"property", "valuation", "repairs", "offer", "viability", "verdict", "guardrails"}


def test_pipeline_mao_matches_offer_formula():
    out = analyze_wholesale_deal(PAYLOAD, COMPS, holding_months=0, policy=DEFAULT_POLICY)
    arv = out["valuation"]["arv"]
    repairs = out["repairs"]["total_estimate"]
    p = DEFAULT_POLICY.offers

    running = arv * 0.70 - repairs - p.target_profit - p.assignment_fee
    assert out["offer"]["mao"] == round(max(running * (1 - p.closing_cost_pct), 0))


def test_unscoreable_deal_is_archived():
    out = analyze_wholesale_deal({"address": "1 Nowhere Rd"}, policy=DEFAULT_POLICY)
    assert out["verdict"]["recommendation"]["action"] == "PASS"
    assert out["property"]["archived"] is True
    codes = {f["code"] for f in out["guardrails"]["flags"]}
    assert {"ASKING_PRICE_MISSING", "ARV_MISSING", "LOW_VALUATION_CONFIDENCE"} <= codes


def test_guardrails_flag_rehab_heavier_than_arv():
    payload = {"address": "2 Ruin Ct", "askingPrice": 20_000, "estimatedArv": 60_000, "sqft": 2400, "condition": 1,
               "foundationIssues": True, "roofAge": 30}
    out = analyze_wholesale_deal(payload, policy=DEFAULT_POLICY)
    flags = {f["code"]: f for f in out["guardrails"]["flags"]}
    assert flags["REHAB_EXCEEDS_ARV"]["severity"] == "error"
    assert "NEGATIVE_EQUITY_SPREAD" in flags
    assert "ASKING_ABOVE_MAO" in flags
    assert out["guardrails"]["has_flags"] is True


def test_subject_to_strategy_routes_to_loan_scorer():
    payload = dict(PAYLOAD, exitStrategy="Sub2", monthlyRent=1800, monthlyPayment=1100,
                   existingMortgageBalance=140_000, interestRate=0.0375, remainingTerm=320)
    out = analyze_wholesale_deal(payload, COMPS, policy=DEFAULT_POLICY)
    assert out["offer"]["strategy"] == "subject_to"
    assert "due_on_sale_risk" in out["verdict"]["extras"]
    assert out["property"]["interest_rate"] == pytest.approx(3.75)


def test_standalone_subject_to_analysis():
    out = analyze_subject_to_deal(
        {"address": "3 Loan Ln", "monthlyRent": 1800, "monthlyPayment": 1200, "estimatedArv": 250_000,
         "existingMortgageBalance": 150_000, "interestRate": 4, "remainingTerm": 300, "condition": 7},
        policy=DEFAULT_POLICY,
    )
    assert out["verdict"]["deal_score"] == pytest.approx(84.5)
    assert out["property"]["deal_class"] == "STRONG BUY"


def test_payload_normalization():
    cleaned = validate_and_prepare_payload({"strategy": "subject-to", "interest_rate": "0.045"})
    assert cleaned["exit_strategy"] == "subject_to"
    assert cleaned["interest_rate"] == pytest.approx(4.5)
    assert validate_and_prepare_payload({})["exit_strategy"] == "wholesale"


def test_match_requires_address():
    with pytest.raises(InvalidInput, match="Missing required field: address"):
        evaluate_and_match({"askingPrice": 100_000}, [], policy=DEFAULT_POLICY)


def test_match_requires_buyer_population():
    with pytest.raises(MissingCollaborator):
        evaluate_and_match(PAYLOAD, None, policy=DEFAULT_POLICY)


def test_evaluate_and_match_ranks_buyers(now):
    buyers = [
        {"id": "B-low", "name": "Far Away", "maxBudget": 50_000, "investmentType": "Rental",
         "preferredAreas": "Boise", "createdAt": "2025-01-01"},
        {"id": "B-top", "name": "Local Flipper", "maxBudget": 200_000, "investmentType": "Fix & Flip",
         "preferredAreas": "Springfield", "cashVerified": "yes", "createdAt": "2026-10-10"},
        {"id": "B-off", "name": "Retired", "status": "Inactive", "preferredAreas": "Springfield"},
    ]
    out = evaluate_and_match(PAYLOAD, buyers, COMPS, policy=DEFAULT_POLICY, now=now)

    ids = [m["buyer_id"] for m in out["matches"]]
    assert ids == ["B-top"]
    top = out["matches"][0]
    assert top["property_id"] == "P-7"
    assert top["score"] >= 50
    assert out["verdict"]["deal_score"] == out["property"]["deal_score"]
