# src/dealmatch/services/deal_analyzer.py
from __future__ import annotations

from typing import Any, Iterable, Mapping

from dealmatch.adapters.config import config
from dealmatch.adapters.logging_utils import get_logger
from dealmatch.adapters.rehab_estimator import RehabEstimator
from dealmatch.analysis.offers import calculate_offer, check_viability
from dealmatch.analysis.scoring import score_wholesale_deal
from dealmatch.analysis.subject_to import score_subject_to_deal
from dealmatch.analysis.valuation import estimate_arv
from dealmatch.domain.policy import ScoringPolicy, policy_from_config
from dealmatch.domain.ports import LocationMatcher
from dealmatch.domain.property import PropertyRecord
from dealmatch.services.buyer_matcher import match_buyers
from dealmatch.services.guardrails import apply_guardrails
from dealmatch.services.validation import (
    MATCH_REQUIRED_FIELDS,
    prepare_buyers,
    prepare_comps,
    validate_and_prepare_payload,
)

logger = get_logger(__name__)


def default_policy() -> ScoringPolicy:
    return policy_from_config(config)


def _record_dump(prop: PropertyRecord) -> dict[str, Any]:
    return prop.model_dump(mode="json")


def analyze_wholesale_deal(
    raw_payload: Mapping[str, Any],
    comps: Iterable[Mapping[str, Any]] | None = None,
    *,
    holding_months: float | None = None,
    policy: ScoringPolicy | None = None,
) -> dict[str, Any]:
    """
    Main analysis entrypoint: valuation -> repairs -> offer -> verdict.

    Each step hands back a partial update that is applied to a fresh copy of
    the record; nothing is written through shared state. The returned dict
    carries the final record plus every intermediate result for auditing.
    """
    policy = policy or default_policy()
    payload = validate_and_prepare_payload(raw_payload)
    prop = PropertyRecord(**payload)

    valuation = estimate_arv(prop, prepare_comps(comps), policy=policy.valuation)
    prop = prop.apply(valuation.to_update())

    repairs = RehabEstimator(policy.repairs).estimate(prop)
    prop = prop.apply(repairs.to_update())

    offer = calculate_offer(
        arv=prop.arv or 0.0,
        repair_estimate=prop.repair_estimate or 0.0,
        strategy=prop.exit_strategy,
        holding_months=holding_months,
        policy=policy.offers,
    )
    prop = prop.apply(offer.to_update())

    viability = check_viability(offer.mao, prop.asking_price, policy.offers)

    if prop.exit_strategy == "subject_to":
        verdict = score_subject_to_deal(prop, policy=policy.subject_to, deal_policy=policy.deal)
    else:
        verdict = score_wholesale_deal(
            prop,
            valuation_confidence=valuation.confidence,
            deal_policy=policy.deal,
            risk_policy=policy.risk,
        )
    prop = prop.apply(verdict.to_update())

    result: dict[str, Any] = {
        "property": _record_dump(prop),
        "valuation": valuation.as_dict(),
        "repairs": repairs.as_dict(),
        "offer": offer.as_dict(),
        "viability": viability.as_dict(),
        "verdict": verdict.as_dict(),
    }
    result = apply_guardrails(prop, result)

    logger.info(
        "deal_analyzed",
        extra={
            "context": {
                "property_id": prop.id,
                "strategy": prop.exit_strategy,
                "arv": prop.arv,
                "mao": prop.mao,
                "deal_score": verdict.deal_score,
                "risk_score": verdict.risk_score,
                "action": verdict.recommendation.action,
            }
        },
    )
    return result


def analyze_subject_to_deal(
    raw_payload: Mapping[str, Any],
    *,
    policy: ScoringPolicy | None = None,
) -> dict[str, Any]:
    """Score an existing-financing takeover on its loan terms alone."""
    policy = policy or default_policy()
    prop = PropertyRecord(**validate_and_prepare_payload(raw_payload))
    verdict = score_subject_to_deal(prop, policy=policy.subject_to, deal_policy=policy.deal)
    prop = prop.apply(verdict.to_update())
    return {"property": _record_dump(prop), "verdict": verdict.as_dict()}


def evaluate_and_match(
    raw_payload: Mapping[str, Any],
    buyers: Iterable[Any] | None,
    comps: Iterable[Mapping[str, Any]] | None = None,
    *,
    policy: ScoringPolicy | None = None,
    location_matcher: LocationMatcher | None = None,
    now=None,
) -> dict[str, Any]:
    """Full flow: evaluate the deal, then rank buyers against the scored record."""
    policy = policy or default_policy()
    validate_and_prepare_payload(raw_payload, required=MATCH_REQUIRED_FIELDS)
    population = prepare_buyers(buyers)

    result = analyze_wholesale_deal(raw_payload, comps, policy=policy)
    scored = PropertyRecord(**result["property"])

    matches = match_buyers(
        scored,
        population,
        policy=policy.matching,
        location_matcher=location_matcher,
        now=now,
        workers=config.MATCH_WORKERS,
    )
    result["matches"] = [m.as_dict() for m in matches]
    return result
