# src/dealmatch/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from dealmatch.adapters.logging_utils import get_logger
from dealmatch.adapters.rehab_estimator import RehabEstimator
from dealmatch.analysis.offers import calculate_offer, check_viability
from dealmatch.analysis.valuation import estimate_arv
from dealmatch.domain.errors import EngineError
from dealmatch.services.deal_analyzer import (
    analyze_subject_to_deal,
    analyze_wholesale_deal,
    default_policy,
    evaluate_and_match,
)
from dealmatch.services.validation import prepare_comps, prepare_property

from .schemas import (
    AnalysisResponse,
    ArvRequest,
    MatchRequest,
    OfferRequest,
    PropertyPayload,
    WholesaleRequest,
)

logger = get_logger(__name__)

app = FastAPI(title="dealmatch")


def _bad_request(e: Exception) -> HTTPException:
    logger.warning("request_rejected", extra={"context": {"error": str(e), "type": type(e).__name__}})
    return HTTPException(status_code=400, detail=str(e))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/analyze/arv")
def analyze_arv(req: ArvRequest) -> dict[str, Any]:
    try:
        prop = prepare_property(req.property)
        result = estimate_arv(
            prop,
            prepare_comps(req.comps),
            fallback_arv=req.fallback_arv,
            policy=default_policy().valuation,
        )
        return result.as_dict()
    except (EngineError, ValueError) as e:
        raise _bad_request(e) from e


@app.post("/analyze/repairs")
def analyze_repairs(payload: PropertyPayload) -> dict[str, Any]:
    try:
        prop = prepare_property(payload.model_dump())
        return RehabEstimator(default_policy().repairs).estimate(prop).as_dict()
    except (EngineError, ValueError) as e:
        raise _bad_request(e) from e


@app.post("/analyze/offer")
def analyze_offer(req: OfferRequest) -> dict[str, Any]:
    policy = default_policy().offers
    offer = calculate_offer(
        arv=req.arv,
        repair_estimate=req.repair_estimate,
        strategy=req.strategy,
        holding_months=req.holding_months,
        policy=policy,
    )
    return {
        "offer": offer.as_dict(),
        "viability": check_viability(offer.mao, req.asking_price, policy).as_dict(),
    }


@app.post("/analyze/wholesale", response_model=AnalysisResponse)
def analyze_wholesale(req: WholesaleRequest) -> AnalysisResponse:
    try:
        result = analyze_wholesale_deal(req.property, req.comps, holding_months=req.holding_months)
        return AnalysisResponse(**result)
    except (EngineError, ValueError) as e:
        raise _bad_request(e) from e


@app.post("/analyze/sub2", response_model=AnalysisResponse)
def analyze_sub2(payload: PropertyPayload) -> AnalysisResponse:
    try:
        return AnalysisResponse(**analyze_subject_to_deal(payload.model_dump()))
    except (EngineError, ValueError) as e:
        raise _bad_request(e) from e


@app.post("/buyers/match", response_model=AnalysisResponse)
def buyers_match(req: MatchRequest) -> AnalysisResponse:
    try:
        return AnalysisResponse(**evaluate_and_match(req.property, req.buyers, req.comps))
    except (EngineError, ValueError) as e:
        raise _bad_request(e) from e
