# src/dealmatch/analysis/valuation.py
from __future__ import annotations

from typing import Sequence

import numpy as np

from dealmatch.domain.policy import DEFAULT_POLICY, ValuationPolicy
from dealmatch.domain.property import ComparableSale, PropertyRecord
from dealmatch.domain.results import AdjustedComp, CompAdjustment, ValuationResult


def _diff(subject: float, comp: float) -> float:
    # unknown on either side => no adjustment for that dimension
    if not subject or not comp:
        return 0.0
    return float(subject) - float(comp)


def _adjust_comp(
    subject: PropertyRecord,
    comp: ComparableSale,
    policy: ValuationPolicy,
) -> tuple[float, list[CompAdjustment]]:
    adjusted = float(comp.sale_price)
    factors: list[CompAdjustment] = []

    post_repair = subject.condition_after_repair or policy.default_post_repair_condition
    comp_condition = comp.condition or policy.default_comp_condition

    steps = (
        ("Square Footage", _diff(subject.sqft, comp.sqft), policy.per_sqft),
        ("Bedrooms", _diff(subject.bedrooms, comp.bedrooms), policy.per_bedroom),
        ("Bathrooms", _diff(subject.bathrooms, comp.bathrooms), policy.per_bathroom),
        # newer subject than comp => worth more
        ("Age", _diff(subject.year_built, comp.year_built), policy.per_year),
        ("Condition", post_repair - comp_condition, policy.per_condition_point),
    )
    for factor, delta, rate in steps:
        if delta == 0:
            continue
        amount = delta * rate
        adjusted += amount
        factors.append(CompAdjustment(factor=factor, adjustment=round(amount)))

    return adjusted, factors


def confidence_from_cv(cv: float | None, policy: ValuationPolicy) -> str:
    if cv is None or not np.isfinite(cv):
        return "low"
    if cv < policy.cv_high:
        return "high"
    if cv < policy.cv_medium:
        return "medium"
    return "low"


def coefficient_of_variation(values: Sequence[float]) -> float | None:
    """Population std / mean. None when the mean is not positive."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return None
    mean = float(arr.mean())
    if mean <= 0:
        return None
    return float(arr.std(ddof=0) / mean)


def estimate_arv(
    subject: PropertyRecord,
    comps: Sequence[ComparableSale] | None,
    *,
    fallback_arv: float | None = None,
    policy: ValuationPolicy = DEFAULT_POLICY.valuation,
) -> ValuationResult:
    """
    After-repair value from comparable sales.

    Each comp's sale price is adjusted toward the subject (sqft, beds, baths,
    age, post-repair condition); ARV is the plain mean of adjusted prices and
    the confidence tier comes from their coefficient of variation.

    Without comps we return the caller's estimate (or the record's
    `estimated_arv`, then its `market_value`) with low confidence rather
    than failing.
    """
    if not comps:
        if fallback_arv is not None:
            fallback = fallback_arv
        else:
            fallback = subject.estimated_arv or subject.market_value
        fallback = max(float(fallback or 0.0), 0.0)
        return ValuationResult(
            arv=round(fallback),
            confidence="low",
            adjustments=[],
            comp_count=0,
            value_low=round(fallback),
            value_high=round(fallback),
            coefficient_of_variation_pct=None,
        )

    adjusted_values: list[float] = []
    breakdown: list[AdjustedComp] = []
    for idx, comp in enumerate(comps, start=1):
        value, factors = _adjust_comp(subject, comp, policy)
        adjusted_values.append(value)
        breakdown.append(
            AdjustedComp(
                comp=f"Comp {idx}",
                original_price=round(comp.sale_price),
                adjusted_price=round(value),
                adjustments=factors,
            )
        )

    arr = np.asarray(adjusted_values, dtype=float)
    arv = max(float(arr.mean()), 0.0)
    cv = coefficient_of_variation(adjusted_values)

    return ValuationResult(
        arv=round(arv),
        confidence=confidence_from_cv(cv, policy),
        adjustments=breakdown,
        comp_count=len(adjusted_values),
        value_low=round(float(arr.min())),
        value_high=round(float(arr.max())),
        coefficient_of_variation_pct=round(cv * 100.0, 1) if cv is not None else None,
    )
