# src/dealmatch/services/buyer_matcher.py
from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from dealmatch.adapters.logging_utils import get_logger
from dealmatch.analysis.location import FreeTextLocationMatcher, parse_location
from dealmatch.domain.errors import InvalidInput, MissingCollaborator
from dealmatch.domain.policy import DEFAULT_POLICY, MatchPolicy
from dealmatch.domain.ports import LocationMatcher, ParsedLocation
from dealmatch.domain.property import BuyerRecord, PropertyRecord
from dealmatch.domain.results import MatchResult

logger = get_logger(__name__)

_DEAL_TYPE_BY_STRATEGY = {
    "wholesale": "Wholesaling",
    "subject_to": "Sub2",
    "wraparound": "Wraparound",
}

_TOKEN_SPLIT_RE = re.compile(r"[,;/|]")


def deal_type_for(prop: PropertyRecord) -> str:
    if prop.deal_type:
        return prop.deal_type
    return _DEAL_TYPE_BY_STRATEGY.get(prop.exit_strategy, "")


# ---------------------------------------------------------------------
# Strategy compatibility
# ---------------------------------------------------------------------


def substring_match(deal_type: str, investment_type: str) -> bool:
    """Case-insensitive containment checked in both directions."""
    d = deal_type.strip().lower()
    b = investment_type.strip().lower()
    if not d or not b:
        return False
    return d in b or b in d


def strategy_matches(
    deal_type: str,
    investment_type: str,
    overrides: Mapping[frozenset, bool] = DEFAULT_POLICY.matching.strategy_overrides,
) -> bool:
    """
    Containment is the primary rule. A pair listed in `overrides` replaces the
    containment verdict for that pair only, in either direction; a buyer
    string may list several types separated by , ; / or |, and any one
    compatible type is enough.
    """
    d = deal_type.strip().lower()
    b = investment_type.strip().lower()
    tokens = [b] + [t.strip() for t in _TOKEN_SPLIT_RE.split(b) if t.strip()]

    def _verdict(t: str) -> bool:
        key = frozenset({d, t})
        if len(key) == 2 and key in overrides:
            return overrides[key]
        return substring_match(d, t)

    return any(_verdict(t) for t in tokens)


# ---------------------------------------------------------------------
# Per-axis scores: each returns (points, reason or None)
# ---------------------------------------------------------------------


def _budget_score(price: float, buyer: BuyerRecord, p: MatchPolicy) -> tuple[float, Optional[str]]:
    budget = buyer.max_budget
    if not budget:
        return p.budget_missing_points, "No budget limit stated"
    if price <= budget:
        pts = p.budget_points * (budget - price) / budget
        return pts, f"Within budget (${price:,.0f} of ${budget:,.0f})"
    if price <= budget * (1.0 + p.budget_overage_tolerance):
        return p.budget_overage_points, f"Slightly over budget (${price - budget:,.0f} above ${budget:,.0f})"
    return 0.0, None


def _strategy_score(deal_type: str, buyer: BuyerRecord, p: MatchPolicy) -> tuple[float, Optional[str]]:
    if not buyer.investment_type:
        return p.strategy_missing_points, "No investment type stated"
    if deal_type and strategy_matches(deal_type, buyer.investment_type, p.strategy_overrides):
        return p.strategy_points, f"Investment type '{buyer.investment_type}' fits {deal_type}"
    return 0.0, None


def _recency_score(buyer: BuyerRecord, now: datetime, p: MatchPolicy) -> tuple[float, Optional[str]]:
    if buyer.created_at is None:
        return 0.0, None
    age_days = max((now - buyer.created_at).days, 0)
    if age_days <= p.recency_full_days:
        return p.recency_points, f"Recently added ({age_days} days ago)"
    if age_days <= p.recency_partial_days:
        return p.recency_partial_points, f"Added within {p.recency_partial_days} days"
    return 0.0, None


def confidence_label(score: float, p: MatchPolicy = DEFAULT_POLICY.matching) -> str:
    for floor, label in p.confidence_breakpoints:
        if score >= floor:
            return label
    return "low"


def score_buyer(
    prop: PropertyRecord,
    buyer: BuyerRecord,
    *,
    location: ParsedLocation,
    deal_type: str,
    now: datetime,
    location_matcher: LocationMatcher,
    policy: MatchPolicy = DEFAULT_POLICY.matching,
) -> MatchResult:
    """Score one buyer on all five axes. No threshold applied here."""
    price = float(prop.asking_price or 0.0)

    loc = location_matcher.score(location, buyer.preferred_areas)
    verified = (policy.verified_points, "Cash verified") if buyer.cash_verified else (0.0, None)

    axes = (
        ("budget", _budget_score(price, buyer, policy)),
        ("strategy", _strategy_score(deal_type, buyer, policy)),
        ("location", (loc.points, loc.reason)),
        ("verification", verified),
        ("recency", _recency_score(buyer, now, policy)),
    )

    breakdown = {name: round(pts, 2) for name, (pts, _) in axes}
    # a reason for exactly the axes that contributed points
    reasons = [reason for name, (_, reason) in axes if breakdown[name] > 0 and reason]
    total = int(round(sum(pts for _, (pts, _) in axes)))

    return MatchResult(
        buyer=buyer,
        property_id=prop.id,
        score=total,
        confidence=confidence_label(total, policy),
        breakdown=breakdown,
        reasons=reasons,
    )


def match_buyers(
    prop: PropertyRecord,
    buyers: Optional[Iterable[BuyerRecord]],
    *,
    policy: MatchPolicy = DEFAULT_POLICY.matching,
    location_matcher: LocationMatcher | None = None,
    now: datetime | None = None,
    workers: int = 1,
) -> list[MatchResult]:
    """
    Rank active buyers for a scored property.

    Every active buyer is scored independently, results under
    `policy.min_score` are dropped, and the rest are sorted by descending
    score. Ties keep input order.
    """
    if buyers is None:
        raise MissingCollaborator("buyer population is required for matching")
    if not (prop.address or "").strip():
        raise InvalidInput("property address is required for matching")

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    matcher = location_matcher or FreeTextLocationMatcher(policy)
    location = parse_location(prop)
    deal_type = deal_type_for(prop)

    # active flag is read now, never cached
    eligible = [b for b in buyers if b.active]

    def _one(buyer: BuyerRecord) -> MatchResult:
        return score_buyer(
            prop,
            buyer,
            location=location,
            deal_type=deal_type,
            now=now,
            location_matcher=matcher,
            policy=policy,
        )

    if workers and workers > 1 and len(eligible) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            scored = list(pool.map(_one, eligible))
    else:
        scored = [_one(b) for b in eligible]

    matches = [m for m in scored if m.score >= policy.min_score]
    matches.sort(key=lambda m: m.score, reverse=True)

    logger.info(
        "buyer_match_complete",
        extra={
            "context": {
                "property_id": prop.id,
                "eligible": len(eligible),
                "matched": len(matches),
                "top_score": matches[0].score if matches else None,
            }
        },
    )
    return matches
