# src/dealmatch/adapters/rehab_estimator.py
from __future__ import annotations

from dealmatch.domain.policy import DEFAULT_POLICY, RepairPolicy
from dealmatch.domain.property import PropertyRecord
from dealmatch.domain.results import RepairEstimate, RepairLineItem


class RehabEstimator:
    """
    Estimate repair budget from condition signals and component ages.

    Inputs (all read off a PropertyRecord):
      - sqft
      - condition (1 = needs full rehab, 10 = move-in ready)
      - roof_age / hvac_age in years
      - plumbing_condition / electrical_condition (1-10)
      - foundation_issues flag
      - cosmetic_needs: light | medium | heavy
      - inspection_report flag (confidence only)

    Output:
      - RepairEstimate with a line-item breakdown. Every line is additive;
        contingency is charged on the running total.
    """

    def __init__(self, cfg: RepairPolicy | None = None) -> None:
        self.cfg = cfg or DEFAULT_POLICY.repairs

    def rate_per_sqft(self, condition: float | None) -> float:
        c = condition or self.cfg.default_condition
        c = min(max(float(c), 1.0), 10.0)
        # linear: condition 10 -> min rate, condition 1 -> max rate
        span = self.cfg.max_rate_per_sqft - self.cfg.min_rate_per_sqft
        return self.cfg.min_rate_per_sqft + (10.0 - c) / 9.0 * span

    def _confidence(self, prop: PropertyRecord) -> str:
        if prop.inspection_report:
            return "high"
        has_signal = any(
            (
                prop.condition,
                prop.roof_age,
                prop.hvac_age,
                prop.plumbing_condition,
                prop.electrical_condition,
                prop.foundation_issues,
                prop.cosmetic_needs,
            )
        )
        return "medium" if has_signal else "low"

    def estimate(self, prop: PropertyRecord) -> RepairEstimate:
        cfg = self.cfg
        sqft = max(float(prop.sqft or 0.0), 0.0)
        items: list[RepairLineItem] = []
        total = 0.0

        rate = self.rate_per_sqft(prop.condition)
        base = sqft * rate
        total += base
        items.append(RepairLineItem("General Rehab", round(base), f"${rate:.0f}/sqft"))

        if prop.roof_age > cfg.roof_age_threshold:
            roof = sqft * cfg.roof_cost_per_sqft
            total += roof
            items.append(RepairLineItem("Roof Replacement", round(roof), f"{prop.roof_age:g} years old"))

        if prop.hvac_age > cfg.hvac_age_threshold:
            hvac = cfg.hvac_base_cost
            if sqft > cfg.hvac_large_home_sqft:
                hvac += cfg.hvac_large_home_extra
            total += hvac
            items.append(RepairLineItem("HVAC Replacement", round(hvac), f"{prop.hvac_age:g} years old"))

        # 0 means "not rated"; only a supplied low rating triggers work
        if 0 < prop.plumbing_condition < cfg.system_condition_threshold:
            plumbing = cfg.plumbing_base_cost + sqft * cfg.plumbing_per_sqft
            total += plumbing
            items.append(RepairLineItem("Plumbing Repairs", round(plumbing), "Poor condition"))

        if 0 < prop.electrical_condition < cfg.system_condition_threshold:
            electrical = cfg.electrical_base_cost + sqft * cfg.electrical_per_sqft
            total += electrical
            items.append(RepairLineItem("Electrical Updates", round(electrical), "Needs updating"))

        if prop.foundation_issues:
            total += cfg.foundation_cost
            items.append(RepairLineItem("Foundation Repair", round(cfg.foundation_cost), "Issues identified"))

        tier = (prop.cosmetic_needs or cfg.default_cosmetic_tier).strip().lower()
        if tier not in cfg.cosmetic_costs:
            tier = cfg.default_cosmetic_tier
        cosmetic = cfg.cosmetic_costs[tier]
        total += cosmetic
        items.append(RepairLineItem("Cosmetic Updates", round(cosmetic), f"{tier} level"))

        contingency = total * cfg.contingency_pct
        total += contingency
        items.append(
            RepairLineItem(
                f"Contingency ({cfg.contingency_pct * 100:.0f}%)",
                round(contingency),
                "Buffer for unexpected costs",
            )
        )

        return RepairEstimate(
            total_estimate=round(total),
            breakdown=items,
            confidence=self._confidence(prop),
            per_square_foot=round(total / sqft) if sqft > 0 else 0,
        )


def estimate_repairs(prop: PropertyRecord, policy: RepairPolicy | None = None) -> RepairEstimate:
    return RehabEstimator(policy).estimate(prop)
