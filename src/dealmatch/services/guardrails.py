# src/dealmatch/services/guardrails.py
from __future__ import annotations

from typing import Any, Dict, List

from dealmatch.adapters.logging_utils import get_logger
from dealmatch.domain.property import PropertyRecord

logger = get_logger(__name__)


def apply_guardrails(
    prop: PropertyRecord,
    result: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Attach sanity checks to a deal analysis result.

    Produces:
        result["guardrails"] = {
            "has_flags": bool,
            "flags": [
                {
                    "code": "REHAB_EXCEEDS_ARV",
                    "severity": "warning" | "error",
                    "message": "...human readable...",
                    "context": {...raw numbers...},
                },
                ...
            ],
        }

    These do *not* block anything or change any score; they just flag
    sketchy deals so the caller can highlight them.
    """
    flags: List[Dict[str, Any]] = []

    asking = float(prop.asking_price or 0.0)
    arv = float(prop.arv or 0.0)
    repairs = float(prop.repair_estimate or 0.0)
    mao = float(prop.mao or 0.0)

    # ------------------------------------------------------------------
    # 1) Basic data sanity
    # ------------------------------------------------------------------
    if asking <= 0:
        flags.append(
            {
                "code": "ASKING_PRICE_MISSING",
                "severity": "warning",
                "message": "Asking price is missing or zero.",
                "context": {"asking_price": asking},
            }
        )

    if arv <= 0:
        flags.append(
            {
                "code": "ARV_MISSING",
                "severity": "warning",
                "message": "No ARV could be derived; supply comps or an estimate.",
                "context": {"arv": arv},
            }
        )

    # ------------------------------------------------------------------
    # 2) Rehab vs ARV
    # ------------------------------------------------------------------
    if arv > 0 and repairs > arv:
        flags.append(
            {
                "code": "REHAB_EXCEEDS_ARV",
                "severity": "error",
                "message": "Repair estimate exceeds ARV. Deal almost certainly does not pencil.",
                "context": {"arv": arv, "repair_estimate": repairs},
            }
        )

    # ------------------------------------------------------------------
    # 3) Asking vs MAO, spread
    # ------------------------------------------------------------------
    if asking > 0 and mao < asking:
        flags.append(
            {
                "code": "ASKING_ABOVE_MAO",
                "severity": "warning",
                "message": "Asking price is above MAO. Negotiate or walk away.",
                "context": {"asking_price": asking, "mao": mao},
            }
        )

    if arv > 0 and prop.equity_spread < 0:
        flags.append(
            {
                "code": "NEGATIVE_EQUITY_SPREAD",
                "severity": "warning",
                "message": "ARV does not cover asking price plus repairs.",
                "context": {"equity_spread": prop.equity_spread},
            }
        )

    # ------------------------------------------------------------------
    # 4) Valuation confidence
    # ------------------------------------------------------------------
    if prop.arv_confidence == "low":
        flags.append(
            {
                "code": "LOW_VALUATION_CONFIDENCE",
                "severity": "warning",
                "message": "ARV confidence is low (no comps or widely dispersed comps).",
                "context": {"arv_confidence": prop.arv_confidence},
            }
        )

    # ------------------------------------------------------------------
    # Attach & log
    # ------------------------------------------------------------------
    result.setdefault("guardrails", {})
    result["guardrails"]["flags"] = flags
    result["guardrails"]["has_flags"] = bool(flags)

    if flags:
        logger.info(
            "deal_guardrails_flags",
            extra={"context": {"property_id": prop.id, "codes": [f["code"] for f in flags]}},
        )

    return result
