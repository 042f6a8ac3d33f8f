# src/dealmatch/api/schemas.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PropertyPayload(BaseModel):
    """
    Property facts as posted by the sheet / UI.

    Permissive on purpose: any PropertyRecord field (snake or camelCase) is
    passed through, and coercion happens on the record itself.
    """
    model_config = ConfigDict(extra="allow")


class ArvRequest(BaseModel):
    property: dict[str, Any]
    comps: list[dict[str, Any]] = Field(default_factory=list)
    fallback_arv: float | None = None


class OfferRequest(BaseModel):
    arv: float = 0.0
    repair_estimate: float = 0.0
    strategy: str = "wholesale"
    holding_months: float | None = None
    asking_price: float = 0.0


class WholesaleRequest(BaseModel):
    property: dict[str, Any]
    comps: list[dict[str, Any]] = Field(default_factory=list)
    holding_months: float | None = None


class MatchRequest(BaseModel):
    property: dict[str, Any]
    # None is a client error (no buyer population), [] is just "no matches"
    buyers: list[dict[str, Any]] | None = None
    comps: list[dict[str, Any]] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    """Rich nested dict from the analyzer; permissive so new fields don't break clients."""
    model_config = ConfigDict(extra="allow")
