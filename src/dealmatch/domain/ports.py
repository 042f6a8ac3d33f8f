# src/dealmatch/domain/ports.py
from __future__ import annotations

from typing import NamedTuple, Protocol, TypedDict


# ----------------------------
# Location matching
# ----------------------------

class ParsedLocation(TypedDict):
    zipcode: str
    state: str
    city: str
    keywords: frozenset[str]


class LocationScore(NamedTuple):
    points: float
    reason: str | None


class LocationMatcher(Protocol):
    """
    Scores how well a property's location fits a buyer's stated areas.

    The default implementation does loose substring search over free text;
    a geocoded-radius matcher can be dropped in without touching the
    buyer matcher.
    """

    def score(self, location: ParsedLocation, preferred_areas: str | None) -> LocationScore:
        ...
