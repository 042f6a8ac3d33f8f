# src/dealmatch/analysis/location.py
from __future__ import annotations

import re

from dealmatch.domain.policy import DEFAULT_POLICY, MatchPolicy
from dealmatch.domain.ports import LocationScore, ParsedLocation
from dealmatch.domain.property import PropertyRecord

_ZIP_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")
_STATE_ZIP_RE = re.compile(r"\b([A-Za-z]{2})\s+\d{5}(?:-\d{4})?\b")
_WORD_RE = re.compile(r"[a-z][a-z'\-]+")

_STOPWORDS = frozenset(
    {
        "street", "avenue", "road", "drive", "lane", "court", "place", "boulevard",
        "circle", "terrace", "highway", "parkway", "apt", "unit", "suite",
        "north", "south", "east", "west",
    }
)


def parse_location(prop: PropertyRecord) -> ParsedLocation:
    """
    Pull ZIP / state / city / keyword tokens out of a record.

    Structured fields win; otherwise we fall back to parsing a
    "123 Main St, Springfield, IL 62704" style address.
    """
    address = prop.address or ""
    segments = [s.strip() for s in address.split(",") if s.strip()]

    zipcode = prop.zipcode.strip()
    if not zipcode:
        m = _ZIP_RE.search(address)
        zipcode = m.group(1) if m else ""

    state = prop.state.strip()
    if not state:
        m = _STATE_ZIP_RE.search(address)
        state = m.group(1) if m else ""

    city = prop.city.strip()
    if not city and len(segments) >= 3:
        # street, city, "ST 12345"
        city = segments[-2]

    text = " ".join([address, city]).lower()
    keywords = frozenset(
        w for w in _WORD_RE.findall(text) if len(w) >= 4 and w not in _STOPWORDS
    )

    return ParsedLocation(
        zipcode=zipcode[:5],
        state=state.lower(),
        city=city.lower(),
        keywords=keywords,
    )


class FreeTextLocationMatcher:
    """
    Loose substring search over a buyer's free-text "preferred areas".

    Priority: ZIP, city, state, any address keyword. First hit wins.
    """

    def __init__(self, policy: MatchPolicy = DEFAULT_POLICY.matching) -> None:
        self.policy = policy

    def score(self, location: ParsedLocation, preferred_areas: str | None) -> LocationScore:
        p = self.policy
        prefs = (preferred_areas or "").strip().lower()
        if not prefs:
            return LocationScore(p.location_missing_points, "No location preference (open to any area)")

        if location["zipcode"] and location["zipcode"] in prefs:
            return LocationScore(p.location_points, f"Prefers ZIP {location['zipcode']}")

        if location["city"] and location["city"] in prefs:
            return LocationScore(p.location_points, f"Prefers {location['city'].title()}")

        # two-letter states need word boundaries or "in"/"or" hit everywhere
        state = location["state"]
        if state and re.search(rf"\b{re.escape(state)}\b", prefs):
            return LocationScore(p.location_state_points, f"Buys in {state.upper()}")

        for kw in sorted(location["keywords"]):
            if kw in prefs:
                return LocationScore(p.location_keyword_points, f"Area keyword match: {kw}")

        return LocationScore(0.0, None)
