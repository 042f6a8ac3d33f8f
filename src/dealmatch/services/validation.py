# src/dealmatch/services/validation.py

from typing import Any, Iterable, Mapping

from dealmatch.domain.errors import InvalidInput, MissingCollaborator
from dealmatch.domain.property import (
    BuyerRecord,
    ComparableSale,
    PropertyRecord,
    normalize_strategy,
    to_num,
)

# Fields that matching cannot do without
MATCH_REQUIRED_FIELDS = ("address",)


def _missing(raw: Mapping[str, Any], field: str) -> bool:
    val = raw.get(field)
    return val is None or (isinstance(val, str) and not val.strip())


def validate_and_prepare_payload(
    raw: Mapping[str, Any],
    required: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Normalize an incoming property payload before it becomes a PropertyRecord.

    Responsibilities:
      - Ensure required fields exist (only the address, and only for matching).
      - Map exit-strategy spellings ("Sub2", "subject-to", "wrap") onto the
        internal names.
      - Interest rates are carried as percents; 0.045 becomes 4.5.
    Numeric coercion itself happens on the record's validators.
    """
    if raw is None:
        raise InvalidInput("property payload is required")

    for field in required:
        if _missing(raw, field):
            raise InvalidInput(f"Missing required field: {field}")

    cleaned: dict[str, Any] = dict(raw)

    strategy = cleaned.get("exit_strategy", cleaned.get("exitStrategy", cleaned.get("strategy")))
    cleaned.pop("exitStrategy", None)
    cleaned["exit_strategy"] = normalize_strategy(strategy) if strategy else "wholesale"

    for key in ("interest_rate", "interestRate"):
        if key in cleaned:
            ir = to_num(cleaned[key])
            if 0 < ir < 1.0:
                ir *= 100.0
            cleaned[key] = ir

    return cleaned


def prepare_property(raw: Mapping[str, Any], required: Iterable[str] = ()) -> PropertyRecord:
    return PropertyRecord(**validate_and_prepare_payload(raw, required))


def prepare_comps(raw: Iterable[Mapping[str, Any]] | None) -> list[ComparableSale]:
    if not raw:
        return []
    return [c if isinstance(c, ComparableSale) else ComparableSale(**c) for c in raw]


def prepare_buyers(raw: Iterable[Any] | None) -> list[BuyerRecord]:
    if raw is None:
        raise MissingCollaborator("buyer population is required for matching")
    return [b if isinstance(b, BuyerRecord) else BuyerRecord(**b) for b in raw]
