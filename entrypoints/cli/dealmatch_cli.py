from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from dealmatch.adapters.storage import load_buyers_csv, load_json
from dealmatch.services.deal_analyzer import analyze_subject_to_deal, analyze_wholesale_deal, evaluate_and_match

app = typer.Typer(help="Deal evaluation & buyer matching from the command line.")


def _emit(result: dict, out: Optional[Path]) -> None:
    text = json.dumps(result, indent=2, default=str)
    if out is None:
        typer.echo(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {out}")


@app.command("analyze")
def analyze_cmd(
    property_json: Path = typer.Argument(..., help="Property facts as a JSON object"),
    comps_json: Optional[Path] = typer.Option(None, "--comps", help="JSON list of comparable sales"),
    holding_months: Optional[float] = typer.Option(None, help="Override the default holding period"),
    sub2: bool = typer.Option(False, "--sub2", help="Score as a subject-to takeover"),
    out: Optional[Path] = typer.Option(None, help="Write the result here instead of stdout"),
) -> None:
    """
    Run valuation, repairs, offer and scoring for one property.
    """
    payload = load_json(property_json)
    if sub2:
        result = analyze_subject_to_deal(payload)
    else:
        comps = load_json(comps_json) if comps_json else None
        result = analyze_wholesale_deal(payload, comps, holding_months=holding_months)

    verdict = result["verdict"]
    logger.info(
        f"{payload.get('address', '?')}: {verdict['recommendation']['action']} "
        f"(deal {verdict['deal_score']}, risk {verdict['risk_score']})"
    )
    _emit(result, out)


@app.command("match")
def match_cmd(
    property_json: Path = typer.Argument(..., help="Property facts as a JSON object"),
    buyers_csv: Path = typer.Argument(..., help="Buyers export, one row per buyer"),
    comps_json: Optional[Path] = typer.Option(None, "--comps", help="JSON list of comparable sales"),
    top: int = typer.Option(10, help="How many matches to print"),
    out: Optional[Path] = typer.Option(None, help="Write the result here instead of stdout"),
) -> None:
    """
    Evaluate a property and rank the buyer list against it.
    """
    payload = load_json(property_json)
    buyers = load_buyers_csv(buyers_csv)
    logger.info(f"Loaded {len(buyers)} buyers from {buyers_csv}")

    comps = load_json(comps_json) if comps_json else None
    result = evaluate_and_match(payload, buyers, comps)
    result["matches"] = result["matches"][:top]

    for m in result["matches"]:
        logger.info(f"{m['score']:>3} {m['confidence']:<9} {m['buyer_name']}: {'; '.join(m['reasons'])}")
    _emit(result, out)


if __name__ == "__main__":
    app()
