import importlib.util
import json
from pathlib import Path

from typer.testing import CliRunner

_CLI_PATH = Path(__file__).resolve().parents[1] / "entrypoints" / "cli" / "dealmatch_cli.py"
_spec = importlib.util.spec_from_file_location("dealmatch_cli", _CLI_PATH)
dealmatch_cli = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(dealmatch_cli)
app = dealmatch_cli.app

runner = CliRunner()

BUYERS_CSV = """Buyer ID,Name,Max Budget,Investment Type,Preferred Areas,Cash Verified,Status
B-1,Ann Flipper,"$200,000",Fix & Flip,62704,Yes,Active
B-2,Bo Renter,90000,Rental,Boise,No,Active
"""


def _property(tmp_path):
    path = tmp_path / "property.json"
    path.write_text(
        json.dumps(
            {
                "id": "P-1",
                "address": "123 Main St, Springfield, IL 62704",
                "askingPrice": 180_000,
                "estimatedArv": 260_000,
                "sqft": 1500,
                "condition": 6,
            }
        ),
        encoding="utf-8",
    )
    return path


def test_analyze_writes_result(tmp_path):
    out = tmp_path / "out" / "analysis.json"
    result = runner.invoke(app, ["analyze", str(_property(tmp_path)), "--out", str(out)])

    assert result.exit_code == 0, result.output
    body = json.loads(out.read_text(encoding="utf-8"))
    assert body["property"]["arv"] == 260_000
    assert body["offer"]["strategy"] == "wholesale"


def test_match_ranks_buyers_from_csv(tmp_path):
    buyers = tmp_path / "buyers.csv"
    buyers.write_text(BUYERS_CSV, encoding="utf-8")
    out = tmp_path / "matches.json"

    result = runner.invoke(app, ["match", str(_property(tmp_path)), str(buyers), "--out", str(out)])

    assert result.exit_code == 0, result.output
    matches = json.loads(out.read_text(encoding="utf-8"))["matches"]
    assert [m["buyer_id"] for m in matches] == ["B-1"]
