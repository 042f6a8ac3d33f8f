def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_offer_endpoint(client):
    resp = client.post(
        "/analyze/offer",
        json={"arv": 250_000, "repair_estimate": 35_000, "strategy": "Wholesaling", "holding_months": 0,
              "asking_price": 100_000},
    )
    assert resp.status_code == 200
    body = resp.json()
    # (175,000 - 35,000 - 15,000 - 10,000) less 3% closing
    assert body["offer"]["mao"] == 111_550
    assert body["offer"]["strategy"] == "wholesale"
    assert body["viability"]["status"] == "pursue"
    assert body["viability"]["surplus"] == 11_550


def test_arv_endpoint_uses_fallback_without_comps(client):
    resp = client.post("/analyze/arv", json={"property": {"address": "1 A St"}, "fallback_arv": 180_000})
    assert resp.status_code == 200
    assert resp.json()["arv"] == 180_000
    assert resp.json()["confidence"] == "low"


def test_repairs_endpoint(client):
    resp = client.post("/analyze/repairs", json={"sqft": 1000, "condition": 10})
    assert resp.status_code == 200
    assert resp.json()["total_estimate"] == 25_300


def test_wholesale_endpoint(client):
    resp = client.post(
        "/analyze/wholesale",
        json={
            "property": {"address": "5 B St, Peoria, IL 61602", "askingPrice": 90_000, "estimatedArv": 200_000,
                         "sqft": 1200, "condition": 6},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["property"]["arv"] == 200_000
    assert body["verdict"]["recommendation"]["action"] in {"STRONG BUY", "BUY", "CONSIDER", "PASS"}
    assert "guardrails" in body


def test_sub2_endpoint(client):
    resp = client.post(
        "/analyze/sub2",
        json={"address": "3 Loan Ln", "monthlyRent": 1800, "monthlyPayment": 1200, "estimatedArv": 250_000,
              "existingMortgageBalance": 150_000, "interestRate": 4, "remainingTerm": 300, "condition": 7},
    )
    assert resp.status_code == 200
    assert resp.json()["verdict"]["recommendation"]["action"] == "STRONG BUY"


def test_match_without_address_is_bad_request(client):
    resp = client.post("/buyers/match", json={"property": {"askingPrice": 100_000}, "buyers": []})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required field: address"


def test_match_without_buyers_is_bad_request(client):
    resp = client.post("/buyers/match", json={"property": {"address": "9 C St"}})
    assert resp.status_code == 400


def test_match_with_empty_population_returns_no_matches(client):
    resp = client.post("/buyers/match", json={"property": {"address": "9 C St"}, "buyers": []})
    assert resp.status_code == 200
    assert resp.json()["matches"] == []


def test_match_ranks_buyers(client):
    resp = client.post(
        "/buyers/match",
        json={
            "property": {"id": "P-1", "address": "123 Main St, Springfield, IL 62704", "askingPrice": 180_000,
                         "estimatedArv": 260_000, "dealType": "Wholesaling"},
            "buyers": [
                {"id": "B-1", "name": "Ann", "maxBudget": 200_000, "investmentType": "Fix & Flip",
                 "preferredAreas": "62704", "cashVerified": True},
                {"id": "B-2", "name": "Bo", "status": "Inactive"},
            ],
        },
    )
    assert resp.status_code == 200
    matches = resp.json()["matches"]
    assert [m["buyer_id"] for m in matches] == ["B-1"]
    assert matches[0]["buyer_name"] == "Ann"
    assert matches[0]["reasons"]
