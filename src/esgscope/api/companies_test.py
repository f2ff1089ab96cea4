"""
Tests for the companies API.

Run with: pytest src/esgscope/api/companies_test.py -v
"""
import pytest


def make_payload(**overrides) -> dict:
    payload = {
        "name": "Acme Corp",
        "symbol": "ACME",
        "industry": "Industrials",
        "sector": "Machinery",
        "country": "Germany",
        "riskLevel": "Medium",
        "marketCap": 1500000000,
        "revenue": 250000000,
        "esgScore": 71.5,
    }
    payload.update(overrides)
    return payload


class TestRead:
    def test_list(self, client):
        response = client.get("/api/companies")

        assert response.status_code == 200
        assert len(response.get_json()) == 6

    def test_get(self, client):
        response = client.get("/api/companies/1")

        assert response.status_code == 200
        assert response.get_json()["symbol"] == "AAPL"

    def test_get_missing(self, client):
        response = client.get("/api/companies/999")

        assert response.status_code == 404
        assert "not found" in response.get_json()["error"]

    def test_esg_performers(self, client):
        response = client.get("/api/companies/esg-performers?count=2")

        assert [c["symbol"] for c in response.get_json()] == ["NEE", "UL"]


class TestWrite:
    def test_create(self, client):
        response = client.post("/api/companies", json=make_payload())

        assert response.status_code == 201
        body = response.get_json()
        assert body["id"] == 7
        assert body["symbol"] == "ACME"
        assert client.get("/api/companies/7").status_code == 200

    def test_create_duplicate_symbol(self, client):
        response = client.post("/api/companies", json=make_payload(symbol="aapl"))

        assert response.status_code == 409

    @pytest.mark.parametrize("overrides", [
        {"name": ""},
        {"esgScore": "high"},
        {"marketCap": -5},
        {"symbol": "VERYLONGSYMBOL"},
        {"esgScore": "1234.567"},
    ])
    def test_create_invalid(self, client, overrides):
        response = client.post("/api/companies", json=make_payload(**overrides))

        assert response.status_code == 400
        assert "parameter" in response.get_json()

    def test_create_without_body(self, client):
        response = client.post("/api/companies", data="not json")

        assert response.status_code == 400

    def test_update(self, client):
        response = client.put("/api/companies/1", json=make_payload(symbol="AAPL", name="Apple"))

        assert response.status_code == 200
        assert client.get("/api/companies/1").get_json()["name"] == "Apple"

    def test_update_to_taken_symbol(self, client):
        response = client.put("/api/companies/1", json=make_payload(symbol="TSLA"))

        assert response.status_code == 409

    def test_delete(self, client):
        assert client.delete("/api/companies/2").status_code == 204
        assert client.get("/api/companies/2").status_code == 404
        assert client.delete("/api/companies/2").status_code == 404

    def test_analyze(self, client):
        response = client.post("/api/companies/2/analyze")

        assert response.status_code == 200
        assert response.get_json()["investmentRecommendation"].startswith("BUY:")
        stored = client.get("/api/companies/2").get_json()
        assert stored["investmentRecommendation"].startswith("BUY:")


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}
