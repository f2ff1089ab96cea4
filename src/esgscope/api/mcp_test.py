"""
Tests for the tool API.

Run with: pytest src/esgscope/api/mcp_test.py -v
"""
import pytest


class TestCapabilities:
    def test_capabilities(self, client):
        response = client.get("/api/mcp/capabilities")

        assert response.status_code == 200
        body = response.get_json()
        assert len(body["tools"]) == 7
        assert body["serverInfo"]["version"]


class TestExecute:
    def test_execute(self, client):
        response = client.post(
            "/api/mcp/execute",
            json={"tool": "get_company_by_symbol", "parameters": {"symbol": "msft"}},
        )

        assert response.status_code == 200
        assert response.get_json()["data"]["name"] == "Microsoft Corporation"

    def test_execute_without_parameters(self, client):
        response = client.post("/api/mcp/execute", json={"tool": "get_companies"})

        assert response.get_json()["count"] == 6

    @pytest.mark.parametrize("body", [{}, {"tool": ""}, {"tool": "   "}, {"tool": 5}])
    def test_tool_name_required(self, client, body):
        response = client.post("/api/mcp/execute", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Tool name is required"}

    def test_errors_are_envelopes(self, client):
        response = client.post("/api/mcp/execute", json={"tool": "nope"})

        assert response.status_code == 200
        assert response.get_json()["errorType"] == "unknown_tool"
