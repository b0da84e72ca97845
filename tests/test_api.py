"""
Tests for FastAPI backend.

Run with: pytest tests/test_api.py -v
"""

import pytest
import sys
import os

# Add paths for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'web', 'backend'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

pytest.importorskip("fastapi")
pytest.importorskip("httpx")


def base_config():
    return {
        "air_cooling": {
            "input_method": "rack_count",
            "rack_count": 10,
            "power_per_rack_kw": 15.0,
        },
        "immersion_cooling": {
            "input_method": "auto_optimize",
            "target_power_kw": 150.0,
        },
        "financial": {"currency": "USD"},
    }


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


class TestAPIModels:
    """Test Pydantic models for API."""

    def test_calculation_request(self):
        from main import CalculationRequest

        request = CalculationRequest(configuration=base_config())
        assert request.exchange_rate is None

    def test_exchange_rate_must_be_positive(self):
        from pydantic import ValidationError
        from main import CalculationRequest

        with pytest.raises(ValidationError):
            CalculationRequest(configuration=base_config(), exchange_rate=0)

    def test_scenario_request_limits(self):
        from pydantic import ValidationError
        from main import ScenarioComparisonRequest

        with pytest.raises(ValidationError):
            ScenarioComparisonRequest(configuration=base_config(), scenarios=[])

    def test_sensitivity_request_defaults(self):
        from main import SensitivityRequest

        request = SensitivityRequest(configuration=base_config())
        assert request.variation_percent == 20.0
        assert request.steps == 5
        assert "financial.energy_cost_kwh" in request.parameters


class TestAPIEndpoints:
    """In-process endpoint tests."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    def test_defaults(self, client):
        data = client.get("/api/v1/config/defaults").json()

        assert data["currencies"] == ["USD", "EUR", "SAR", "AED"]
        assert data["financial"]["discount_rate"] == 0.08
        assert data["energy_cost_kwh"]["EU"] == 0.28
        assert data["limits"]["analysis_years"] == [1, 10]
        assert "air_cooling/rack/USD" in data["catalog"]

    def test_validate(self, client):
        response = client.post("/api/v1/calculations/validate",
                               json={"configuration": base_config()})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["data"]["valid"] is True
        assert data["data"]["estimated_processing_time_ms"] == 210

    def test_validate_rejects(self, client):
        config = base_config()
        config["financial"]["analysis_years"] = 15

        response = client.post("/api/v1/calculations/validate", json={"configuration": config})
        assert response.status_code == 400

        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert detail["details"][0]["field"] == "financial.analysis_years"

    def test_calculate(self, client):
        response = client.post("/api/v1/calculations/calculate",
                               json={"configuration": base_config()})
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["meta"]["currency"] == "USD"
        assert body["meta"]["version"] == "1.0"
        assert len(body["data"]["configuration_hash"]) == 64
        assert len(body["data"]["breakdown"]["opex_annual"]) == 5

    def test_calculate_incomplete(self, client):
        config = base_config()
        del config["immersion_cooling"]["target_power_kw"]

        response = client.post("/api/v1/calculations/calculate", json={"configuration": config})
        assert response.status_code == 400

        detail = response.json()["detail"]
        assert detail["code"] == "INCOMPLETE_CONFIGURATION"
        assert detail["details"][0]["field"] == "immersion_cooling.target_power_kw"

    def test_calculate_other_currency(self, client):
        config = base_config()
        config["financial"]["currency"] = "SAR"

        missing = client.post("/api/v1/calculations/calculate", json={"configuration": config})
        assert missing.status_code == 400
        assert missing.json()["detail"]["code"] == "CATALOG_LOOKUP_MISSING"

        converted = client.post("/api/v1/calculations/calculate",
                                json={"configuration": config, "exchange_rate": 3.75})
        assert converted.status_code == 200
        assert converted.json()["data"]["currency"] == "SAR"

    def test_calculate_null_financial_with_exchange_rate(self, client):
        config = base_config()
        config["financial"] = None

        response = client.post("/api/v1/calculations/calculate",
                               json={"configuration": config, "exchange_rate": 3.75})
        assert response.status_code == 400
        assert response.json()["detail"]["details"][0]["field"] == "financial"

    def test_scenarios(self, client):
        response = client.post("/api/v1/calculations/scenarios", json={
            "configuration": base_config(),
            "scenarios": [
                {"name": "Expensive power", "changes": {"financial.energy_cost_kwh": 0.3}},
            ],
        })
        assert response.status_code == 200

        metrics = response.json()["data"]["comparison_metrics"]
        assert metrics["tco_savings"][0]["scenario"] == "Expensive power"
        assert metrics["tco_savings"][0]["difference_from_base"] > 0

    def test_scenarios_unknown_metric(self, client):
        response = client.post("/api/v1/calculations/scenarios", json={
            "configuration": base_config(),
            "scenarios": [{"name": "x", "changes": {}}],
            "metrics": ["bogus"],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "UNKNOWN_METRIC"

    def test_sensitivity(self, client):
        response = client.post("/api/v1/calculations/sensitivity", json={
            "configuration": base_config(),
            "parameters": ["financial.energy_cost_kwh"],
            "steps": 3,
        })
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["sensitivity_analysis"][0]["parameter"] == "financial.energy_cost_kwh"
        assert len(data["sensitivity_analysis"][0]["scenarios"]) == 3

    def test_sensitivity_unknown_parameter(self, client):
        response = client.post("/api/v1/calculations/sensitivity", json={
            "configuration": base_config(),
            "parameters": ["financial.unknown"],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "UNKNOWN_PARAMETER"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
