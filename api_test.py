import os

import pytest

from calculator import REQUIRED_INPUTS
from errors import PersistenceError


class TestSimulate:

    def test_worked_example(self, client, example_inputs):
        response = client.post("/api/simulate", json=example_inputs)

        assert response.status_code == 200
        assert response.get_json() == {
            "results": {
                "monthly_savings": 14575,
                "cumulative_savings": 174900,
                "net_savings": 124900,
                "payback_months": 3.4,
                "roi_percentage": "249.8%",
            }
        }

    @pytest.mark.parametrize("field", REQUIRED_INPUTS)
    def test_missing_required_field(self, client, example_inputs, field, monkeypatch):
        def fail(_inputs):
            raise AssertionError("calculation should not run")

        monkeypatch.setattr("api.calculate_results", fail)
        del example_inputs[field]

        response = client.post("/api/simulate", json=example_inputs)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Missing required inputs"}

    def test_zero_counts_as_missing(self, client, example_inputs):
        example_inputs["time_horizon_months"] = 0

        assert client.post("/api/simulate", json=example_inputs).status_code == 400

    def test_empty_body(self, client):
        assert client.post("/api/simulate").status_code == 400

    def test_non_numeric_value_flows_through(self, client, example_inputs):
        example_inputs["hourly_wage"] = "lots"

        response = client.post("/api/simulate", json=example_inputs)

        assert response.status_code == 200
        results = response.get_json()["results"]
        assert results["monthly_savings"] is None
        assert results["net_savings"] is None
        assert results["payback_months"] is None
        assert results["roi_percentage"] == "NaN%"

    def test_blank_implementation_cost_uses_default(self, client, example_inputs):
        expected = client.post("/api/simulate", json=example_inputs).get_json()
        example_inputs["one_time_implementation_cost"] = ""

        response = client.post("/api/simulate", json=example_inputs)

        assert response.status_code == 200
        assert response.get_json() == expected

    def test_zero_implementation_cost_payback_is_integer(self, client, example_inputs):
        example_inputs["one_time_implementation_cost"] = 0

        response = client.post("/api/simulate", json=example_inputs)

        payback = response.get_json()["results"]["payback_months"]
        assert payback == 0 and isinstance(payback, int)
        assert response.get_json()["results"]["roi_percentage"] == "Infinite"

    def test_infinite_payback_is_null(self, client):
        response = client.post("/api/simulate", json={
            "monthly_invoice_volume": 100,
            "avg_hours_per_invoice": 0.02,
            "hourly_wage": 10,
            "error_rate_manual": 0.1,
            "error_cost": 1,
            "time_horizon_months": 12,
            "one_time_implementation_cost": 1000,
        })

        assert response.status_code == 200
        assert response.get_json()["results"]["payback_months"] is None


class TestScenarios:

    def _create(self, client, inputs, name="Baseline"):
        return client.post("/api/scenarios", json={**inputs, "scenario_name": name})

    def test_crud(self, client, example_inputs):
        created = self._create(client, example_inputs).get_json()
        assert created["name"] == "Baseline"

        listed = client.get("/api/scenarios").get_json()
        assert listed == [created]

        fetched = client.get(f"/api/scenarios/{created['id']}").get_json()
        assert fetched["inputs"] == example_inputs
        assert fetched["results"]["roi_percentage"] == "249.8%"
        assert set(fetched) == {"id", "name", "inputs", "results"}

        deleted = client.delete(f"/api/scenarios/{created['id']}")
        assert deleted.get_json() == {"success": True}

        assert client.get(f"/api/scenarios/{created['id']}").status_code == 404
        second = client.delete(f"/api/scenarios/{created['id']}")
        assert second.status_code == 404
        assert second.get_json() == {"error": "Not found"}

    def test_name_required(self, client, example_inputs):
        response = client.post("/api/scenarios", json=example_inputs)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Scenario name required"}

    def test_duplicate_name(self, client, example_inputs):
        first = self._create(client, example_inputs).get_json()

        response = self._create(client, example_inputs)

        assert response.status_code == 500
        assert "UNIQUE" in response.get_json()["error"]
        assert client.get(f"/api/scenarios/{first['id']}").status_code == 200

    def test_inputs_exclude_name(self, client, example_inputs):
        created = self._create(client, example_inputs).get_json()

        fetched = client.get(f"/api/scenarios/{created['id']}").get_json()

        assert "scenario_name" not in fetched["inputs"]

    def test_get_unknown(self, client):
        response = client.get("/api/scenarios/nope")

        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}

    def test_read_failure_is_not_found(self, client, store, monkeypatch):
        def fail(_scenario_id):
            raise PersistenceError("disk I/O error")

        monkeypatch.setattr(store, "get", fail)

        response = client.get("/api/scenarios/abc")
        report = client.post("/api/report/generate",
                             json={"scenario_id": "abc", "email": "ap@example.com"})

        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}
        assert report.status_code == 404
        assert report.get_json() == {"error": "Scenario not found"}


class TestReport:

    def test_generate_twice_overwrites(self, client, settings, example_inputs, caplog):
        created = client.post("/api/scenarios",
                              json={**example_inputs, "scenario_name": "Baseline"}).get_json()
        body = {"scenario_id": created["id"], "email": "ap@example.com"}

        with caplog.at_level("INFO", logger="api"):
            first = client.post("/api/report/generate", json=body)
        second = client.post("/api/report/generate", json=body)

        url = f"/reports/{created['id']}.pdf"
        assert first.get_json() == second.get_json() == {"download_url": url}
        assert "Lead captured: ap@example.com for scenario " + created["id"] in caplog.text
        assert os.listdir(settings.reports_dir) == [f"{created['id']}.pdf"]

        download = client.get(url)
        assert download.status_code == 200
        assert download.data.startswith(b"%PDF")
        download.close()

    @pytest.mark.parametrize("body", [
        {"email": "ap@example.com"},
        {"scenario_id": "abc"},
        {"scenario_id": "", "email": "ap@example.com"},
    ])
    def test_fields_required(self, client, body):
        response = client.post("/api/report/generate", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Scenario ID and email required"}

    def test_unknown_scenario(self, client):
        response = client.post("/api/report/generate",
                               json={"scenario_id": "nope", "email": "ap@example.com"})

        assert response.status_code == 404
        assert response.get_json() == {"error": "Scenario not found"}


class TestHttp:

    def test_cors_header(self, client):
        response = client.get("/api/scenarios")

        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight(self, client):
        response = client.options("/api/scenarios", headers={
            "Origin": "http://localhost",
            "Access-Control-Request-Method": "POST",
        })

        assert response.status_code == 200
        assert "POST" in response.headers["Access-Control-Allow-Methods"]

    def test_unknown_route(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert "error" in response.get_json()
