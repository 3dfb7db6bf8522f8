"""
Route Tests

HTTP surface of the replication API via FastAPI's TestClient.
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from main import app
from routers import charts as charts_router
from routers import replication as replication_router
from services.replication import InvalidParameter

client = TestClient(app)


# ──────────────────────────────────────────────
# Health / defaults
# ──────────────────────────────────────────────

class TestMetaRoutes:
    """Tests for /api/health and /api/defaults."""

    def test_health(self):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_defaults(self):
        data = client.get("/api/defaults").json()
        assert data["params"] == {
            "spot": 100.0, "vol": 15.0, "maturity": 1.0,
            "min_strike": 50.0, "max_strike": 150.0, "step": 5.0,
        }
        assert data["grid"] == {"min": 0, "max": 200}
        assert data["axis"]["ticks"] == [0, 50, 100, 150, 200]

    def test_frontend_served(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Variance Swap Replication" in resp.text


# ──────────────────────────────────────────────
# Replication
# ──────────────────────────────────────────────

class TestReplicationRoute:
    """Tests for /api/replication."""

    def test_default_series(self):
        resp = client.get("/api/replication")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["strikes"]) == 21
        assert len(data["optionWeights"]) == 201
        assert len(data["portfolioGamma"]) == 201
        assert set(data["optionWeights"][0]) == {"strike", "weight"}
        assert set(data["portfolioGamma"][0]) == {"price", "gamma"}
        assert sum(p["weight"] for p in data["optionWeights"]) == pytest.approx(100)

    def test_query_overrides(self):
        data = client.get("/api/replication", params={"spot": 80, "step": 10}).json()
        assert data["params"]["spot"] == 80
        assert data["strikes"] == pytest.approx([40, 48, 56, 64, 72, 80, 88, 96, 104, 112, 120])

    @pytest.mark.parametrize("query, field", [
        ({"step": 0}, "strike_step_pct"),
        ({"vol": -5}, "volatility_pct"),
        ({"maturity": 0}, "maturity_years"),
        ({"min_strike": 120, "max_strike": 80}, "max_strike_pct"),
    ])
    def test_invalid_params_rejected(self, query, field):
        resp = client.get("/api/replication", params=query)
        assert resp.status_code == 422
        assert field in resp.json()["detail"]

    def test_non_numeric_param_rejected(self):
        resp = client.get("/api/replication", params={"spot": "abc"})
        assert resp.status_code == 422

    def test_no_match_returns_zero_weights(self):
        data = client.get("/api/replication", params={"spot": 1000}).json()
        assert all(p["weight"] == 0 for p in data["optionWeights"])

    @pytest.mark.parametrize("spot, message", [
        (1e-200, "too small"),
        (1e307, "overflow"),
    ])
    def test_extreme_spot_rejected(self, spot, message):
        resp = client.get("/api/replication", params={"spot": spot})
        assert resp.status_code == 422
        assert message in resp.json()["detail"]

    def test_oversized_ladder_rejected(self):
        resp = client.get("/api/replication", params={"step": 0.0005})
        assert resp.status_code == 422
        assert "limit" in resp.json()["detail"]

    def test_kernel_rejection_maps_to_422(self, monkeypatch):
        def reject(params):
            raise InvalidParameter("portfolio $gamma overflows for these parameters")

        monkeypatch.setattr(replication_router, "compute", reject)
        resp = client.get("/api/replication")
        assert resp.status_code == 422
        assert "overflows" in resp.json()["detail"]

    def test_summary_gamma_at_spot_null_off_grid(self):
        summary = client.get("/api/summary", params={"spot": 1000}).json()["summary"]
        assert summary["gamma_at_spot"] is None

    def test_summary(self):
        resp = client.get("/api/summary")
        assert resp.status_code == 200
        summary = resp.json()["summary"]
        assert summary["strike_count"] == 21
        assert summary["matched_strikes"] == 21
        assert summary["weight_total"] == pytest.approx(100)


# ──────────────────────────────────────────────
# Charts / export
# ──────────────────────────────────────────────

class TestChartRoutes:
    """Tests for /api/charts/{chart_type}."""

    @pytest.mark.parametrize("chart_type, trace_type", [
        ("weights", "bar"),
        ("gamma", "scatter"),
    ])
    def test_chart_json(self, chart_type, trace_type):
        resp = client.get(f"/api/charts/{chart_type}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["chart_type"] == chart_type
        fig = json.loads(data["figure"])
        assert fig["data"][0]["type"] == trace_type

    def test_unknown_chart_type(self):
        resp = client.get("/api/charts/smile")
        assert resp.status_code == 400
        assert "weights" in resp.json()["detail"]

    def test_invalid_params(self):
        resp = client.get("/api/charts/gamma", params={"step": -1})
        assert resp.status_code == 422

    def test_kernel_rejection_is_not_a_chart_error(self, monkeypatch):
        def reject(params):
            raise InvalidParameter("portfolio $gamma overflows for these parameters")

        monkeypatch.setattr(charts_router, "compute", reject)
        resp = client.get("/api/charts/gamma")
        assert resp.status_code == 422
        assert "Chart error" not in resp.json()["detail"]


class TestExportRoutes:
    """Tests for /api/export/{series}."""

    def test_export_gamma_csv(self):
        resp = client.get("/api/export/gamma")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "attachment" in resp.headers["content-disposition"]
        lines = resp.text.strip().splitlines()
        assert lines[0] == "price,gamma"
        assert len(lines) == 202

    def test_export_weights_csv(self):
        resp = client.get("/api/export/weights", params={"spot": 100})
        assert resp.text.splitlines()[0] == "strike,weight"

    def test_unknown_series(self):
        resp = client.get("/api/export/vanna")
        assert resp.status_code == 400
