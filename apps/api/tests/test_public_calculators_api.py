"""
Endpoint tests for the public calculators.

Covers happy paths, the InvalidInput -> 422 error contract, and the
health/ping endpoints.
"""

import logging


class TestHealth:

    def test_ping(self, client):
        resp = client.get("/ping")
        assert resp.status_code == 200
        assert resp.json() == {"pong": True}

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["rate_limit_backend"] == "disabled"

    def test_security_headers(self, client):
        resp = client.get("/ping")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "X-Process-Time" in resp.headers


class TestHeatEndpoints:

    def test_heat_stress(self, client):
        resp = client.post(
            "/v1/public/environmental/heat-stress",
            json={"temp_c": 35, "humidity_percent": 80, "dew_point_c": 30},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["heat_stress_index"] > 28
        assert body["category"] == "EXTREME_RISK"
        assert body["recommendations"]

    def test_heat_stress_invalid_humidity(self, client):
        resp = client.post(
            "/v1/public/environmental/heat-stress",
            json={"temp_c": 25, "humidity_percent": 120},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["error_code"] == "VALIDATION_ERROR_HUMIDITY_PERCENT"
        assert "humidity_percent" in body["detail"]

    def test_heat_stress_beyond_model_range_is_classified(self, client):
        resp = client.post(
            "/v1/public/environmental/heat-stress",
            json={"temp_c": 50, "humidity_percent": 100},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["heat_stress_index"] > 45
        assert body["category"] == "EXTREME_RISK"
        assert body["hr_adjustment_bpm"] == 25

    def test_rejected_input_is_logged_with_field(self, client, caplog):
        caplog.set_level(logging.INFO, logger="main")
        resp = client.post(
            "/v1/public/environmental/heat-stress",
            json={"temp_c": 25, "humidity_percent": 120},
        )
        assert resp.status_code == 422
        records = [r for r in caplog.records if r.name == "main" and r.getMessage().startswith("API error 422")]
        assert records
        fields = records[-1].extra_fields
        assert fields["field"] == "humidity_percent"
        assert fields["error_code"] == "VALIDATION_ERROR_HUMIDITY_PERCENT"
        assert fields["path"] == "/v1/public/environmental/heat-stress"

    def test_heat_stress_missing_field(self, client):
        resp = client.post("/v1/public/environmental/heat-stress", json={"temp_c": 25})
        assert resp.status_code == 422

    def test_heat_pace_acclimated_halves(self, client):
        base = client.post(
            "/v1/public/environmental/heat-pace",
            json={"heat_stress_index": 30, "heat_acclimated": False},
        ).json()
        acclimated = client.post(
            "/v1/public/environmental/heat-pace",
            json={"heat_stress_index": 30, "heat_acclimated": True},
        ).json()
        assert acclimated["slowdown_percent"] == base["slowdown_percent"] / 2
        assert base["guidance"]

    def test_heat_pace_no_guidance_when_mild(self, client):
        resp = client.post(
            "/v1/public/environmental/heat-pace", json={"heat_stress_index": 20}
        )
        assert resp.status_code == 200
        assert resp.json()["guidance"] is None


class TestAltitudeEndpoint:

    def test_altitude(self, client):
        resp = client.post(
            "/v1/public/environmental/altitude",
            json={"altitude_m": 2500, "acclimatization_days": 0, "intensity": "hard"},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert abs(body["performance_impact_percent"] - 10.0) < 1e-9
        assert body["adaptation_phase"] == "ACUTE"
        assert body["intensity"] == "hard"

    def test_altitude_bad_intensity(self, client):
        resp = client.post(
            "/v1/public/environmental/altitude",
            json={"altitude_m": 2500, "intensity": "sprint"},
        )
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR_INTENSITY"


class TestWindEndpoint:

    def test_tailwind(self, client):
        resp = client.post(
            "/v1/public/environmental/wind",
            json={
                "wind_speed_mps": 6,
                "wind_direction_deg": 90,
                "runner_direction_deg": 90,
                "runner_speed_mps": 4,
            },
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["impact_percent"] <= 0
        assert body["classification"] == "TAILWIND"
        assert any("Bank nothing" in rec for rec in body["recommendations"])

    def test_strong_tailwind_keeps_pace_positive(self, client):
        resp = client.post(
            "/v1/public/environmental/calculate",
            json={
                "wind_speed_kmh": 140,
                "wind_direction": "TAILWIND",
                "baseline_pace_min_per_km": 4.0,
            },
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["total_slowdown_percent"] > -100
        assert body["adjusted_pace_min_per_km"] > 0

    def test_runner_speed_must_be_positive(self, client):
        resp = client.post(
            "/v1/public/environmental/wind",
            json={
                "wind_speed_mps": 6,
                "wind_direction_deg": 90,
                "runner_direction_deg": 90,
                "runner_speed_mps": 0,
            },
        )
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR_RUNNER_SPEED_MPS"


class TestCombinedEndpoint:

    def test_calculate_all_factors(self, client):
        resp = client.post(
            "/v1/public/environmental/calculate",
            json={
                "temp_c": 30,
                "humidity_percent": 60,
                "altitude_m": 1800,
                "acclimatization_days": 2,
                "wind_speed_kmh": 15,
                "wind_direction": "HEADWIND",
                "baseline_pace_min_per_km": 5.0,
            },
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["total_slowdown_percent"] > 0
        assert body["adjusted_pace_min_per_km"] > 5.0
        assert body["heat_risk"]["category"] in {"HIGH_RISK", "EXTREME_RISK"}
        assert body["wind"]["classification"] == "HEADWIND"
        assert body["altitude"]["adaptation_phase"] == "ACUTE"

    def test_calculate_empty(self, client):
        resp = client.post("/v1/public/environmental/calculate", json={})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_slowdown_percent"] == 0.0
        assert body["heat_pace"] is None

    def test_calculate_temperature_without_humidity(self, client):
        resp = client.post("/v1/public/environmental/calculate", json={"temp_c": 30})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR_HUMIDITY_PERCENT"


class TestTrainingLoadEndpoint:

    def test_acwr(self, client):
        resp = client.post(
            "/v1/public/training-load/acwr",
            json={"daily_loads": [40] * 21 + [80] * 7},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["ratio"] == 1.6
        assert body["zone"]["zone"] == "DANGER"
        assert body["method"] == "rolling"

    def test_acwr_zero_chronic(self, client):
        resp = client.post("/v1/public/training-load/acwr", json={"daily_loads": [0] * 28})
        assert resp.status_code == 200
        assert resp.json()["ratio"] is None
        assert resp.json()["zone"] is None

    def test_acwr_short_history(self, client):
        resp = client.post("/v1/public/training-load/acwr", json={"daily_loads": [50] * 10})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR_DAILY_LOADS"


class TestPacingEndpoint:

    def test_strategy(self, client):
        resp = client.post(
            "/v1/public/pacing/strategy",
            json={"distance": "10k", "target_time_seconds": 2700, "strategy": "negative"},
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert len(body["splits"]) == 10
        assert body["adjusted_target_time"] == "45:00"
        assert body["strategy"] == "negative"
        assert body["splits"][0]["target_pace"].count(":") == 1

    def test_strategy_with_slowdown(self, client):
        resp = client.post(
            "/v1/public/pacing/strategy",
            json={"distance": "marathon", "target_time_seconds": 10800, "slowdown_percent": 5},
        )
        assert resp.status_code == 200
        assert resp.json()["adjusted_target_time"] == "3:09:00"

    def test_strategy_numeric_distance(self, client):
        resp = client.post(
            "/v1/public/pacing/strategy",
            json={"distance": 3000, "target_time_seconds": 720},
        )
        assert resp.status_code == 200
        assert len(resp.json()["splits"]) == 3

    def test_strategy_unknown_distance(self, client):
        resp = client.post(
            "/v1/public/pacing/strategy",
            json={"distance": "ultra", "target_time_seconds": 2700},
        )
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR_DISTANCE"
