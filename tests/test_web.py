"""Tests for the Flask web API.

Tests use ``pytest.importorskip`` so they are skipped gracefully when
Flask is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from py_sched.scheduler import available_schedulers  # noqa: E402
from py_sched.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

SMALL_WORKLOAD = {"cpu_bound": 1, "io_bound": 1, "duration": 100, "max_arrival": 50, "seed": 3}


def _create_client() -> Any:
    """Create a test client from a fresh app."""
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify the app factory."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)


class TestPoliciesEndpoint:
    """Verify GET /api/policies."""

    def test_lists_every_policy(self) -> None:
        """Every registered policy is listed with its label."""
        resp = _create_client().get("/api/policies")
        assert resp.status_code == HTTP_OK
        data = resp.get_json()
        assert [p["name"] for p in data] == available_schedulers()
        assert data[0]["desc"] == "First Come First Serve"


class TestSimulateEndpoint:
    """Verify POST /api/simulate."""

    def test_runs_selected_policies(self) -> None:
        """Results come back in request order with summaries."""
        resp = _create_client().post(
            "/api/simulate",
            json={
                "workload": SMALL_WORKLOAD,
                "policies": ["rr", "fcfs"],
                "params": {"quantum": 5},
            },
        )
        assert resp.status_code == HTTP_OK
        data = resp.get_json()
        assert data["workload"] == "1 CPU + 1 IO"
        assert [r["scheduler"] for r in data["results"]] == ["rr", "fcfs"]
        assert "records" not in data["results"][0]

    def test_defaults_run_every_policy(self) -> None:
        """An empty body runs the default workload under every policy."""
        resp = _create_client().post("/api/simulate", json={"workload": SMALL_WORKLOAD})
        data = resp.get_json()
        assert [r["scheduler"] for r in data["results"]] == available_schedulers()

    def test_detailed(self) -> None:
        """detailed adds the per-process records."""
        resp = _create_client().post(
            "/api/simulate",
            json={
                "workload": SMALL_WORKLOAD,
                "policies": ["mlfq"],
                "params": {"time_slices": [5, 10]},
                "detailed": True,
            },
        )
        assert resp.status_code == HTTP_OK
        records = resp.get_json()["results"][0]["records"]
        assert len(records) == 2  # noqa: PLR2004

    def test_non_object_body(self) -> None:
        """A body that is not a JSON object is rejected."""
        resp = _create_client().post("/api/simulate", json=[1, 2])
        assert resp.status_code == HTTP_BAD_REQUEST

    def test_unknown_workload_field(self) -> None:
        """Unknown workload fields are rejected by name."""
        resp = _create_client().post("/api/simulate", json={"workload": {"cpus": 3}})
        assert resp.status_code == HTTP_BAD_REQUEST
        assert "cpus" in resp.get_json()["error"]

    def test_invalid_workload_value(self) -> None:
        """Invalid workload values come back with the message."""
        resp = _create_client().post(
            "/api/simulate", json={"workload": {"cpu_bound": 0, "io_bound": 0}}
        )
        assert resp.status_code == HTTP_BAD_REQUEST
        assert "at least one process" in resp.get_json()["error"]

    def test_unknown_policy(self) -> None:
        """An unknown policy name is rejected."""
        resp = _create_client().post(
            "/api/simulate", json={"workload": SMALL_WORKLOAD, "policies": ["lottery"]}
        )
        assert resp.status_code == HTTP_BAD_REQUEST
