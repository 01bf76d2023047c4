"""Flask application factory for the PySched web API.

The ``create_app`` function returns a Flask app with two endpoints:

- ``GET /api/policies`` — list policy names and labels.
- ``POST /api/simulate`` — run a generated workload and return JSON.

Request body for ``/api/simulate`` (every field optional)::

    {
        "workload": {"cpu_bound": 2, "io_bound": 2, "duration": 1000,
                     "io_repetitions": 4, "max_arrival": 2550, "seed": 7},
        "policies": ["fcfs", "rr"],
        "params": {"quantum": 20, "time_slices": [20, 40]},
        "detailed": false
    }
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from py_sched.config import WorkloadConfig
from py_sched.engine import SimulationError
from py_sched.harness import compare
from py_sched.scheduler import available_schedulers, create_scheduler
from py_sched.workload import generate_workload

_HTTP_BAD_REQUEST = 400
_HTTP_UNPROCESSABLE = 422

# Keeps a single request from simulating forever.
_MAX_TICKS = 1_000_000

_WORKLOAD_FIELDS = ("cpu_bound", "io_bound", "duration", "io_repetitions", "max_arrival", "seed")


def create_app() -> Flask:
    """Create and configure the Flask application.

    Returns:
        A configured Flask application ready to serve.

    """
    app = Flask(__name__)

    @app.route("/api/policies")
    def policies() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return every registered policy with its label."""
        return jsonify(
            [
                {"name": name, "desc": create_scheduler(name).desc()}
                for name in available_schedulers()
            ]
        )

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run the requested simulations and return their results.

        Returns:
            JSON with a ``results`` list, or an ``error`` with status 400.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object body"}), _HTTP_BAD_REQUEST

        workload_data = data.get("workload", {})
        if not isinstance(workload_data, dict):
            return jsonify({"error": "'workload' must be an object"}), _HTTP_BAD_REQUEST
        unknown = set(workload_data) - set(_WORKLOAD_FIELDS)
        if unknown:
            msg = f"Unknown workload fields: {', '.join(sorted(unknown))}"
            return jsonify({"error": msg}), _HTTP_BAD_REQUEST

        try:
            params: dict[str, Any] = dict(data.get("params") or {})
            if "time_slices" in params:
                params["time_slices"] = tuple(params["time_slices"])
            config = WorkloadConfig(**workload_data)
            results = compare(
                generate_workload(config),
                data.get("policies"),
                params=params,
                max_ticks=_MAX_TICKS,
            )
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST
        except SimulationError as e:
            return jsonify({"error": str(e)}), _HTTP_UNPROCESSABLE

        detailed = bool(data.get("detailed", False))
        return jsonify(
            {
                "workload": config.label,
                "results": [r.to_dict(detailed=detailed) for r in results],
            }
        )

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``py-sched-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
