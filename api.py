"""
Flask application exposing the ROI calculator over HTTP.

Routes:

* ``POST /api/simulate`` – compute results without saving them.
* ``POST /api/scenarios`` – compute and save a named scenario.
* ``GET /api/scenarios`` – list saved scenarios (id and name).
* ``GET /api/scenarios/<id>`` – fetch a saved scenario.
* ``DELETE /api/scenarios/<id>`` – delete a saved scenario.
* ``POST /api/report/generate`` – render a PDF report for a scenario and
  return its download URL.

The public directory is served at the root, which makes generated
reports available under ``/reports/<id>.pdf``.  Errors are returned as
``{"error": message}`` with the message of the underlying exception.
"""

import logging
import os
from typing import Optional

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from calculator import calculate_results, json_safe, missing_inputs
from errors import NotFoundError, PersistenceError, RoiCalculatorError, ValidationError
from report import render_report, save_report
from settings import Settings
from store import ScenarioStore, store_from_url

logger = logging.getLogger(__name__)


def _store() -> ScenarioStore:
    return current_app.extensions["scenario_store"]


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _fetch(scenario_id: str, message: str) -> dict:
    """Load a scenario; a missing row or a failed read is reported as 404."""
    try:
        return _store().get(scenario_id)
    except (NotFoundError, PersistenceError):
        raise NotFoundError(message) from None


def create_app(settings: Optional[Settings] = None,
               store: Optional[ScenarioStore] = None) -> Flask:
    """Build the Flask application.

    Parameters
    ----------
    settings : Settings, optional
        Runtime configuration; defaults to ``Settings()``.
    store : ScenarioStore, optional
        The scenario store to use.  When omitted one is opened at
        ``settings.database_url``.
    """
    settings = settings or Settings()
    public_dir = os.path.abspath(settings.public_dir)
    os.makedirs(settings.reports_dir, exist_ok=True)

    app = Flask(__name__, static_folder=public_dir, static_url_path="")
    app.config["REPORTS_DIR"] = os.path.abspath(settings.reports_dir)
    app.config["CORS_ORIGIN"] = settings.cors_origin
    app.extensions["scenario_store"] = store or store_from_url(settings.database_url)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = app.config["CORS_ORIGIN"]
        if request.method == "OPTIONS":
            response.headers["Access-Control-Allow-Methods"] = "GET,HEAD,PUT,PATCH,POST,DELETE"
            response.headers["Access-Control-Allow-Headers"] = (
                request.headers.get("Access-Control-Request-Headers", "Content-Type"))
        return response

    @app.errorhandler(RoiCalculatorError)
    def handle_known_error(exc: RoiCalculatorError):
        return jsonify(error=str(exc)), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify(error=exc.description), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        return jsonify(error=str(exc)), 500

    @app.post("/api/simulate")
    def simulate():
        inputs = _body()
        if missing_inputs(inputs):
            raise ValidationError("Missing required inputs")
        results = calculate_results(inputs)
        return jsonify(results=json_safe(results))

    @app.post("/api/scenarios")
    def create_scenario():
        inputs = dict(_body())
        name = inputs.pop("scenario_name", None)
        return jsonify(_store().create(name, inputs))

    @app.get("/api/scenarios")
    def list_scenarios():
        return jsonify(_store().list())

    @app.get("/api/scenarios/<scenario_id>")
    def get_scenario(scenario_id: str):
        scenario = _fetch(scenario_id, "Not found")
        return jsonify(
            id=scenario["id"],
            name=scenario["name"],
            inputs=scenario["inputs"],
            results=scenario["results"],
        )

    @app.delete("/api/scenarios/<scenario_id>")
    def delete_scenario(scenario_id: str):
        return jsonify(success=_store().delete(scenario_id))

    @app.post("/api/report/generate")
    def generate_report():
        body = _body()
        scenario_id = body.get("scenario_id")
        email = body.get("email")
        if not scenario_id or not email:
            raise ValidationError("Scenario ID and email required")
        logger.info("Lead captured: %s for scenario %s", email, scenario_id)
        scenario = _fetch(scenario_id, "Scenario not found")
        data = render_report(scenario)
        download_url = save_report(current_app.config["REPORTS_DIR"], scenario_id, data)
        return jsonify(download_url=download_url)

    return app
