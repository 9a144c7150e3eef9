"""
Flask API for the Brutto-Netto salary calculator
Serves calculations and the admin-editable rate configuration
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config_store
from admin_auth import (
    admin_required,
    clear_session_cookie,
    get_session_token,
    set_session_cookie,
    verify_pin,
)
from config import get_admin_pin, get_cors_origins, get_logger, setup_logging
from config_resolver import parse_section, resolve
from rate_config import CONFIG_KEYS, extract_config_entries
from salary_calculator import CalculationInput, calculate
from validators import CALCULATION_FIELDS, validate_params

setup_logging()
logger = get_logger(__name__)

app = Flask(__name__)
CORS(app, origins=get_cors_origins(), supports_credentials=True)


# ─── Global Error Handlers ───────────────────────────────────────────────────


@app.errorhandler(404)
def not_found(e):
    """Return JSON instead of HTML for 404 errors."""
    return jsonify({"error": "Resource not found"}), 404


@app.errorhandler(405)
def method_not_allowed(e):
    return jsonify({"error": "Method not allowed"}), 405


@app.errorhandler(ValueError)
def handle_value_error(e):
    """Catch unhandled ValueErrors and return a 400 JSON response."""
    logger.warning("ValueError: %s", e)
    return jsonify({"error": str(e)}), 400


@app.errorhandler(Exception)
def handle_exception(e):
    """Catch-all for unhandled exceptions, returned as a 500 JSON response."""
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    logger.exception("Unhandled exception: %s", e)
    return jsonify({"error": "Internal server error"}), 500


def _json_body():
    """Decoded JSON object body, or None if the body is missing or malformed."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@app.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint"""
    return jsonify({"status": "ok", "message": "Brutto-Netto API is running"})


@app.route("/api/options", methods=["GET"])
def get_options():
    """
    Resolved rate configuration for the calculator form
    (states, tax classes, insurance rates, info sections). Public, read-only.
    """
    rate_config = resolve(config_store.load_entries())
    return jsonify({"config": rate_config.to_dict()})


@app.route("/api/calculate", methods=["POST"])
def calculate_salary():
    """
    Calculate net salary from gross salary.

    Body (JSON):
      - bruttoGehalt: gross monthly salary (string or number, > 0)
      - bundesland: state key (e.g. "bayern")
      - steuerklasse: tax class "1".."6" (default "1")
      - kirchensteuerpflicht: bool (default false)
      - kinderfreibetrag: int >= 0 (default 0)
      - krankenversicherung, rentenversicherung,
        arbeitslosenversicherung, pflegeversicherung: bool (default false)
      - wochenstunden: weekly working hours (default 40)
    """
    data = _json_body()
    if data is None:
        return jsonify({"error": "Request body must be JSON"}), 400

    params, error = validate_params(data, CALCULATION_FIELDS)
    if error:
        return error

    calculation_input = CalculationInput(
        gross_salary=data.get("bruttoGehalt"),
        state=params["bundesland"],
        tax_class=params["steuerklasse"],
        church_tax_liable=params["kirchensteuerpflicht"],
        child_allowance_count=params["kinderfreibetrag"],
        health_insurance=params["krankenversicherung"],
        pension_insurance=params["rentenversicherung"],
        unemployment_insurance=params["arbeitslosenversicherung"],
        care_insurance=params["pflegeversicherung"],
        weekly_hours=params["wochenstunden"],
    )

    # Configuration is read fresh for every calculation
    rate_config = resolve(config_store.load_entries())
    result = calculate(calculation_input, rate_config)
    return jsonify(result.to_dict())


# ─── Admin ───────────────────────────────────────────────────────────────────


@app.route("/api/admin/login", methods=["POST"])
def admin_login():
    """
    Exchange the admin PIN for a session cookie.

    Body (JSON): {"pin": "..."}
    """
    if not get_admin_pin():
        logger.error("Admin login attempted but ADMIN_ACCESS_PIN is not configured")
        return jsonify({"error": "Admin-PIN ist nicht konfiguriert."}), 500

    data = _json_body()
    if data is None:
        return jsonify({"error": "Ungültige Anfrage."}), 400

    provided_pin = data.get("pin") if isinstance(data.get("pin"), str) else ""
    if not verify_pin(provided_pin):
        logger.warning("Admin login failed")
        return jsonify({"error": "PIN ist ungültig."}), 401

    response = jsonify({"success": True})
    return set_session_cookie(response, get_session_token())


@app.route("/api/admin/logout", methods=["POST"])
def admin_logout():
    """Drop the admin session cookie."""
    return clear_session_cookie(jsonify({"success": True}))


@app.route("/api/config", methods=["GET"])
@admin_required
def get_config():
    """
    Resolved configuration plus the raw overrides actually stored,
    for the admin editing surface.
    """
    entries = config_store.load_entries()
    rate_config = resolve(entries)
    return jsonify({"config": rate_config.to_dict(), "entries": extract_config_entries(entries)})


@app.route("/api/config", methods=["PUT"])
@admin_required
def update_config():
    """
    Replace one configuration section.

    Body (JSON): {"key": <section key>, "value": <whole section>}
      key is one of: states, taxClasses, socialInsurance, infoSections, taxSettings
    """
    data = _json_body()
    if data is None:
        return jsonify({"error": "Request body must be JSON"}), 400

    key = data.get("key")
    if key not in CONFIG_KEYS:
        return jsonify({"error": "Invalid configuration key"}), 400

    result = parse_section(key, data.get("value"))
    if not result.accepted:
        return jsonify({"error": f"Invalid value for {key}: {result.reason}"}), 400

    # Store the normalized section so stored entries match what the calculator uses
    value = resolve({key: data["value"]}).section(key)
    config_store.save_entry(key, value)
    return jsonify({"key": key, "value": value})


if __name__ == "__main__":
    from database import create_database

    create_database()
    app.run(debug=True, port=5000)
