"""Auth blueprint: account registration and login.

Routes:
    POST /api/auth/register → Create an account
    POST /api/auth/login    → Exchange credentials for a bearer token
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from screenscout.utils.exceptions import InputValidationError

auth_bp = Blueprint("auth", __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InputValidationError("Request body must be a JSON object")
    return data


@auth_bp.route("/api/auth/register", methods=["POST"])
def register():
    """Create an account.

    Request JSON:
        { "email": "ada@example.com", "password": "hunter22" }

    Response JSON (201):
        { "message": "User registered", "userId": "65f0..." }
    """
    data = _json_body()
    accounts = current_app.config["ACCOUNT_SERVICE"]
    user = accounts.register(data.get("email"), data.get("password"))
    return jsonify({"message": "User registered", "userId": str(user.id)}), 201


@auth_bp.route("/api/auth/login", methods=["POST"])
def login():
    """Log in.

    Response JSON:
        { "token": "<bearer token>" }
    """
    data = _json_body()
    accounts = current_app.config["ACCOUNT_SERVICE"]
    token = accounts.login(data.get("email"), data.get("password"))
    return jsonify({"token": token})
