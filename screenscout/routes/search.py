"""Search blueprint.

Routes:
    GET /api/search?query=...&page=N → Movie and TV matches (people excluded)
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from screenscout.routes.media import _page_arg


search_bp = Blueprint("search", __name__)


@search_bp.route("/api/search", methods=["GET"])
def search():
    """Multi-search TMDB.

    Returns 400 when `query` is missing or blank.
    """
    query = request.args.get("query", "")
    page = _page_arg()
    catalog = current_app.config["CATALOG_SERVICE"]
    results = catalog.search(query, page=page)
    return jsonify([item.to_json() for item in results])
