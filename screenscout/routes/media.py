"""Catalog blueprint: listings and detail pages backed by TMDB.

Routes:
    GET /api/trending                         → Weekly trending movies and TV
    GET /api/top-rated/movies?page=N          → Top-rated movies
    GET /api/top-rated/tv?page=N              → Top-rated TV
    GET /api/popular/movies?page=N            → Popular movies
    GET /api/popular/tv?page=N                → Popular TV
    GET /api/anime/<category>?page=N          → trending | popular | top-rated anime
    GET /api/movie/<id>                       → Movie detail
    GET /api/tv/<id>                          → TV detail
    GET /api/person/<id>                      → Person detail with filmography

Listings are JSON arrays of media summaries; details are JSON objects.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from screenscout.utils.exceptions import InputValidationError, NotFoundError

media_bp = Blueprint("media", __name__)

# TMDB refuses pages above 500
MAX_PAGE = 500

_ANIME_CATEGORIES = {
    "trending": "trending_anime",
    "popular": "popular_anime",
    "top-rated": "top_rated_anime",
}


def _page_arg() -> int:
    """Read `?page=`; defaults to 1, must be an integer in [1, MAX_PAGE]."""
    raw = request.args.get("page")
    if raw is None or raw.strip() == "":
        return 1
    try:
        page = int(raw)
    except ValueError:
        raise InputValidationError("page must be a positive integer") from None
    if page < 1 or page > MAX_PAGE:
        raise InputValidationError(f"page must be between 1 and {MAX_PAGE}")
    return page


def _listing(items):
    return jsonify([item.to_json() for item in items])


def _catalog():
    return current_app.config["CATALOG_SERVICE"]


@media_bp.route("/api/trending", methods=["GET"])
def trending():
    return _listing(_catalog().trending())


@media_bp.route("/api/top-rated/movies", methods=["GET"])
def top_rated_movies():
    return _listing(_catalog().top_rated_movies(page=_page_arg()))


@media_bp.route("/api/top-rated/tv", methods=["GET"])
def top_rated_tv():
    return _listing(_catalog().top_rated_tv(page=_page_arg()))


@media_bp.route("/api/popular/movies", methods=["GET"])
def popular_movies():
    return _listing(_catalog().popular_movies(page=_page_arg()))


@media_bp.route("/api/popular/tv", methods=["GET"])
def popular_tv():
    return _listing(_catalog().popular_tv(page=_page_arg()))


@media_bp.route("/api/anime/<category>", methods=["GET"])
def anime(category: str):
    """Anime listings; unknown categories are 404."""
    method = _ANIME_CATEGORIES.get(category)
    if method is None:
        raise NotFoundError(f"Unknown anime category '{category}'")
    return _listing(getattr(_catalog(), method)(page=_page_arg()))


@media_bp.route("/api/movie/<int:movie_id>", methods=["GET"])
def movie_detail(movie_id: int):
    return jsonify(_catalog().movie_detail(movie_id).to_json())


@media_bp.route("/api/tv/<int:tv_id>", methods=["GET"])
def tv_detail(tv_id: int):
    return jsonify(_catalog().tv_detail(tv_id).to_json())


@media_bp.route("/api/person/<int:person_id>", methods=["GET"])
def person_detail(person_id: int):
    return jsonify(_catalog().person_detail(person_id).to_json())
