"""Reviews blueprint.

Routes:
    POST /api/reviews                   → Create the caller's review (201)
    GET  /api/reviews/me                → The caller's reviews, newest first
    GET  /api/reviews/me/<media_id>     → The caller's review of one item, or null
    PUT  /api/reviews/<review_id>       → Update the caller's own review
    POST /api/reviews/<review_id>/reply → Reply to any review (201)
    GET  /api/reviews/<media_id>        → Every review of one item (public)

All routes except the public listing need `Authorization: Bearer <token>`.
"""
from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from screenscout.middleware.auth import require_auth
from screenscout.utils.exceptions import InputValidationError

reviews_bp = Blueprint("reviews", __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InputValidationError("Request body must be a JSON object")
    return data


def _store():
    return current_app.config["REVIEW_STORE"]


@reviews_bp.route("/api/reviews", methods=["POST"])
@require_auth
def create_review():
    """Create a review.

    Request JSON:
        {
            "mediaId": "550",
            "mediaType": "movie",
            "mediaTitle": "Fight Club",
            "mediaPoster": "https://image.tmdb.org/t/p/w500/x.jpg",
            "mediaReleaseDate": "1999-10-15",
            "rating": 9,
            "comment": "Great"
        }

    Returns 409 if the caller already reviewed this item.
    """
    data = _json_body()
    store = _store()
    review = store.create_review(
        g.user_id,
        data.get("mediaId"),
        data.get("mediaType"),
        data.get("mediaTitle"),
        data.get("mediaPoster"),
        data.get("mediaReleaseDate"),
        rating=data.get("rating"),
        comment=data.get("comment"),
    )
    return jsonify(store.to_json(review)), 201


@reviews_bp.route("/api/reviews/me", methods=["GET"])
@require_auth
def my_reviews():
    store = _store()
    return jsonify(store.to_json(store.get_reviews_by_user(g.user_id)))


@reviews_bp.route("/api/reviews/me/<media_id>", methods=["GET"])
@require_auth
def my_review_for_media(media_id: str):
    """The caller's review of `media_id`; the body is `null` when there is none."""
    store = _store()
    review = store.get_user_review_for_media(g.user_id, media_id)
    return jsonify(store.to_json(review) if review is not None else None)


@reviews_bp.route("/api/reviews/<review_id>", methods=["PUT"])
@require_auth
def update_review(review_id: str):
    """Change rating and comment.

    Request JSON:
        { "rating": 7, "comment": "Better on rewatch" }

    Returns 404 both for unknown reviews and for someone else's review.
    """
    data = _json_body()
    store = _store()
    review = store.update_review(g.user_id, review_id, data.get("rating"), data.get("comment"))
    return jsonify(store.to_json(review))


@reviews_bp.route("/api/reviews/<review_id>/reply", methods=["POST"])
@require_auth
def add_reply(review_id: str):
    """Append a reply.

    Request JSON:
        { "comment": "Agreed!" }

    Response JSON (201): the whole review with the new reply last.
    """
    data = _json_body()
    store = _store()
    review = store.add_reply(g.user_id, review_id, data.get("comment"))
    return jsonify(store.to_json(review)), 201


@reviews_bp.route("/api/reviews/<media_id>", methods=["GET"])
def reviews_for_media(media_id: str):
    store = _store()
    return jsonify(store.to_json(store.get_reviews_for_media(media_id)))
