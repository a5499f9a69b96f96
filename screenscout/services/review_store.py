"""Review store — reviews and threaded replies on media items.

Rules:
- One review per (user, media item). Enforced by the unique index on
  `reviews(user, mediaId)`: creation is a plain insert and a duplicate-key
  error becomes DuplicateReviewError, so two racing creates can never
  both succeed.
- Only the author may change a review's rating and comment. The update is
  a single find-and-modify filtered on (review id, author id); a missing
  review and someone else's review fail the same way.
- Anyone signed in may reply, the author included. Replies are appended
  atomically and never touch the review's own fields or `updatedAt`.
- Nothing here deletes reviews or replies, or edits replies.

User ids come from the auth layer and are trusted as-is.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from mongoengine import NotUniqueError

from screenscout.db.models import Reply, Review, User, utcnow
from screenscout.models.requests import ReplyCreate, ReviewCreate, ReviewUpdate, validate_input
from screenscout.utils.exceptions import (
    AuthError,
    DuplicateReviewError,
    NotFoundError,
    NotFoundOrUnauthorizedError,
)

logger = structlog.get_logger(__name__)


def _object_id(value: Any) -> ObjectId | None:
    """Parse an id string, returning None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


class ReviewStore:
    """Creates, updates and queries reviews and replies in MongoDB."""

    # ── Mutations ─────────────────────────────────────────────────────

    def create_review(
        self,
        user_id: str,
        media_id: str,
        media_type: str,
        media_title: str,
        media_poster: Optional[str] = None,
        media_release_date: Optional[str] = None,
        *,
        rating: int,
        comment: str,
    ) -> Review:
        """Create the caller's review for a media item.

        Raises:
            InputValidationError: Bad rating, empty comment, missing media fields.
            DuplicateReviewError: The user already reviewed this media item.
        """
        data = validate_input(ReviewCreate, {
            "media_id": media_id,
            "media_type": media_type,
            "media_title": media_title,
            "media_poster": media_poster,
            "media_release_date": media_release_date,
            "rating": rating,
            "comment": comment,
        })
        owner = _object_id(user_id)
        if owner is None:
            raise AuthError()

        now = utcnow()
        review = Review(
            user_id=owner,
            media_id=data.media_id,
            media_type=data.media_type,
            media_title=data.media_title,
            media_poster=data.media_poster,
            media_release_date=data.media_release_date,
            rating=data.rating,
            comment=data.comment,
            replies=[],
            created_at=now,
            updated_at=now,
        )
        try:
            review.save(force_insert=True)
        except NotUniqueError as e:
            logger.info("review_duplicate", user_id=str(owner), media_id=data.media_id)
            raise DuplicateReviewError(data.media_id) from e

        logger.info(
            "review_created",
            review_id=str(review.id),
            user_id=str(owner),
            media_id=data.media_id,
            rating=data.rating,
        )
        return review

    def update_review(self, user_id: str, review_id: str, rating: int, comment: str) -> Review:
        """Change the rating and comment of the caller's own review.

        Raises:
            InputValidationError: Bad rating or empty comment.
            NotFoundOrUnauthorizedError: No such review, or not the caller's.
        """
        data = validate_input(ReviewUpdate, {"rating": rating, "comment": comment})
        owner = _object_id(user_id)
        target = _object_id(review_id)
        if owner is None or target is None:
            raise NotFoundOrUnauthorizedError()

        review = Review.objects(id=target, user_id=owner).modify(
            new=True,
            set__rating=data.rating,
            set__comment=data.comment,
            set__updated_at=utcnow(),
        )
        if review is None:
            logger.info("review_update_rejected", review_id=str(review_id), user_id=str(user_id))
            raise NotFoundOrUnauthorizedError()

        logger.info("review_updated", review_id=str(target), rating=data.rating)
        return review

    def add_reply(self, user_id: str, review_id: str, comment: str) -> Review:
        """Append a reply to any review.

        Returns:
            The review with the new reply at the end of `replies`.

        Raises:
            InputValidationError: Empty comment.
            NotFoundError: No such review.
        """
        data = validate_input(ReplyCreate, {"comment": comment})
        author = _object_id(user_id)
        if author is None:
            raise AuthError()
        target = _object_id(review_id)
        if target is None:
            raise NotFoundError("Review not found")

        reply = Reply(user_id=author, comment=data.comment, created_at=utcnow())
        review = Review.objects(id=target).modify(new=True, push__replies=reply)
        if review is None:
            raise NotFoundError("Review not found")

        logger.info(
            "reply_added",
            review_id=str(target),
            reply_id=str(reply.reply_id),
            user_id=str(author),
        )
        return review

    # ── Queries ───────────────────────────────────────────────────────

    def get_reviews_for_media(self, media_id: str) -> list[Review]:
        """All reviews of a media item, newest first."""
        return list(
            Review.objects(media_id=str(media_id)).order_by("-created_at", "-id")
        )

    def get_reviews_by_user(self, user_id: str) -> list[Review]:
        """All reviews written by a user, newest first."""
        owner = _object_id(user_id)
        if owner is None:
            return []
        return list(Review.objects(user_id=owner).order_by("-created_at", "-id"))

    def get_user_review_for_media(self, user_id: str, media_id: str) -> Review | None:
        """The user's review of a media item, or None if they haven't written one."""
        owner = _object_id(user_id)
        if owner is None:
            return None
        return Review.objects(user_id=owner, media_id=str(media_id)).first()

    # ── Serialization ─────────────────────────────────────────────────

    def author_emails(self, reviews: Iterable[Review]) -> dict[ObjectId, str]:
        """Resolve every review and reply author to an e-mail in one query."""
        ids: set[ObjectId] = set()
        for review in reviews:
            ids |= review.author_ids()
        if not ids:
            return {}
        return {user.id: user.email for user in User.objects(id__in=list(ids)).only("email")}

    def to_json(self, reviews: Review | list[Review]) -> dict[str, Any] | list[dict[str, Any]]:
        """Serialize one review or a list of reviews with authors resolved."""
        if isinstance(reviews, Review):
            return reviews.to_dict(self.author_emails([reviews]))
        emails = self.author_emails(reviews)
        return [review.to_dict(emails) for review in reviews]
