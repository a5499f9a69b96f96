"""Unit tests for the review store (mongomock-backed)."""
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from screenscout.db.models import Review, User
from screenscout.services.review_store import ReviewStore
from screenscout.utils.exceptions import (
    DuplicateReviewError,
    InputValidationError,
    NotFoundError,
    NotFoundOrUnauthorizedError,
)
from screenscout.utils.sanitizer import MAX_COMMENT_LENGTH

pytestmark = pytest.mark.usefixtures("mongo")


@pytest.fixture
def store():
    return ReviewStore()


def _user(email):
    user = User(email=email, password_hash="x")
    user.save()
    return str(user.id)


@pytest.fixture
def alice():
    return _user("alice@example.com")


@pytest.fixture
def bob():
    return _user("bob@example.com")


def _create(store, user_id, media_id="550", rating=8, comment="Great", **kwargs):
    return store.create_review(
        user_id, media_id, kwargs.pop("media_type", "movie"),
        kwargs.pop("media_title", "Fight Club"), rating=rating, comment=comment, **kwargs,
    )


class TestCreateReview:
    """Tests for ReviewStore.create_review."""

    def test_create_then_list(self, store, alice):
        review = _create(store, alice, media_poster="https://img/p.jpg", media_release_date="1999-10-15")

        assert review.rating == 8
        assert review.replies == []
        assert review.created_at == review.updated_at

        (listed,) = store.get_reviews_for_media("550")
        data = store.to_json(listed)
        assert data["id"] == str(review.id)
        assert data["user"] == {"id": alice, "email": "alice@example.com"}
        assert data["mediaId"] == "550"
        assert data["mediaType"] == "movie"
        assert data["mediaTitle"] == "Fight Club"
        assert data["mediaPoster"] == "https://img/p.jpg"
        assert data["mediaReleaseDate"] == "1999-10-15"
        assert data["comment"] == "Great"
        assert data["replies"] == []

    def test_comment_is_trimmed(self, store, alice):
        review = _create(store, alice, comment="  Loved it\n  ")
        assert review.comment == "Loved it"

    @pytest.mark.parametrize("comment", [
        "Rated it 9 < 10 but > 8, <3 the ending",
        "<b>Loved</b> it",
        "Line one\nline two",
    ])
    def test_comment_text_stored_as_written(self, store, alice, comment):
        _create(store, alice, comment=comment)
        (stored,) = store.get_reviews_for_media("550")
        assert stored.comment == comment

    def test_control_characters_removed(self, store, alice):
        review = _create(store, alice, comment="Great\x00 film\x07")
        assert review.comment == "Great film"

    def test_comment_at_length_limit_accepted(self, store, alice):
        review = _create(store, alice, comment="x" * MAX_COMMENT_LENGTH)
        assert len(review.comment) == MAX_COMMENT_LENGTH

    def test_overlong_comment_rejected_not_truncated(self, store, alice):
        with pytest.raises(InputValidationError):
            _create(store, alice, comment="x" * (MAX_COMMENT_LENGTH + 1000))
        assert Review.objects.count() == 0

    @pytest.mark.parametrize("rating", [1, 10])
    def test_rating_bounds_accepted(self, store, alice, rating):
        assert _create(store, alice, rating=rating).rating == rating

    @pytest.mark.parametrize("rating", [0, 11, 9.5, True, "8", None])
    def test_invalid_rating_rejected(self, store, alice, rating):
        with pytest.raises(InputValidationError):
            _create(store, alice, rating=rating)
        assert Review.objects.count() == 0

    @pytest.mark.parametrize("comment", ["", "   ", "\x00\x07", None, 42])
    def test_empty_comment_rejected(self, store, alice, comment):
        with pytest.raises(InputValidationError):
            _create(store, alice, comment=comment)
        assert Review.objects.count() == 0

    def test_unknown_media_type_rejected(self, store, alice):
        with pytest.raises(InputValidationError):
            _create(store, alice, media_type="book")

    def test_missing_title_rejected(self, store, alice):
        with pytest.raises(InputValidationError):
            _create(store, alice, media_title="  ")

    def test_numeric_media_id_stored_as_text(self, store, alice):
        review = _create(store, alice, media_id=550)
        assert review.media_id == "550"
        assert store.get_user_review_for_media(alice, "550") is not None

    def test_duplicate_rejected_and_original_untouched(self, store, alice):
        _create(store, alice, rating=8, comment="First")
        with pytest.raises(DuplicateReviewError):
            _create(store, alice, rating=2, comment="Second")

        (only,) = store.get_reviews_for_media("550")
        assert only.rating == 8
        assert only.comment == "First"

    def test_same_media_different_users(self, store, alice, bob):
        _create(store, alice)
        _create(store, bob)
        assert len(store.get_reviews_for_media("550")) == 2

    def test_index_rejects_duplicate_written_behind_the_store(self, store, alice):
        _create(store, alice)
        now = datetime.now(timezone.utc)
        with pytest.raises(DuplicateKeyError):
            Review._get_collection().insert_one({
                "user": ObjectId(alice), "mediaId": "550", "mediaType": "movie",
                "mediaTitle": "Fight Club", "rating": 5, "comment": "dup",
                "replies": [], "createdAt": now, "updatedAt": now,
            })
        assert Review.objects.count() == 1

    def test_concurrent_creates_have_one_winner(self, store, alice):
        workers = 8
        barrier = threading.Barrier(workers)

        def create(n):
            barrier.wait()
            return _create(store, alice, comment=f"Attempt {n}")

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(create, n) for n in range(workers)]
            wait(futures)

        created = [f for f in futures if f.exception() is None]
        duplicates = [f for f in futures if isinstance(f.exception(), DuplicateReviewError)]
        assert len(created) == 1
        assert len(duplicates) == workers - 1
        assert Review.objects.count() == 1
        assert Review.objects.first().comment == created[0].result().comment


class TestUpdateReview:
    """Tests for ReviewStore.update_review."""

    def test_owner_updates_rating_and_comment(self, store, alice):
        review = _create(store, alice)
        updated = store.update_review(alice, str(review.id), 6, "Meh on rewatch")

        assert updated.rating == 6
        assert updated.comment == "Meh on rewatch"
        assert updated.updated_at >= updated.created_at
        assert updated.media_title == "Fight Club"

    def test_other_user_cannot_update(self, store, alice, bob):
        review = _create(store, alice, rating=8, comment="Mine")
        with pytest.raises(NotFoundOrUnauthorizedError):
            store.update_review(bob, str(review.id), 1, "Hijacked")

        review.reload()
        assert review.rating == 8
        assert review.comment == "Mine"

    def test_missing_and_foreign_look_the_same(self, store, alice, bob):
        review = _create(store, alice)
        with pytest.raises(NotFoundOrUnauthorizedError) as foreign:
            store.update_review(bob, str(review.id), 5, "x")
        with pytest.raises(NotFoundOrUnauthorizedError) as missing:
            store.update_review(bob, str(ObjectId()), 5, "x")
        assert foreign.value.message == missing.value.message
        assert foreign.value.status_code == missing.value.status_code == 404

    def test_malformed_id(self, store, alice):
        with pytest.raises(NotFoundOrUnauthorizedError):
            store.update_review(alice, "not-an-id", 5, "x")

    def test_invalid_input_checked_first(self, store, alice):
        review = _create(store, alice)
        with pytest.raises(InputValidationError):
            store.update_review(alice, str(review.id), 11, "x")
        with pytest.raises(InputValidationError):
            store.update_review(alice, str(review.id), 5, "  ")

    def test_overlong_update_rejected(self, store, alice):
        review = _create(store, alice, comment="Short")
        with pytest.raises(InputValidationError):
            store.update_review(alice, str(review.id), 5, "x" * (MAX_COMMENT_LENGTH + 1))
        review.reload()
        assert review.comment == "Short"

    def test_update_keeps_replies(self, store, alice, bob):
        review = _create(store, alice)
        store.add_reply(bob, str(review.id), "Agreed")
        updated = store.update_review(alice, str(review.id), 9, "Even better")
        assert [r.comment for r in updated.replies] == ["Agreed"]


class TestAddReply:
    """Tests for ReviewStore.add_reply."""

    def test_reply_leaves_review_fields_alone(self, store, alice, bob):
        review = _create(store, alice, rating=7, comment="Solid")
        before = Review.objects.get(id=review.id).updated_at

        updated = store.add_reply(bob, str(review.id), "Agreed!")

        assert updated.rating == 7
        assert updated.comment == "Solid"
        assert updated.updated_at == before
        (reply,) = updated.replies
        assert reply.comment == "Agreed!"
        assert str(reply.user_id) == bob
        assert reply.reply_id is not None

    def test_replies_append_in_order(self, store, alice, bob):
        review = _create(store, alice)
        store.add_reply(bob, str(review.id), "one")
        store.add_reply(alice, str(review.id), "two")
        updated = store.add_reply(bob, str(review.id), "three")
        assert [r.comment for r in updated.replies] == ["one", "two", "three"]

    def test_author_may_reply_to_own_review(self, store, alice):
        review = _create(store, alice)
        updated = store.add_reply(alice, str(review.id), "Edit: still great")
        assert len(updated.replies) == 1

    def test_reply_authors_are_resolved(self, store, alice, bob):
        review = _create(store, alice)
        store.add_reply(bob, str(review.id), "Agreed")
        data = store.to_json(store.get_reviews_for_media("550"))[0]
        assert data["replies"][0]["user"] == {"id": bob, "email": "bob@example.com"}
        assert data["replies"][0]["comment"] == "Agreed"
        assert data["replies"][0]["id"]

    def test_missing_review(self, store, alice):
        with pytest.raises(NotFoundError):
            store.add_reply(alice, str(ObjectId()), "Hello?")
        with pytest.raises(NotFoundError):
            store.add_reply(alice, "nope", "Hello?")

    def test_empty_reply_rejected(self, store, alice, bob):
        review = _create(store, alice)
        with pytest.raises(InputValidationError):
            store.add_reply(bob, str(review.id), "   ")
        review.reload()
        assert review.replies == []

    def test_overlong_reply_rejected(self, store, alice, bob):
        review = _create(store, alice)
        with pytest.raises(InputValidationError):
            store.add_reply(bob, str(review.id), "x" * (MAX_COMMENT_LENGTH + 1))
        review.reload()
        assert review.replies == []

    def test_reply_text_stored_as_written(self, store, alice, bob):
        review = _create(store, alice)
        updated = store.add_reply(bob, str(review.id), "a <tag> and 1 < 2")
        assert updated.replies[0].comment == "a <tag> and 1 < 2"


class TestQueries:
    """Tests for the read paths."""

    def test_reviews_for_media_newest_first(self, store, alice, bob):
        first = _create(store, alice)
        second = _create(store, bob)
        Review.objects(id=first.id).update_one(
            set__created_at=datetime.now(timezone.utc) - timedelta(days=1)
        )
        ids = [str(r.id) for r in store.get_reviews_for_media("550")]
        assert ids == [str(second.id), str(first.id)]

    def test_no_reviews(self, store):
        assert store.get_reviews_for_media("404") == []
        assert store.to_json([]) == []

    def test_reviews_by_user(self, store, alice, bob):
        _create(store, alice, media_id="1")
        _create(store, alice, media_id="2", media_type="tv", media_title="Show")
        _create(store, bob, media_id="1")
        assert {r.media_id for r in store.get_reviews_by_user(alice)} == {"1", "2"}
        assert store.get_reviews_by_user("garbage") == []

    def test_user_review_for_media(self, store, alice, bob):
        _create(store, alice)
        assert store.get_user_review_for_media(alice, "550").comment == "Great"
        assert store.get_user_review_for_media(bob, "550") is None
