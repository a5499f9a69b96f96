"""MongoDB documents for accounts, reviews and replies.

Stored field names are camelCase (`mediaId`, `createdAt`, ...) and the
author of a review or reply is stored as the account's ObjectId under
`user`, matching the documents the web client already reads.

Invariant enforced by the database, not by application code:
    at most one Review per (user, mediaId) — unique compound index.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from bson import ObjectId
from mongoengine import (
    DateTimeField,
    Document,
    EmbeddedDocument,
    EmbeddedDocumentListField,
    IntField,
    ObjectIdField,
    StringField,
)

MEDIA_TYPES = ("movie", "tv")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _author(user_id: ObjectId, emails: Mapping[ObjectId, str]) -> dict[str, Any]:
    # email is None when the account no longer exists
    return {"id": str(user_id), "email": emails.get(user_id)}


class User(Document):
    meta = {
        "collection": "users",
        "indexes": [{"fields": ["email"], "unique": True}],
    }

    email = StringField(required=True, max_length=254)
    password_hash = StringField(required=True, db_field="password")
    created_at = DateTimeField(default=utcnow, db_field="createdAt")


class Reply(EmbeddedDocument):
    reply_id = ObjectIdField(required=True, default=ObjectId, db_field="_id")
    user_id = ObjectIdField(required=True, db_field="user")
    comment = StringField(required=True)
    created_at = DateTimeField(default=utcnow, db_field="createdAt")

    def to_dict(self, emails: Mapping[ObjectId, str]) -> dict[str, Any]:
        return {
            "id": str(self.reply_id),
            "user": _author(self.user_id, emails),
            "comment": self.comment,
            "createdAt": _iso(self.created_at),
        }


class Review(Document):
    meta = {
        "collection": "reviews",
        "indexes": [
            {"fields": ["user_id", "media_id"], "unique": True},
            "media_id",
        ],
    }

    user_id = ObjectIdField(required=True, db_field="user")
    media_id = StringField(required=True, db_field="mediaId")
    media_type = StringField(required=True, choices=MEDIA_TYPES, db_field="mediaType")
    media_title = StringField(required=True, db_field="mediaTitle")
    media_poster = StringField(db_field="mediaPoster")
    media_release_date = StringField(db_field="mediaReleaseDate")
    rating = IntField(required=True, min_value=1, max_value=10)
    comment = StringField(required=True)
    replies = EmbeddedDocumentListField(Reply)
    created_at = DateTimeField(default=utcnow, db_field="createdAt")
    updated_at = DateTimeField(default=utcnow, db_field="updatedAt")

    def author_ids(self) -> set[ObjectId]:
        """Ids of the review author and every reply author."""
        return {self.user_id, *(reply.user_id for reply in self.replies)}

    def to_dict(self, emails: Mapping[ObjectId, str] | None = None) -> dict[str, Any]:
        """Serialize for API responses.

        Args:
            emails: Author id → e-mail map used to resolve `user` fields.
        """
        emails = emails or {}
        return {
            "id": str(self.id),
            "user": _author(self.user_id, emails),
            "mediaId": self.media_id,
            "mediaType": self.media_type,
            "mediaTitle": self.media_title,
            "mediaPoster": self.media_poster,
            "mediaReleaseDate": self.media_release_date,
            "rating": self.rating,
            "comment": self.comment,
            "replies": [reply.to_dict(emails) for reply in self.replies],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
