"""Pydantic models for review and account input validation.

Request bodies arrive camelCase (`mediaId`, `mediaTitle`, ...); services
build the same models from snake_case keyword arguments.
"""
from __future__ import annotations

import re
from typing import Any, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from screenscout.utils.exceptions import InputValidationError
from screenscout.utils.sanitizer import MAX_COMMENT_LENGTH, clean_comment

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(model_cls: type[ModelT], data: Any) -> ModelT:
    """Validate `data` against `model_cls`, raising InputValidationError.

    The first pydantic error becomes the message, prefixed by its field.
    """
    if not isinstance(data, dict):
        raise InputValidationError("Request body must be a JSON object")
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        if not errors:
            raise InputValidationError("Invalid request") from e
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Validation error")
        raise InputValidationError(f"{field}: {message}" if field else message) from e


class _Input(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _comment(v: str) -> str:
    v = clean_comment(v)
    if not v:
        raise ValueError("Comment cannot be empty")
    return v


class ReviewCreate(_Input):
    """New review for one media item.

    Attributes:
        media_id: TMDB id of the reviewed item (numbers are accepted and stored as text).
        media_type: "movie" or "tv".
        media_title: Title captured at review time.
        media_poster: Poster URL captured at review time.
        media_release_date: Release date captured at review time.
        rating: Whole number from 1 to 10.
        comment: Review text, non-empty after trimming, at most MAX_COMMENT_LENGTH characters.
    """
    media_id: str = Field(..., min_length=1, max_length=64)
    media_type: Literal["movie", "tv"]
    media_title: str = Field(..., min_length=1, max_length=500)
    media_poster: Optional[str] = Field(default=None, max_length=1000)
    media_release_date: Optional[str] = Field(default=None, max_length=32)
    rating: StrictInt = Field(..., ge=1, le=10)
    comment: str = Field(..., max_length=MAX_COMMENT_LENGTH)

    @field_validator("media_id", mode="before")
    @classmethod
    def coerce_media_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("media_id", "media_title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("media_poster", "media_release_date")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _comment(v)


class ReviewUpdate(_Input):
    """New rating and comment for an existing review."""
    rating: StrictInt = Field(..., ge=1, le=10)
    comment: str = Field(..., max_length=MAX_COMMENT_LENGTH)

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _comment(v)


class ReplyCreate(_Input):
    comment: str = Field(..., max_length=MAX_COMMENT_LENGTH)

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _comment(v)


class Credentials(_Input):
    """E-mail + password pair for register and login."""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid e-mail address")
        return v


class Registration(Credentials):
    password: str = Field(..., min_length=6, max_length=256)
