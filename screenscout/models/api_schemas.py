"""Pydantic models for raw TMDB payloads.

These models describe what TMDB sends, field for field, and are the
input side of `screenscout.services.normalizer`. Movie and TV payloads
form a discriminated union on `media_type`; the catalog service stamps
that discriminator for endpoints whose results are all of one kind.

Every optional field is lenient: a value of the wrong type degrades to
None (or an empty list) instead of failing the whole payload.
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    WrapValidator,
)

MEDIA_KINDS = ("movie", "tv")


# ══════════════════════════════════════════════════════════════════════
# Lenient field types
# ══════════════════════════════════════════════════════════════════════

def _absent_on_error(value: Any, handler):
    try:
        return handler(value)
    except ValidationError:
        return None


def _date_or_absent(value: Any, handler):
    # TMDB sends "" for unknown dates
    if isinstance(value, str) and not value.strip():
        return None
    return _absent_on_error(value, handler)


def _dicts(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _ints(value: Any) -> list[int]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, int) and not isinstance(item, bool)]


def _media_entries(value: Any) -> list[dict]:
    """Keep only entries whose discriminator names a supported kind."""
    return [item for item in _dicts(value) if item.get("media_type") in MEDIA_KINDS]


LenientInt = Annotated[Optional[int], WrapValidator(_absent_on_error)]
LenientFloat = Annotated[Optional[float], WrapValidator(_absent_on_error)]
LenientStr = Annotated[Optional[str], WrapValidator(_absent_on_error)]
LenientDate = Annotated[Optional[date], WrapValidator(_date_or_absent)]
StringList = Annotated[list[str], BeforeValidator(_strings)]
IntList = Annotated[list[int], BeforeValidator(_ints)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ══════════════════════════════════════════════════════════════════════
# Movie / TV
# ══════════════════════════════════════════════════════════════════════

class GenrePayload(_Payload):
    id: LenientInt = None
    name: LenientStr = None


class _MediaPayloadBase(_Payload):
    id: LenientInt = None
    vote_average: LenientFloat = None
    poster_path: LenientStr = None
    backdrop_path: LenientStr = None
    overview: LenientStr = None
    # Detail-only fields
    genres: Annotated[list[GenrePayload], BeforeValidator(_dicts)] = Field(default_factory=list)
    status: LenientStr = None
    tagline: LenientStr = None


class MoviePayload(_MediaPayloadBase):
    """A TMDB movie, from a listing or `/movie/{id}`."""
    media_type: Literal["movie"]
    title: LenientStr = None
    release_date: LenientDate = None
    runtime: LenientInt = None
    budget: LenientInt = None
    revenue: LenientInt = None


class TVPayload(_MediaPayloadBase):
    """A TMDB TV series (anime included), from a listing or `/tv/{id}`."""
    media_type: Literal["tv"]
    name: LenientStr = None
    first_air_date: LenientDate = None
    episode_run_time: IntList = Field(default_factory=list)
    number_of_seasons: LenientInt = None
    number_of_episodes: LenientInt = None


MediaPayload = Annotated[Union[MoviePayload, TVPayload], Field(discriminator="media_type")]


class ListingPayload(_Payload):
    """A paged TMDB result set (`trending`, `discover`, `search/multi`, ...)."""
    page: LenientInt = None
    results: Annotated[list[MediaPayload], BeforeValidator(_media_entries)] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════
# Credits / Videos
# ══════════════════════════════════════════════════════════════════════

class CastPayload(_Payload):
    id: LenientInt = None
    name: LenientStr = None
    character: LenientStr = None
    profile_path: LenientStr = None
    order: LenientInt = None


class CrewPayload(_Payload):
    id: LenientInt = None
    name: LenientStr = None
    job: LenientStr = None
    department: LenientStr = None


class CreditsPayload(_Payload):
    cast: Annotated[list[CastPayload], BeforeValidator(_dicts)] = Field(default_factory=list)
    crew: Annotated[list[CrewPayload], BeforeValidator(_dicts)] = Field(default_factory=list)


class VideoPayload(_Payload):
    key: LenientStr = None
    site: LenientStr = None
    type: LenientStr = None
    name: LenientStr = None


class VideosPayload(_Payload):
    results: Annotated[list[VideoPayload], BeforeValidator(_dicts)] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════
# People
# ══════════════════════════════════════════════════════════════════════

class PersonPayload(_Payload):
    id: LenientInt = None
    name: LenientStr = None
    biography: LenientStr = None
    birthday: LenientDate = None
    deathday: LenientDate = None
    place_of_birth: LenientStr = None
    profile_path: LenientStr = None
    known_for_department: LenientStr = None
    gender: LenientInt = None
    homepage: LenientStr = None
    also_known_as: StringList = Field(default_factory=list)


class MovieCreditPayload(MoviePayload):
    character: LenientStr = None


class TVCreditPayload(TVPayload):
    character: LenientStr = None


PersonCreditPayload = Annotated[
    Union[MovieCreditPayload, TVCreditPayload], Field(discriminator="media_type")
]


class PersonCreditsPayload(_Payload):
    """`/person/{id}/combined_credits`; crew credits are not used."""
    cast: Annotated[list[PersonCreditPayload], BeforeValidator(_media_entries)] = Field(default_factory=list)
