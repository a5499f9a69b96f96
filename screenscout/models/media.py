"""Canonical media shapes returned to API clients.

Field names are snake_case in Python and camelCase on the wire
(`imageUrl`, `releaseDate`, `trailerKey`, ...). The media kind is exposed
as `type`. Movie and TV details are separate models so a response can
never carry both budget/revenue and season/episode counts.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MediaKind = Literal["movie", "tv"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Serialize with camelCase keys and ISO dates."""
        return self.model_dump(mode="json", by_alias=True)


class MediaSummary(CamelModel):
    """A movie or TV entry as shown in listings and search results."""
    id: Optional[int] = None
    title: Optional[str] = None
    kind: MediaKind = Field(alias="type")
    rating: Optional[float] = None
    image_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    overview: Optional[str] = None
    release_date: Optional[date] = None


class CastMember(CamelModel):
    id: Optional[int] = None
    name: Optional[str] = None
    character: Optional[str] = None
    profile_url: Optional[str] = None


class Crew(CamelModel):
    directors: list[str] = Field(default_factory=list)
    writers: list[str] = Field(default_factory=list)


class MediaDetail(MediaSummary):
    """Fields shared by movie and TV detail pages."""
    genres: list[str] = Field(default_factory=list)
    runtime: Optional[int] = None
    status: Optional[str] = None
    tagline: Optional[str] = None
    cast: list[CastMember] = Field(default_factory=list)
    crew: Crew = Field(default_factory=Crew)
    trailer_key: Optional[str] = None


class MovieDetail(MediaDetail):
    kind: Literal["movie"] = Field(default="movie", alias="type")
    budget: Optional[int] = None
    revenue: Optional[int] = None


class TVDetail(MediaDetail):
    kind: Literal["tv"] = Field(default="tv", alias="type")
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None


class FilmographyEntry(MediaSummary):
    character: Optional[str] = None


class Person(CamelModel):
    id: Optional[int] = None
    name: Optional[str] = None
    biography: str = ""
    birthday: Optional[date] = None
    deathday: Optional[date] = None
    place_of_birth: Optional[str] = None
    profile_url: Optional[str] = None
    known_for: Optional[str] = None
    gender: Optional[int] = None
    homepage: Optional[str] = None
    also_known_as: list[str] = Field(default_factory=list)
    filmography: list[FilmographyEntry] = Field(default_factory=list)
