"""Media normalizer — maps TMDB payloads onto the canonical media shapes.

Pure transformation, no I/O. Input is the discriminated union from
`screenscout.models.api_schemas`; output is the camelCase-serializable
models in `screenscout.models.media`. Missing or malformed optional
fields come out as None or empty lists; nothing here raises a domain
error.

Usage:
    normalizer = MediaNormalizer(image_base_url, backdrop_base_url)
    items = normalizer.listing(raw_page, kind="movie")
    detail = normalizer.movie_detail(raw_details, raw_credits, raw_videos)
"""
from __future__ import annotations

from datetime import date
from typing import Any

from screenscout.models.api_schemas import (
    CreditsPayload,
    ListingPayload,
    MoviePayload,
    PersonCreditsPayload,
    PersonPayload,
    TVPayload,
    VideosPayload,
)
from screenscout.models.media import (
    CastMember,
    Crew,
    FilmographyEntry,
    MediaKind,
    MediaSummary,
    MovieDetail,
    Person,
    TVDetail,
)

MAX_CAST = 10
DIRECTOR_JOBS = frozenset({"Director"})
WRITER_JOBS = frozenset({"Writer", "Screenplay", "Story"})
TRAILER_TYPE = "Trailer"
TRAILER_SITE = "YouTube"


def image_url(base_url: str, path: str | None) -> str | None:
    """Join an image base URL and a TMDB relative path; None when no path."""
    if not path:
        return None
    return f"{base_url}{path}"


def _as_dict(raw: Any) -> dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


class MediaNormalizer:
    """Converts TMDB payloads into canonical Media / Person objects.

    Args:
        image_base_url: Prefix for poster and profile paths (w500).
        backdrop_base_url: Prefix for backdrop paths (w1280).
    """

    def __init__(
        self,
        image_base_url: str = "https://image.tmdb.org/t/p/w500",
        backdrop_base_url: str = "https://image.tmdb.org/t/p/w1280",
    ) -> None:
        self._image_base = image_base_url.rstrip("/")
        self._backdrop_base = backdrop_base_url.rstrip("/")

    # ── Listings ──────────────────────────────────────────────────────

    def listing(self, raw: dict[str, Any], kind: MediaKind | None = None) -> list[MediaSummary]:
        """Normalize a paged TMDB result set.

        Entries whose kind is neither movie nor tv are dropped.

        Args:
            raw: Raw TMDB page (`{"page": ..., "results": [...]}`).
            kind: Kind of every entry, for endpoints that don't say.
        """
        results = raw.get("results") if isinstance(raw, dict) else None
        if kind is not None and isinstance(results, list):
            results = [{**item, "media_type": kind} for item in results if isinstance(item, dict)]
        page = ListingPayload.model_validate({"results": results})
        return [self.summary(payload) for payload in page.results]

    def summary(self, payload: MoviePayload | TVPayload) -> MediaSummary:
        """Normalize one movie/TV payload into a listing entry."""
        return MediaSummary(**self._summary_fields(payload))

    # ── Details ───────────────────────────────────────────────────────

    def movie_detail(
        self,
        details: dict[str, Any],
        credits: dict[str, Any],
        videos: dict[str, Any],
    ) -> MovieDetail:
        """Combine `/movie/{id}`, its credits and its videos into a MovieDetail."""
        payload = MoviePayload.model_validate({**_as_dict(details), "media_type": "movie"})
        return MovieDetail(
            **self._summary_fields(payload),
            **self._detail_fields(payload, credits, videos),
            runtime=payload.runtime,
            budget=payload.budget,
            revenue=payload.revenue,
        )

    def tv_detail(
        self,
        details: dict[str, Any],
        credits: dict[str, Any],
        videos: dict[str, Any],
    ) -> TVDetail:
        """Combine `/tv/{id}`, its credits and its videos into a TVDetail."""
        payload = TVPayload.model_validate({**_as_dict(details), "media_type": "tv"})
        return TVDetail(
            **self._summary_fields(payload),
            **self._detail_fields(payload, credits, videos),
            runtime=payload.episode_run_time[0] if payload.episode_run_time else None,
            number_of_seasons=payload.number_of_seasons,
            number_of_episodes=payload.number_of_episodes,
        )

    def cast(self, credits: CreditsPayload) -> list[CastMember]:
        """Top-billed cast, at most MAX_CAST members, in upstream order."""
        return [
            CastMember(
                id=member.id,
                name=member.name,
                character=member.character,
                profile_url=image_url(self._image_base, member.profile_path),
            )
            for member in credits.cast[:MAX_CAST]
        ]

    @staticmethod
    def crew(credits: CreditsPayload) -> Crew:
        """Directors and writers in upstream order, duplicates kept."""
        return Crew(
            directors=[c.name for c in credits.crew if c.job in DIRECTOR_JOBS and c.name],
            writers=[c.name for c in credits.crew if c.job in WRITER_JOBS and c.name],
        )

    @staticmethod
    def trailer_key(videos: VideosPayload) -> str | None:
        """Key of the first YouTube trailer, or None."""
        for video in videos.results:
            if video.type == TRAILER_TYPE and video.site == TRAILER_SITE and video.key:
                return video.key
        return None

    # ── People ────────────────────────────────────────────────────────

    def person(self, details: dict[str, Any], credits: dict[str, Any]) -> Person:
        """Combine `/person/{id}` and its combined credits into a Person.

        The filmography holds movie/TV acting credits, newest first;
        credits without a release date go last.
        """
        person = PersonPayload.model_validate(_as_dict(details))
        combined = PersonCreditsPayload.model_validate(_as_dict(credits))

        filmography = [
            FilmographyEntry(**self._summary_fields(credit), character=credit.character)
            for credit in combined.cast
        ]
        filmography.sort(key=lambda entry: entry.release_date or date.min, reverse=True)

        return Person(
            id=person.id,
            name=person.name,
            biography=person.biography or "",
            birthday=person.birthday,
            deathday=person.deathday,
            place_of_birth=person.place_of_birth,
            profile_url=image_url(self._image_base, person.profile_path),
            known_for=person.known_for_department,
            gender=person.gender,
            homepage=person.homepage or None,
            also_known_as=person.also_known_as,
            filmography=filmography,
        )

    # ── Private Helpers ───────────────────────────────────────────────

    def _summary_fields(self, payload: MoviePayload | TVPayload) -> dict[str, Any]:
        if isinstance(payload, MoviePayload):
            title, released = payload.title, payload.release_date
        else:
            title, released = payload.name, payload.first_air_date
        return {
            "id": payload.id,
            "title": title,
            "kind": payload.media_type,
            "rating": round(payload.vote_average, 1) if payload.vote_average is not None else None,
            "image_url": image_url(self._image_base, payload.poster_path),
            "backdrop_url": image_url(self._backdrop_base, payload.backdrop_path),
            "overview": payload.overview,
            "release_date": released,
        }

    def _detail_fields(
        self,
        payload: MoviePayload | TVPayload,
        credits: dict[str, Any],
        videos: dict[str, Any],
    ) -> dict[str, Any]:
        parsed_credits = CreditsPayload.model_validate(_as_dict(credits))
        parsed_videos = VideosPayload.model_validate(_as_dict(videos))
        return {
            "genres": [g.name for g in payload.genres if g.name],
            "status": payload.status,
            "tagline": payload.tagline,
            "cast": self.cast(parsed_credits),
            "crew": self.crew(parsed_credits),
            "trailer_key": self.trailer_key(parsed_videos),
        }
