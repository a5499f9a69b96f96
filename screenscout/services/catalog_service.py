"""Media catalog service — cached TMDB listings, details, people and search.

Listings (trending, popular, top-rated, anime) go through the injected
TTL cache: a fresh entry is returned as-is, otherwise TMDB is queried,
the page is normalized and the normalized list is cached. Search,
detail and person lookups are never cached.

Detail lookups fan out their sub-requests (details / credits / videos)
on a thread pool and only combine them once all have finished. If any
sub-request fails, the whole lookup fails; no partial detail is ever
returned.

Usage:
    catalog = MediaCatalogService(tmdb_client, TTLCache(), MediaNormalizer())
    movies = catalog.top_rated_movies(page=2)
    movie = catalog.movie_detail(550)
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any

import structlog

from screenscout.api_clients.tmdb_client import TMDBClient
from screenscout.models.media import MediaKind, MediaSummary, MovieDetail, Person, TVDetail
from screenscout.services.normalizer import MediaNormalizer
from screenscout.utils.cache import TTLCache
from screenscout.utils.exceptions import InputValidationError

logger = structlog.get_logger(__name__)

# Anime = Japanese-origin animated TV
ANIME_GENRE_ID = "16"
ANIME_ORIGIN_COUNTRY = "JP"
ANIME_TOP_RATED_MIN_VOTES = 200
ANIME_TRENDING_MIN_VOTES = 50

MAX_SEARCH_QUERY_LENGTH = 200


class MediaCatalogService:
    """Serves normalized catalog data backed by TMDB.

    Args:
        client: TMDBClient used for every upstream call.
        cache: TTL cache for listing results, owned by the app.
        normalizer: MediaNormalizer for payload mapping.
        max_workers: Thread pool size for detail fan-out.
    """

    def __init__(
        self,
        client: TMDBClient,
        cache: TTLCache,
        normalizer: MediaNormalizer,
        max_workers: int = 8,
    ) -> None:
        self._client = client
        self._cache = cache
        self._normalizer = normalizer
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tmdb-detail")

    def close(self) -> None:
        """Shut down the fan-out pool and the HTTP client."""
        self._executor.shutdown(wait=False)
        self._client.close()

    # ── Listings ──────────────────────────────────────────────────────

    def trending(self) -> list[MediaSummary]:
        """Weekly trending movies and TV (people filtered out)."""
        return self._cached_listing("trending", "/trending/all/week")

    def popular_movies(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing("popular-movies", "/movie/popular", kind="movie", page=page)

    def popular_tv(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing("popular-tv", "/tv/popular", kind="tv", page=page)

    def top_rated_movies(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing("top-rated-movies", "/movie/top_rated", kind="movie", page=page)

    def top_rated_tv(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing("top-rated-tv", "/tv/top_rated", kind="tv", page=page)

    def popular_anime(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing(
            "anime-popular", "/discover/tv", kind="tv", page=page,
            extra=self._anime_params(sort_by="popularity.desc"),
        )

    def top_rated_anime(self, page: int = 1) -> list[MediaSummary]:
        """Best-rated anime, ignoring titles with too few votes to mean anything."""
        return self._cached_listing(
            "anime-top-rated", "/discover/tv", kind="tv", page=page,
            extra=self._anime_params(
                sort_by="vote_average.desc",
                min_votes=ANIME_TOP_RATED_MIN_VOTES,
            ),
        )

    def trending_anime(self, page: int = 1) -> list[MediaSummary]:
        return self._cached_listing(
            "anime-trending", "/discover/tv", kind="tv", page=page,
            extra=self._anime_params(
                sort_by="popularity.desc",
                min_votes=ANIME_TRENDING_MIN_VOTES,
            ),
        )

    # ── Search ────────────────────────────────────────────────────────

    def search(self, query: str, page: int = 1) -> list[MediaSummary]:
        """Multi-search TMDB and keep only movie and TV results.

        Raises:
            InputValidationError: If the query is blank.
        """
        query = (query or "").strip()
        if not query:
            raise InputValidationError("Search query is required")
        query = query[:MAX_SEARCH_QUERY_LENGTH]

        raw = self._client.get("/search/multi", params={"query": query, "page": page})
        results = self._normalizer.listing(raw)
        logger.info("search_completed", query=query, page=page, results=len(results))
        return results

    # ── Details ───────────────────────────────────────────────────────

    def movie_detail(self, movie_id: int) -> MovieDetail:
        details, credits, videos = self._fetch_all(
            f"/movie/{movie_id}",
            f"/movie/{movie_id}/credits",
            f"/movie/{movie_id}/videos",
        )
        return self._normalizer.movie_detail(details, credits, videos)

    def tv_detail(self, tv_id: int) -> TVDetail:
        details, credits, videos = self._fetch_all(
            f"/tv/{tv_id}",
            f"/tv/{tv_id}/credits",
            f"/tv/{tv_id}/videos",
        )
        return self._normalizer.tv_detail(details, credits, videos)

    def person_detail(self, person_id: int) -> Person:
        details, credits = self._fetch_all(
            f"/person/{person_id}",
            f"/person/{person_id}/combined_credits",
        )
        return self._normalizer.person(details, credits)

    # ── Private Helpers ───────────────────────────────────────────────

    def _cached_listing(
        self,
        name: str,
        endpoint: str,
        kind: MediaKind | None = None,
        page: int | None = None,
        extra: dict[str, Any] | None = None,
    ) -> list[MediaSummary]:
        cache_key = TTLCache.make_key(name, page=page)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("cache_hit", key=cache_key)
            return list(cached)

        params = dict(extra or {})
        if page is not None:
            params["page"] = page

        raw = self._client.get(endpoint, params=params)
        results = self._normalizer.listing(raw, kind=kind)
        # Cached pages are immutable
        self._cache.set(cache_key, tuple(results))
        logger.info("listing_refreshed", key=cache_key, results=len(results))
        return results

    @staticmethod
    def _anime_params(sort_by: str, min_votes: int | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "with_genres": ANIME_GENRE_ID,
            "with_origin_country": ANIME_ORIGIN_COUNTRY,
            "sort_by": sort_by,
        }
        if min_votes is not None:
            params["vote_count.gte"] = min_votes
        return params

    def _fetch_all(self, *endpoints: str) -> list[dict]:
        """GET every endpoint concurrently; raise the first failure in order."""
        futures = [self._executor.submit(self._client.get, endpoint) for endpoint in endpoints]
        try:
            return [future.result() for future in futures]
        except Exception:
            for future in futures:
                future.cancel()
            logger.warning("detail_fetch_failed", endpoints=list(endpoints))
            raise
