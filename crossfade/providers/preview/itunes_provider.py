"""iTunes Search API preview provider.

Implements :class:`IPreviewProvider` by querying
``https://itunes.apple.com/search`` for each ``(track, artist)`` pair and
picking the best-scoring result that actually is the requested song.  No
credentials are needed.

Scoring (a candidate must pass both gates to score at all):

    title gate   normalized titles equal, one a word-prefix of the other,
                 or the wanted title (4+ chars) contained in the candidate   +10
    artist gate  any credited artist equal/contained, or rapidfuzz >= 90     +5
    exact title                                                              +3
    original version when the original was asked for                         +2

Remixes, live takes and other alternate versions are skipped unless the
requested title is itself one.  When nothing passes the gates the query is
a miss: the first search result is never used as a fallback, since a wrong
preview is worse than none.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any

import httpx
import structlog

from crossfade.interfaces.cache_provider import ICacheProvider
from crossfade.interfaces.preview_provider import IPreviewProvider
from crossfade.models.resolution import PreviewQuery
from crossfade.utils.concurrency import DEFAULT_MAX_CONCURRENCY, throttled_gather
from crossfade.utils.http import request_json
from crossfade.utils.logging import get_logger
from crossfade.utils.text_normalizer import (
    artist_names_match,
    extract_artist_names,
    is_remix_or_alternate_version,
    normalize_key,
    normalize_track_name,
    titles_match,
)

_SEARCH_URL = "https://itunes.apple.com/search"
_RESULT_LIMIT = 10
_CACHE_PREFIX = "itunes_preview"

_TITLE_MATCH_SCORE = 10
_ARTIST_MATCH_SCORE = 5
_EXACT_TITLE_BONUS = 3
_ORIGINAL_VERSION_BONUS = 2


def score_candidate(result: dict[str, Any], track_name: str, artist_name: str) -> int | None:
    """Score one iTunes search result against the wanted song.

    Returns
    -------
    int or None
        The match score, or ``None`` if the result is not the wanted song.
    """
    candidate_title = result.get("trackName") or ""
    wanted_title = normalize_track_name(track_name)
    normalized_candidate = normalize_track_name(candidate_title)

    wants_alternate = is_remix_or_alternate_version(track_name)
    is_alternate = is_remix_or_alternate_version(candidate_title)
    if is_alternate and not wants_alternate:
        return None

    if not titles_match(normalized_candidate, wanted_title):
        return None
    score = _TITLE_MATCH_SCORE

    wanted_artists = extract_artist_names(artist_name)
    candidate_artists = extract_artist_names(result.get("artistName") or "")
    # No artist to compare against is a miss, not a wildcard.
    if not any(
        artist_names_match(candidate, wanted)
        for wanted in wanted_artists
        for candidate in candidate_artists
    ):
        return None
    score += _ARTIST_MATCH_SCORE

    if normalized_candidate == wanted_title:
        score += _EXACT_TITLE_BONUS
    if not wants_alternate and not is_alternate:
        score += _ORIGINAL_VERSION_BONUS
    return score


def best_preview(results: list[dict[str, Any]], track_name: str, artist_name: str) -> str | None:
    """Preview URL of the highest-scoring result (earliest wins ties), or ``None``."""
    best_score = -1
    best_url: str | None = None
    for result in results:
        if not result.get("previewUrl"):
            continue
        score = score_candidate(result, track_name, artist_name)
        if score is not None and score > best_score:
            best_score = score
            best_url = result["previewUrl"]
    return best_url


class ITunesPreviewProvider(IPreviewProvider):
    """Preview lookups against the public iTunes Search API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    cache:
        Optional caller-owned cache; hits are stored under
        ``itunes_preview:<title>|<artist>``.
    max_concurrency:
        Simultaneous in-flight searches for one batch.
    country:
        iTunes storefront country code.
    timeout:
        Optional per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache: ICacheProvider | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        country: str = "us",
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._cache = cache
        self._max_concurrency = max_concurrency
        self._country = country
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "itunes"

    @staticmethod
    def _cache_key(query: PreviewQuery) -> str:
        return f"{_CACHE_PREFIX}:{normalize_key(query.track_name)}|{normalize_key(query.artist_name)}"

    async def _lookup(self, query: PreviewQuery) -> str | None:
        if self._cache is not None:
            cached = await self._cache.get(self._cache_key(query))
            if cached is not None:
                return cached

        payload = await request_json(
            self._http,
            "GET",
            _SEARCH_URL,
            provider_name=self.get_provider_name(),
            params={
                "term": f"{query.track_name} {query.artist_name}".strip(),
                "media": "music",
                "entity": "song",
                "limit": _RESULT_LIMIT,
                "country": self._country,
            },
            timeout=self._timeout,
        )
        results = (payload or {}).get("results") or []
        url = best_preview(results, query.track_name, query.artist_name)

        if url is not None and self._cache is not None:
            await self._cache.set(self._cache_key(query), url)
        return url

    async def search_previews(self, queries: list[PreviewQuery]) -> dict[str, str]:
        if not queries:
            return {}

        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await throttled_gather(
            [partial(self._lookup, query) for query in queries], semaphore=semaphore
        )

        previews: dict[str, str] = {}
        failures = 0
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                failures += 1
                self._logger.warning(
                    "itunes_preview_lookup_failed",
                    track=query.track_name,
                    artist=query.artist_name,
                    error=str(outcome),
                )
            elif outcome:
                previews[query.key] = outcome

        self._logger.debug(
            "itunes_preview_batch_complete",
            requested=len(queries),
            found=len(previews),
            failed=failures,
        )
        return previews
