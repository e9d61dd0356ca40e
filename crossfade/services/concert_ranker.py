"""Concert discovery ranked by the listener's artist preferences.

Given a ranked artist list (rank 1 = favourite) and a home city, the
ranker asks the events provider once per artist, concurrently and under
the batch limits, then builds one feed:

1. normalize each raw event into a :class:`Concert`,
2. tag it with its artist's rank and whether it is in the home city,
3. collapse duplicate listings of the same show (artist, venue and
   calendar day, case-insensitive), keeping the best-ranked copy,
4. order by home city first, then artist rank, then date.

An artist whose fetch fails or times out contributes no concerts.  Only
when every artist's fetch fails does the whole call fail.
"""

from __future__ import annotations

import asyncio
import datetime

import structlog

from crossfade.interfaces.events_provider import IEventsProvider
from crossfade.models.catalog import UnifiedArtist
from crossfade.models.concert import Concert, EventImage, RankedArtist, RankedConcert, RawEvent
from crossfade.utils.concurrency import BatchOptions, count_failures, run_bounded
from crossfade.utils.errors import AllSourcesFailedError
from crossfade.utils.logging import batch_context, get_logger
from crossfade.utils.text_normalizer import normalize_key

DEFAULT_RANK_CAP = 20
UNKNOWN_VENUE = "Unknown Venue"

_PREFERRED_IMAGE_RATIO = "16_9"
_MIN_IMAGE_WIDTH = 200


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------

def best_image_url(images: list[EventImage]) -> str | None:
    """First 16:9 image at least 200px wide, else the first image."""
    for image in images:
        if image.ratio == _PREFERRED_IMAGE_RATIO and (image.width or 0) >= _MIN_IMAGE_WIDTH:
            return image.url
    return images[0].url if images else None


def format_price_range(price_min: float | None, price_max: float | None) -> str | None:
    """``"$25"`` or ``"$25 - $60"``; ``None`` when no minimum is known."""
    if price_min is None:
        return None
    if price_max is None or int(price_max) == int(price_min):
        return f"${int(price_min)}"
    return f"${int(price_min)} - ${int(price_max)}"


def is_home_city(city: str | None, home_city: str | None) -> bool:
    """Case-insensitive, whitespace-trimmed equality; a blank home city never matches."""
    home = normalize_key(home_city)
    return bool(home) and normalize_key(city) == home


def to_concert(raw: RawEvent, artist: UnifiedArtist, location_hint: str | None = None) -> Concert:
    """Normalize one raw event found for *artist*.

    The event's own headliner wins over the searched artist's name; the
    artist's image is used when the event has none; the search city stands
    in for a missing venue city.
    """
    return Concert(
        id=raw.event_id,
        name=raw.name,
        artist_name=raw.artist_name or artist.name,
        artist_image_url=best_image_url(raw.images) or artist.image_url,
        venue_name=raw.venue_name or UNKNOWN_VENUE,
        venue_address=raw.venue_address or "",
        city=raw.city or (location_hint or ""),
        date=datetime.datetime.combine(raw.local_date, raw.local_time or datetime.time()),
        price_range=format_price_range(raw.price_min, raw.price_max),
        ticket_url=raw.ticket_url or "",
        additional_artists=raw.additional_artists,
    )


def dedupe_concerts(concerts: list[RankedConcert]) -> list[RankedConcert]:
    """Collapse listings of the same show, keeping the best-ranked copy.

    First-seen order is kept for the survivors.
    """
    kept: dict[tuple[str, str, datetime.date], RankedConcert] = {}
    for ranked in concerts:
        key = ranked.concert.dedup_key
        existing = kept.get(key)
        if existing is None or ranked.artist_rank < existing.artist_rank:
            kept[key] = ranked
    return list(kept.values())


def _sort_key(ranked: RankedConcert) -> tuple[bool, int, datetime.datetime]:
    return (not ranked.is_home_city, ranked.artist_rank, ranked.concert.date)


class ConcertRanker:
    """Builds the ranked concert feed for one listener.

    Parameters
    ----------
    events_provider:
        Source of raw events, queried once per artist.
    options:
        Default concurrency cap and per-unit timeout.
    rank_cap:
        Longest artist list accepted; longer lists are truncated.
    """

    def __init__(
        self,
        events_provider: IEventsProvider,
        options: BatchOptions | None = None,
        rank_cap: int = DEFAULT_RANK_CAP,
    ) -> None:
        self._events = events_provider
        self._options = options or BatchOptions()
        self._rank_cap = rank_cap
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def rank(
        self,
        artists: list[RankedArtist],
        home_city: str | None,
        *,
        cancel_event: asyncio.Event | None = None,
        options: BatchOptions | None = None,
        limit: int | None = None,
    ) -> list[RankedConcert]:
        """Fetch, normalize, de-duplicate and order concerts for *artists*.

        Parameters
        ----------
        artists:
            Ranked artists, at most ``rank_cap`` of them.
        home_city:
            The listener's city; also passed to the provider as the
            location hint.
        cancel_event:
            Optional external cancellation signal.
        options:
            Per-call override of the ranker's batch options.
        limit:
            Optional maximum number of concerts returned.

        Returns
        -------
        list[RankedConcert]
            Home-city shows first, then by artist rank, then by date.

        Raises
        ------
        BatchCancelledError
            If *cancel_event* fires before every fetch finished.
        AllSourcesFailedError
            If every artist's fetch failed.
        """
        options = options or self._options
        if not artists:
            return []
        if len(artists) > self._rank_cap:
            self._logger.warning(
                "artist_list_truncated", received=len(artists), rank_cap=self._rank_cap
            )
            artists = artists[: self._rank_cap]

        location_hint = home_city.strip() if home_city and home_city.strip() else None
        provider_name = self._events.get_provider_name()

        with batch_context("concert_ranking"):
            outcomes = await run_bounded(
                artists,
                lambda ranked: self._events.search_events(ranked.artist, location_hint),
                options=options,
                cancel_event=cancel_event,
                logger=self._logger,
            )

            failures = count_failures(outcomes)
            if failures == len(artists):
                self._logger.error(
                    "concert_fetch_all_failed", provider=provider_name, artists=len(artists)
                )
                raise AllSourcesFailedError(
                    message=f"Event search failed for all {len(artists)} artists",
                    provider_name=provider_name,
                    failures=failures,
                )

            collected: list[RankedConcert] = []
            for ranked_artist, outcome in zip(artists, outcomes):
                if not outcome.ok:
                    self._logger.warning(
                        "concert_fetch_failed",
                        artist=ranked_artist.artist.name,
                        rank=ranked_artist.rank,
                        timed_out=outcome.timed_out,
                    )
                    continue
                for raw in outcome.value or []:
                    concert = to_concert(raw, ranked_artist.artist, location_hint)
                    collected.append(
                        RankedConcert(
                            concert=concert,
                            artist_rank=ranked_artist.rank,
                            is_home_city=is_home_city(concert.city, home_city),
                        )
                    )

            feed = sorted(dedupe_concerts(collected), key=_sort_key)
            if limit is not None:
                feed = feed[: max(limit, 0)]

            self._logger.info(
                "concert_ranking_complete",
                provider=provider_name,
                artists=len(artists),
                failed=failures,
                fetched=len(collected),
                returned=len(feed),
                home_city_shows=sum(1 for r in feed if r.is_home_city),
            )
            return feed
