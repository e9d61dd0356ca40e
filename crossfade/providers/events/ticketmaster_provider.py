"""Ticketmaster Discovery API events provider.

Implements :class:`IEventsProvider` with one keyword search per artist
against ``/discovery/v2/events.json``, restricted to the ``music``
classification, optionally to a city, and to a window of ``days_ahead``
days from now.  Results come back soonest first.

Events without a local date are dropped: they are usually placeholder
listings ("dates to be announced") that cannot be ranked.
"""

from __future__ import annotations

import datetime
from typing import Any

import httpx
import structlog

from crossfade.interfaces.events_provider import IEventsProvider
from crossfade.models.catalog import UnifiedArtist
from crossfade.models.concert import EventImage, RawEvent
from crossfade.utils.errors import ConfigurationError
from crossfade.utils.http import request_json
from crossfade.utils.logging import get_logger

_EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
_PAGE_SIZE = 20
_DEFAULT_DAYS_AHEAD = 60
_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _parse_date(value: str | None) -> datetime.date | None:
    if not value:
        return None
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        return None


def _parse_time(value: str | None) -> datetime.time | None:
    if not value:
        return None
    try:
        return datetime.time.fromisoformat(value)
    except ValueError:
        return None


def _to_raw_event(event: dict[str, Any]) -> RawEvent | None:
    start = (event.get("dates") or {}).get("start") or {}
    local_date = _parse_date(start.get("localDate"))
    if local_date is None:
        return None

    embedded = event.get("_embedded") or {}
    venues = embedded.get("venues") or []
    venue = venues[0] if venues else {}
    attractions = [a.get("name") for a in embedded.get("attractions") or [] if a.get("name")]
    price = (event.get("priceRanges") or [{}])[0]

    return RawEvent(
        event_id=event.get("id", ""),
        name=event.get("name", ""),
        artist_name=attractions[0] if attractions else None,
        additional_artists=attractions[1:],
        venue_name=venue.get("name"),
        venue_address=(venue.get("address") or {}).get("line1"),
        city=(venue.get("city") or {}).get("name"),
        local_date=local_date,
        local_time=_parse_time(start.get("localTime")),
        ticket_url=event.get("url"),
        images=[
            EventImage(
                url=image["url"],
                ratio=image.get("ratio"),
                width=image.get("width"),
                height=image.get("height"),
            )
            for image in event.get("images") or []
            if image.get("url")
        ],
        price_min=price.get("min"),
        price_max=price.get("max"),
        currency=price.get("currency"),
    )


class TicketmasterEventsProvider(IEventsProvider):
    """Upcoming music events from the Ticketmaster Discovery API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    api_key:
        Discovery API consumer key.
    days_ahead:
        Size of the search window in days.
    timeout:
        Optional per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        days_ahead: int = _DEFAULT_DAYS_AHEAD,
        timeout: float | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                message="Ticketmaster API key is not configured",
                provider_name="ticketmaster",
            )
        self._http = http_client
        self._api_key = api_key
        self._days_ahead = days_ahead
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "ticketmaster"

    def _window(self) -> tuple[str, str]:
        now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
        end = now + datetime.timedelta(days=self._days_ahead)
        return now.strftime(_DATETIME_FORMAT), end.strftime(_DATETIME_FORMAT)

    async def search_events(
        self, artist: UnifiedArtist, location_hint: str | None = None
    ) -> list[RawEvent]:
        start, end = self._window()
        params: dict[str, Any] = {
            "apikey": self._api_key,
            "keyword": artist.name,
            "classificationName": "music",
            "startDateTime": start,
            "endDateTime": end,
            "size": _PAGE_SIZE,
            "sort": "date,asc",
        }
        if location_hint and location_hint.strip():
            params["city"] = location_hint.strip()

        payload = await request_json(
            self._http,
            "GET",
            _EVENTS_URL,
            provider_name=self.get_provider_name(),
            params=params,
            timeout=self._timeout,
        )
        events = ((payload or {}).get("_embedded") or {}).get("events") or []
        raw_events = [raw for raw in (_to_raw_event(e) for e in events) if raw is not None]

        self._logger.debug(
            "ticketmaster_search_complete",
            artist=artist.name,
            city=location_hint,
            event_count=len(raw_events),
            skipped=len(events) - len(raw_events),
        )
        return raw_events
