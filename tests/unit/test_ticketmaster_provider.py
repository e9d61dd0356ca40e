"""Unit tests for TicketmasterEventsProvider."""

from __future__ import annotations

import datetime
from unittest.mock import MagicMock

import pytest

from crossfade.providers.events.ticketmaster_provider import TicketmasterEventsProvider
from crossfade.utils.errors import ConfigurationError, ProviderUnavailableError
from tests.conftest import make_artist, mock_response

_EVENT = {
    "id": "G5v0Z9JkcK",
    "name": "Bicep Live",
    "url": "https://www.ticketmaster.com/event/G5v0Z9JkcK",
    "dates": {"start": {"localDate": "2026-11-20", "localTime": "19:30:00"}},
    "images": [
        {"url": "https://img.test/small.jpg", "ratio": "16_9", "width": 100, "height": 56},
        {"url": "https://img.test/large.jpg", "ratio": "16_9", "width": 1024, "height": 576},
    ],
    "priceRanges": [{"min": 35.0, "max": 60.0, "currency": "GBP"}],
    "_embedded": {
        "venues": [
            {
                "name": "Printworks",
                "address": {"line1": "Surrey Quays Rd"},
                "city": {"name": "London"},
            }
        ],
        "attractions": [{"name": "Bicep"}, {"name": "Hammer"}],
    },
}


def _provider(client: MagicMock, days_ahead: int = 60) -> TicketmasterEventsProvider:
    return TicketmasterEventsProvider(http_client=client, api_key="tm-key", days_ahead=days_ahead)


class TestConstruction:
    def test_missing_key_is_configuration_error(self, mock_http_client: MagicMock) -> None:
        with pytest.raises(ConfigurationError):
            TicketmasterEventsProvider(http_client=mock_http_client, api_key="")

    def test_provider_name(self, mock_http_client: MagicMock) -> None:
        assert _provider(mock_http_client).get_provider_name() == "ticketmaster"


class TestSearchEvents:
    @pytest.mark.asyncio
    async def test_normalizes_event(self, mock_http_client: MagicMock) -> None:
        mock_http_client.request.return_value = mock_response(200, {"_embedded": {"events": [_EVENT]}})

        events = await _provider(mock_http_client).search_events(make_artist("Bicep"))

        assert len(events) == 1
        event = events[0]
        assert event.event_id == "G5v0Z9JkcK"
        assert event.artist_name == "Bicep"
        assert event.additional_artists == ["Hammer"]
        assert event.venue_name == "Printworks"
        assert event.venue_address == "Surrey Quays Rd"
        assert event.city == "London"
        assert event.local_date == datetime.date(2026, 11, 20)
        assert event.local_time == datetime.time(19, 30)
        assert event.price_min == 35.0
        assert event.currency == "GBP"
        assert len(event.images) == 2

    @pytest.mark.asyncio
    async def test_request_params(self, mock_http_client: MagicMock) -> None:
        mock_http_client.request.return_value = mock_response(200, {})

        await _provider(mock_http_client, days_ahead=30).search_events(
            make_artist("Bicep"), location_hint="  London "
        )

        args, kwargs = mock_http_client.request.call_args
        assert args == ("GET", "https://app.ticketmaster.com/discovery/v2/events.json")
        params = kwargs["params"]
        assert params["apikey"] == "tm-key"
        assert params["keyword"] == "Bicep"
        assert params["classificationName"] == "music"
        assert params["city"] == "London"
        assert params["sort"] == "date,asc"
        start = datetime.datetime.strptime(params["startDateTime"], "%Y-%m-%dT%H:%M:%SZ")
        end = datetime.datetime.strptime(params["endDateTime"], "%Y-%m-%dT%H:%M:%SZ")
        assert end - start == datetime.timedelta(days=30)

    @pytest.mark.asyncio
    async def test_no_city_param_without_hint(self, mock_http_client: MagicMock) -> None:
        mock_http_client.request.return_value = mock_response(200, {})
        await _provider(mock_http_client).search_events(make_artist("Bicep"))
        assert "city" not in mock_http_client.request.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_events_without_date_are_dropped(self, mock_http_client: MagicMock) -> None:
        tba = {**_EVENT, "id": "tba", "dates": {"start": {"dateTBA": True}}}
        mock_http_client.request.return_value = mock_response(
            200, {"_embedded": {"events": [tba, _EVENT]}}
        )

        events = await _provider(mock_http_client).search_events(make_artist("Bicep"))

        assert [e.event_id for e in events] == ["G5v0Z9JkcK"]

    @pytest.mark.asyncio
    async def test_minimal_event(self, mock_http_client: MagicMock) -> None:
        minimal = {"id": "m1", "dates": {"start": {"localDate": "2026-12-01"}}}
        mock_http_client.request.return_value = mock_response(
            200, {"_embedded": {"events": [minimal]}}
        )

        events = await _provider(mock_http_client).search_events(make_artist("Bicep"))

        assert events[0].artist_name is None
        assert events[0].venue_name is None
        assert events[0].price_min is None
        assert events[0].local_time is None

    @pytest.mark.asyncio
    async def test_server_error_propagates(self, mock_http_client: MagicMock) -> None:
        mock_http_client.request.return_value = mock_response(503)
        with pytest.raises(ProviderUnavailableError):
            await _provider(mock_http_client).search_events(make_artist("Bicep"))
