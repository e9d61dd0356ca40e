"""Shared pytest fixtures for the crossfade test suite."""

from __future__ import annotations

import asyncio
import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from crossfade.interfaces.catalog_provider import ICatalogProvider
from crossfade.interfaces.events_provider import IEventsProvider
from crossfade.interfaces.preview_provider import IPreviewProvider
from crossfade.models.catalog import (
    APPLE_MUSIC_CAPABILITIES,
    SPOTIFY_CAPABILITIES,
    CatalogCapabilities,
    ServiceType,
    TimeRange,
    UnifiedAlbum,
    UnifiedArtist,
    UnifiedCurrentlyPlaying,
    UnifiedPlayHistory,
    UnifiedPlaylist,
    UnifiedSimplifiedTrack,
    UnifiedTrack,
    UnifiedUserProfile,
)
from crossfade.models.concert import RawEvent
from crossfade.models.resolution import PreviewQuery
from crossfade.utils.errors import ProviderUnavailableError

# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def make_artist(
    name: str,
    raw_id: str | None = None,
    service: ServiceType = ServiceType.SPOTIFY,
    **fields: Any,
) -> UnifiedArtist:
    raw_id = raw_id or name.lower().replace(" ", "-")
    return UnifiedArtist(
        id=service.unified_id(raw_id),
        original_id=raw_id,
        service_type=service,
        name=name,
        **fields,
    )


def make_track(
    name: str,
    artist: str = "Daft Punk",
    raw_id: str | None = None,
    service: ServiceType = ServiceType.SPOTIFY,
    **fields: Any,
) -> UnifiedTrack:
    raw_id = raw_id or f"{name}-{artist}".lower().replace(" ", "-")
    return UnifiedTrack(
        id=service.unified_id(raw_id),
        original_id=raw_id,
        service_type=service,
        name=name,
        artists=[make_artist(artist, service=service)],
        **fields,
    )


def make_event(
    event_id: str,
    artist_name: str | None,
    venue_name: str | None = "Fabric",
    city: str | None = "London",
    local_date: datetime.date = datetime.date(2026, 11, 20),
    **fields: Any,
) -> RawEvent:
    return RawEvent(
        event_id=event_id,
        name=f"{artist_name} live",
        artist_name=artist_name,
        venue_name=venue_name,
        city=city,
        local_date=local_date,
        **fields,
    )


def mock_response(
    status_code: int = 200,
    json_data: Any = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build a real ``httpx.Response`` so status and JSON handling are exercised."""
    request = httpx.Request("GET", "https://example.test")
    if json_data is None:
        return httpx.Response(status_code, headers=headers, request=request)
    return httpx.Response(status_code, json=json_data, headers=headers, request=request)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeCatalogProvider(ICatalogProvider):
    """In-memory catalog keyed by exact search query.

    ``failing_queries`` raise :class:`ProviderUnavailableError`;
    ``delays`` (seconds per query) let tests shuffle completion order.
    """

    def __init__(
        self,
        tracks_by_query: dict[str, list[UnifiedTrack]] | None = None,
        failing_queries: set[str] | None = None,
        delays: dict[str, float] | None = None,
        capabilities: CatalogCapabilities = SPOTIFY_CAPABILITIES,
        service: ServiceType = ServiceType.SPOTIFY,
        fail_everything: bool = False,
    ) -> None:
        self._tracks = tracks_by_query or {}
        self._failing = failing_queries or set()
        self._delays = delays or {}
        self._capabilities = capabilities
        self._service = service
        self._fail_everything = fail_everything
        self.search_calls: list[tuple[str, int]] = []
        self.created_playlists: list[tuple[str, str]] = []
        self.added_tracks: dict[str, list[str]] = {}
        self.top_artists: list[UnifiedArtist] = []
        self.top_tracks: list[UnifiedTrack] = []
        self.recent: list[UnifiedPlayHistory] = []

    @property
    def service_type(self) -> ServiceType:
        return self._service

    @property
    def capabilities(self) -> CatalogCapabilities:
        return self._capabilities

    def get_provider_name(self) -> str:
        return "fake-catalog"

    async def search_tracks(self, query: str, limit: int = 20) -> list[UnifiedTrack]:
        self.search_calls.append((query, limit))
        await asyncio.sleep(self._delays.get(query, 0))
        if self._fail_everything or query in self._failing:
            raise ProviderUnavailableError("catalog down", provider_name="fake-catalog")
        return self._tracks.get(query, [])[:limit]

    async def search_artists(self, query: str, limit: int = 20) -> list[UnifiedArtist]:
        return []

    async def search_albums(self, query: str, limit: int = 20) -> list[UnifiedAlbum]:
        return []

    async def search_playlists(self, query: str, limit: int = 20) -> list[UnifiedPlaylist]:
        return []

    async def get_top_artists(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedArtist]:
        return self.top_artists[:limit]

    async def get_top_tracks(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedTrack]:
        return self.top_tracks[:limit]

    async def get_recently_played(self, limit: int = 20) -> list[UnifiedPlayHistory]:
        return self.recent[:limit]

    async def get_currently_playing(self) -> UnifiedCurrentlyPlaying | None:
        if not self._capabilities.supports_currently_playing:
            return None
        return UnifiedCurrentlyPlaying(track=None, is_playing=False)

    async def get_artist_top_tracks(self, artist_id: str) -> list[UnifiedTrack]:
        return []

    async def get_artist_albums(self, artist_id: str, limit: int = 20) -> list[UnifiedAlbum]:
        return []

    async def get_album_tracks(
        self, album_id: str, limit: int = 50
    ) -> list[UnifiedSimplifiedTrack]:
        return []

    async def get_current_user(self) -> UnifiedUserProfile | None:
        return None

    async def get_user_playlists(
        self, limit: int = 20, offset: int = 0
    ) -> list[UnifiedPlaylist]:
        return []

    async def get_playlist_tracks(
        self, playlist_id: str, limit: int = 100
    ) -> list[UnifiedTrack]:
        return []

    async def create_playlist(self, name: str, description: str = "") -> str:
        self.created_playlists.append((name, description))
        return f"pl{len(self.created_playlists)}"

    async def add_tracks_to_playlist(self, playlist_id: str, track_uris: list[str]) -> None:
        self.added_tracks.setdefault(playlist_id, []).extend(track_uris)

    def playlist_url(self, playlist_id: str) -> str | None:
        return f"https://catalog.test/playlist/{playlist_id}"


class FakePreviewProvider(IPreviewProvider):
    """Returns previews for ``(track, artist)`` pairs it was seeded with."""

    def __init__(
        self,
        previews: dict[tuple[str, str], str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self._previews = {(t.lower(), a.lower()): url for (t, a), url in (previews or {}).items()}
        self._error = error
        self._delay = delay
        self.calls: list[list[PreviewQuery]] = []

    def get_provider_name(self) -> str:
        return "fake-preview"

    async def search_previews(self, queries: list[PreviewQuery]) -> dict[str, str]:
        self.calls.append(list(queries))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        found: dict[str, str] = {}
        for query in queries:
            url = self._previews.get((query.track_name.lower(), query.artist_name.lower()))
            if url:
                found[query.key] = url
        return found


class FakeEventsProvider(IEventsProvider):
    """Events keyed by artist name; ``failing_artists`` raise."""

    def __init__(
        self,
        events_by_artist: dict[str, list[RawEvent]] | None = None,
        failing_artists: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._events = events_by_artist or {}
        self._failing = failing_artists or set()
        self._delays = delays or {}
        self.calls: list[tuple[str, str | None]] = []

    def get_provider_name(self) -> str:
        return "fake-events"

    async def search_events(
        self, artist: UnifiedArtist, location_hint: str | None = None
    ) -> list[RawEvent]:
        self.calls.append((artist.name, location_hint))
        await asyncio.sleep(self._delays.get(artist.name, 0))
        if artist.name in self._failing:
            raise ProviderUnavailableError("events down", provider_name="fake-events")
        return list(self._events.get(artist.name, []))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_http_client() -> MagicMock:
    """``httpx.AsyncClient`` stand-in; set ``.request.return_value`` per test."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.request = AsyncMock(return_value=mock_response(200, {}))
    return client


@pytest.fixture
def fake_catalog() -> FakeCatalogProvider:
    return FakeCatalogProvider()


@pytest.fixture
def apple_like_catalog() -> FakeCatalogProvider:
    return FakeCatalogProvider(
        capabilities=APPLE_MUSIC_CAPABILITIES, service=ServiceType.APPLE_MUSIC
    )


@pytest.fixture
def fake_preview() -> FakePreviewProvider:
    return FakePreviewProvider()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep a developer's real tokens and .env out of every test."""
    for var in (
        "SPOTIFY_ACCESS_TOKEN",
        "APPLE_MUSIC_DEVELOPER_TOKEN",
        "APPLE_MUSIC_USER_TOKEN",
        "APPLE_MUSIC_STOREFRONT",
        "TICKETMASTER_API_KEY",
        "HOME_CITY",
        "MAX_CONCURRENCY",
        "UNIT_TIMEOUT_SECONDS",
        "HTTP_TIMEOUT_SECONDS",
        "ARTIST_RANK_CAP",
        "CONCERT_DAYS_AHEAD",
        "APP_ENV",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
