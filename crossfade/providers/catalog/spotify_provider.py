"""Spotify Web API catalog provider.

Implements :class:`ICatalogProvider` against ``https://api.spotify.com/v1``
with a caller-supplied OAuth access token (token refresh and the OAuth
flow are the caller's concern).  Every payload is normalized into the
unified models here; nothing outside this module sees Spotify's JSON shape.

Spotify is the full-featured catalog: every capability is supported.
Playlist additions are sent in chunks of 100 URIs, the Web API maximum.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from crossfade.interfaces.catalog_provider import ICatalogProvider
from crossfade.models.catalog import (
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
from crossfade.utils.errors import CatalogRequestError, ProviderUnavailableError
from crossfade.utils.http import request_json
from crossfade.utils.logging import get_logger

_API_BASE = "https://api.spotify.com/v1"
_PLAYLIST_WEB_BASE = "https://open.spotify.com/playlist/"
_TRACK_URI_PREFIX = "spotify:track:"
_PLAYLIST_ADD_CHUNK = 100
_MAX_PAGE_LIMIT = 50
_SPOTIFY = ServiceType.SPOTIFY


# ---------------------------------------------------------------------------
# Payload normalization
# ---------------------------------------------------------------------------

def _first_image(data: dict[str, Any]) -> str | None:
    images = data.get("images") or []
    return images[0].get("url") if images else None


def _spotify_link(data: dict[str, Any]) -> str | None:
    return (data.get("external_urls") or {}).get("spotify")


def _to_artist(data: dict[str, Any]) -> UnifiedArtist:
    raw_id = data.get("id") or ""
    return UnifiedArtist(
        id=_SPOTIFY.unified_id(raw_id),
        original_id=raw_id,
        service_type=_SPOTIFY,
        name=data.get("name", ""),
        image_url=_first_image(data),
        genres=list(data.get("genres") or []),
        follower_count=(data.get("followers") or {}).get("total"),
        external_url=_spotify_link(data),
        uri=data.get("uri"),
    )


def _to_album(data: dict[str, Any]) -> UnifiedAlbum:
    raw_id = data.get("id") or ""
    return UnifiedAlbum(
        id=_SPOTIFY.unified_id(raw_id),
        original_id=raw_id,
        service_type=_SPOTIFY,
        name=data.get("name", ""),
        image_url=_first_image(data),
        release_date=data.get("release_date") or "",
        track_count=data.get("total_tracks") or 0,
        external_url=_spotify_link(data),
        uri=data.get("uri"),
    )


def _to_track(data: dict[str, Any]) -> UnifiedTrack:
    raw_id = data.get("id") or ""
    album = data.get("album")
    return UnifiedTrack(
        id=_SPOTIFY.unified_id(raw_id),
        original_id=raw_id,
        service_type=_SPOTIFY,
        name=data.get("name", ""),
        artists=[_to_artist(a) for a in data.get("artists") or []],
        album=_to_album(album) if album else None,
        duration_ms=data.get("duration_ms") or 0,
        is_explicit=bool(data.get("explicit")),
        preview_url=data.get("preview_url"),
        external_url=_spotify_link(data),
        uri=data.get("uri"),
    )


def _to_simplified_track(data: dict[str, Any]) -> UnifiedSimplifiedTrack:
    raw_id = data.get("id") or ""
    return UnifiedSimplifiedTrack(
        id=_SPOTIFY.unified_id(raw_id),
        original_id=raw_id,
        service_type=_SPOTIFY,
        name=data.get("name", ""),
        artists=[_to_artist(a) for a in data.get("artists") or []],
        duration_ms=data.get("duration_ms") or 0,
        is_explicit=bool(data.get("explicit")),
        preview_url=data.get("preview_url"),
        track_number=data.get("track_number") or 0,
        external_url=_spotify_link(data),
        uri=data.get("uri"),
    )


def _to_playlist(data: dict[str, Any]) -> UnifiedPlaylist:
    raw_id = data.get("id") or ""
    owner = data.get("owner") or {}
    return UnifiedPlaylist(
        id=_SPOTIFY.unified_id(raw_id),
        original_id=raw_id,
        service_type=_SPOTIFY,
        name=data.get("name", ""),
        description=data.get("description"),
        image_url=_first_image(data),
        owner_name=owner.get("display_name") or owner.get("id") or "",
        track_count=(data.get("tracks") or {}).get("total") or 0,
        is_public=data.get("public"),
        is_collaborative=data.get("collaborative"),
        external_url=_spotify_link(data),
        uri=data.get("uri"),
    )


def _is_playable_track(data: dict[str, Any] | None) -> bool:
    """Playlist and playback items can be podcast episodes or id-less local files."""
    return bool(data) and data.get("type", "track") == "track" and bool(data.get("id"))


def _items(payload: Any, key: str | None = None) -> list[dict[str, Any]]:
    if not payload:
        return []
    container = payload.get(key) if key else payload
    if not container:
        return []
    # Spotify search pads some result pages with null entries.
    return [item for item in container.get("items") or [] if item]


class SpotifyCatalogProvider(ICatalogProvider):
    """Catalog provider backed by the Spotify Web API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    access_token:
        OAuth bearer token with the user-library and playlist scopes.
    market:
        Market passed where the API requires one (artist top tracks).
        ``"from_token"`` uses the signed-in user's country.
    timeout:
        Optional per-request timeout in seconds; ``None`` keeps the
        client's own default.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: str,
        market: str = "from_token",
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._access_token = access_token
        self._market = market
        self._timeout = timeout
        self._user_id: str | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        return await request_json(
            self._http,
            method,
            f"{_API_BASE}{path}",
            provider_name=self.get_provider_name(),
            params=params,
            json=json,
            headers=self._headers(),
            timeout=self._timeout,
        )

    async def _search(self, query: str, search_type: str, limit: int) -> list[dict[str, Any]]:
        params = {"q": query, "type": search_type, "limit": min(limit, _MAX_PAGE_LIMIT)}
        payload = await self._request("GET", "/search", params=params)
        items = _items(payload, f"{search_type}s")
        self._logger.debug(
            "spotify_search_complete",
            search_type=search_type,
            query=query,
            result_count=len(items),
        )
        return items

    @staticmethod
    def _raw_id(value: str) -> str:
        return _SPOTIFY.original_id(value)

    @staticmethod
    def _to_track_uri(value: str) -> str:
        if value.startswith("spotify:"):
            return value
        return f"{_TRACK_URI_PREFIX}{_SPOTIFY.original_id(value)}"

    # -- ICatalogProvider: identity ------------------------------------------

    @property
    def service_type(self) -> ServiceType:
        return _SPOTIFY

    @property
    def capabilities(self) -> CatalogCapabilities:
        return SPOTIFY_CAPABILITIES

    def get_provider_name(self) -> str:
        return "spotify"

    def get_track_uri(self, track: UnifiedTrack) -> str:
        """Spotify playlist endpoints only accept ``spotify:track:<id>`` URIs."""
        if track.uri and track.uri.startswith("spotify:"):
            return track.uri
        return f"{_TRACK_URI_PREFIX}{track.original_id}"

    def playlist_url(self, playlist_id: str) -> str | None:
        return f"{_PLAYLIST_WEB_BASE}{self._raw_id(playlist_id)}"

    # -- ICatalogProvider: search --------------------------------------------

    async def search_tracks(self, query: str, limit: int = 20) -> list[UnifiedTrack]:
        return [_to_track(item) for item in await self._search(query, "track", limit)]

    async def search_artists(self, query: str, limit: int = 20) -> list[UnifiedArtist]:
        return [_to_artist(item) for item in await self._search(query, "artist", limit)]

    async def search_albums(self, query: str, limit: int = 20) -> list[UnifiedAlbum]:
        return [_to_album(item) for item in await self._search(query, "album", limit)]

    async def search_playlists(self, query: str, limit: int = 20) -> list[UnifiedPlaylist]:
        return [_to_playlist(item) for item in await self._search(query, "playlist", limit)]

    # -- ICatalogProvider: listening history ---------------------------------

    async def get_top_artists(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedArtist]:
        params = {"time_range": time_range.value, "limit": min(limit, _MAX_PAGE_LIMIT)}
        payload = await self._request("GET", "/me/top/artists", params=params)
        return [_to_artist(item) for item in _items(payload)]

    async def get_top_tracks(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedTrack]:
        params = {"time_range": time_range.value, "limit": min(limit, _MAX_PAGE_LIMIT)}
        payload = await self._request("GET", "/me/top/tracks", params=params)
        return [_to_track(item) for item in _items(payload)]

    async def get_recently_played(self, limit: int = 20) -> list[UnifiedPlayHistory]:
        payload = await self._request(
            "GET", "/me/player/recently-played", params={"limit": min(limit, _MAX_PAGE_LIMIT)}
        )
        return [
            UnifiedPlayHistory(track=_to_track(item["track"]), played_at=item.get("played_at", ""))
            for item in _items(payload)
            if _is_playable_track(item.get("track"))
        ]

    async def get_currently_playing(self) -> UnifiedCurrentlyPlaying | None:
        payload = await self._request("GET", "/me/player/currently-playing")
        if not payload:
            # 204: nothing is playing.
            return None
        item = payload.get("item")
        return UnifiedCurrentlyPlaying(
            track=_to_track(item) if _is_playable_track(item) else None,
            is_playing=bool(payload.get("is_playing")),
            progress_ms=payload.get("progress_ms"),
            timestamp=payload.get("timestamp") or 0,
        )

    # -- ICatalogProvider: browse --------------------------------------------

    async def get_artist_top_tracks(self, artist_id: str) -> list[UnifiedTrack]:
        payload = await self._request(
            "GET",
            f"/artists/{self._raw_id(artist_id)}/top-tracks",
            params={"market": self._market},
        )
        return [_to_track(item) for item in (payload or {}).get("tracks") or [] if item]

    async def get_artist_albums(self, artist_id: str, limit: int = 20) -> list[UnifiedAlbum]:
        payload = await self._request(
            "GET",
            f"/artists/{self._raw_id(artist_id)}/albums",
            params={"include_groups": "album,single", "limit": limit},
        )
        return [_to_album(item) for item in _items(payload)]

    async def get_album_tracks(
        self, album_id: str, limit: int = 50
    ) -> list[UnifiedSimplifiedTrack]:
        payload = await self._request(
            "GET", f"/albums/{self._raw_id(album_id)}/tracks", params={"limit": limit}
        )
        return [_to_simplified_track(item) for item in _items(payload)]

    async def get_current_user(self) -> UnifiedUserProfile | None:
        payload = await self._request("GET", "/me")
        if not payload:
            return None
        return UnifiedUserProfile(
            id=payload.get("id", ""),
            service_type=_SPOTIFY,
            display_name=payload.get("display_name"),
            email=payload.get("email"),
            image_url=_first_image(payload),
            follower_count=(payload.get("followers") or {}).get("total"),
            country=payload.get("country"),
        )

    # -- ICatalogProvider: playlists -----------------------------------------

    async def get_user_playlists(
        self, limit: int = 20, offset: int = 0
    ) -> list[UnifiedPlaylist]:
        payload = await self._request(
            "GET", "/me/playlists", params={"limit": limit, "offset": offset}
        )
        return [_to_playlist(item) for item in _items(payload)]

    async def get_playlist_tracks(
        self, playlist_id: str, limit: int = 100
    ) -> list[UnifiedTrack]:
        payload = await self._request(
            "GET", f"/playlists/{self._raw_id(playlist_id)}/tracks", params={"limit": limit}
        )
        return [
            _to_track(item["track"])
            for item in _items(payload)
            if _is_playable_track(item.get("track"))
        ]

    async def _current_user_id(self) -> str:
        if self._user_id is None:
            profile = await self.get_current_user()
            if profile is None or not profile.id:
                raise ProviderUnavailableError(
                    message="Could not determine the signed-in Spotify user",
                    provider_name=self.get_provider_name(),
                )
            self._user_id = profile.id
        return self._user_id

    async def create_playlist(self, name: str, description: str = "") -> str:
        user_id = await self._current_user_id()
        payload = await self._request(
            "POST",
            f"/users/{user_id}/playlists",
            json={"name": name, "description": description, "public": False},
        )
        playlist_id = (payload or {}).get("id")
        if not playlist_id:
            raise CatalogRequestError(
                message="Playlist creation returned no id",
                provider_name=self.get_provider_name(),
            )
        self._logger.info("spotify_playlist_created", playlist_id=playlist_id, name=name)
        return playlist_id

    async def add_tracks_to_playlist(self, playlist_id: str, track_uris: list[str]) -> None:
        raw_id = self._raw_id(playlist_id)
        uris = [self._to_track_uri(uri) for uri in track_uris]
        for start in range(0, len(uris), _PLAYLIST_ADD_CHUNK):
            await self._request(
                "POST",
                f"/playlists/{raw_id}/tracks",
                json={"uris": uris[start:start + _PLAYLIST_ADD_CHUNK]},
            )
        self._logger.info("spotify_playlist_tracks_added", playlist_id=raw_id, count=len(uris))
