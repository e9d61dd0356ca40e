"""Apple Music API catalog provider.

Implements :class:`ICatalogProvider` against ``https://api.music.apple.com/v1``.
Requests carry the developer token as a bearer token; library and history
endpoints additionally need the user's Music-User-Token.  Catalog lookups
are scoped to one storefront (``"us"`` by default).

Apple Music is the reduced-capability catalog:

* There is no "now playing" endpoint, so :meth:`get_currently_playing`
  returns ``None`` without touching the network.
* There are no native top artists/tracks; they are derived from play
  counts over the recently-played window, first-seen order breaking ties.
* Playlist mutation takes raw catalog song ids rather than URIs.
"""

from __future__ import annotations

import datetime
from collections import Counter
from typing import Any

import httpx
import structlog

from crossfade.interfaces.catalog_provider import ICatalogProvider
from crossfade.models.catalog import (
    APPLE_MUSIC_CAPABILITIES,
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
from crossfade.utils.errors import CatalogRequestError
from crossfade.utils.http import request_json
from crossfade.utils.logging import get_logger
from crossfade.utils.text_normalizer import normalize_key

_API_BASE = "https://api.music.apple.com/v1"
_LIBRARY_PLAYLIST_WEB_BASE = "https://music.apple.com/library/playlist/"
_ARTWORK_SIZE = 300
_MAX_SEARCH_LIMIT = 25
# Apple caps the recently-played endpoint at 30 items per request.
_RECENT_WINDOW = 30
_APPLE = ServiceType.APPLE_MUSIC


# ---------------------------------------------------------------------------
# Payload normalization
# ---------------------------------------------------------------------------

def _artwork_url(attributes: dict[str, Any]) -> str | None:
    template = (attributes.get("artwork") or {}).get("url")
    if not template:
        return None
    return template.replace("{w}", str(_ARTWORK_SIZE)).replace("{h}", str(_ARTWORK_SIZE))


def _related_id(resource: dict[str, Any], relationship: str) -> str | None:
    data = ((resource.get("relationships") or {}).get(relationship) or {}).get("data") or []
    return data[0].get("id") if data else None


def _song_artist(resource: dict[str, Any], attributes: dict[str, Any]) -> UnifiedArtist:
    name = attributes.get("artistName", "")
    artist_url = attributes.get("artistUrl")
    raw_id = _related_id(resource, "artists")
    if not raw_id and artist_url:
        raw_id = artist_url.rstrip("/").split("/")[-1]
    if not raw_id:
        # No catalog id available; the name keeps play counting stable.
        raw_id = normalize_key(name)
    return UnifiedArtist(
        id=_APPLE.unified_id(raw_id),
        original_id=raw_id,
        service_type=_APPLE,
        name=name,
        external_url=artist_url,
    )


def _to_track(resource: dict[str, Any]) -> UnifiedTrack:
    attributes = resource.get("attributes") or {}
    raw_id = resource.get("id", "")
    album_id = _related_id(resource, "albums") or ""
    previews = attributes.get("previews") or []
    return UnifiedTrack(
        id=_APPLE.unified_id(raw_id),
        original_id=raw_id,
        service_type=_APPLE,
        name=attributes.get("name", ""),
        artists=[_song_artist(resource, attributes)],
        album=UnifiedAlbum(
            id=_APPLE.unified_id(album_id),
            original_id=album_id,
            service_type=_APPLE,
            name=attributes.get("albumName", ""),
            image_url=_artwork_url(attributes),
            release_date=attributes.get("releaseDate", ""),
        ),
        duration_ms=attributes.get("durationInMillis") or 0,
        is_explicit=attributes.get("contentRating") == "explicit",
        preview_url=previews[0].get("url") if previews else None,
        external_url=attributes.get("url"),
        uri=raw_id,
    )


def _to_simplified_track(resource: dict[str, Any], position: int) -> UnifiedSimplifiedTrack:
    track = _to_track(resource)
    attributes = resource.get("attributes") or {}
    return UnifiedSimplifiedTrack(
        id=track.id,
        original_id=track.original_id,
        service_type=_APPLE,
        name=track.name,
        artists=track.artists,
        duration_ms=track.duration_ms,
        is_explicit=track.is_explicit,
        preview_url=track.preview_url,
        track_number=attributes.get("trackNumber") or position,
        external_url=track.external_url,
        uri=track.uri,
    )


def _to_artist(resource: dict[str, Any]) -> UnifiedArtist:
    attributes = resource.get("attributes") or {}
    raw_id = resource.get("id", "")
    return UnifiedArtist(
        id=_APPLE.unified_id(raw_id),
        original_id=raw_id,
        service_type=_APPLE,
        name=attributes.get("name", ""),
        image_url=_artwork_url(attributes),
        genres=list(attributes.get("genreNames") or []),
        external_url=attributes.get("url"),
        uri=raw_id,
    )


def _to_album(resource: dict[str, Any]) -> UnifiedAlbum:
    attributes = resource.get("attributes") or {}
    raw_id = resource.get("id", "")
    return UnifiedAlbum(
        id=_APPLE.unified_id(raw_id),
        original_id=raw_id,
        service_type=_APPLE,
        name=attributes.get("name", ""),
        image_url=_artwork_url(attributes),
        release_date=attributes.get("releaseDate", ""),
        track_count=attributes.get("trackCount") or 0,
        external_url=attributes.get("url"),
        uri=raw_id,
    )


def _to_playlist(resource: dict[str, Any]) -> UnifiedPlaylist:
    attributes = resource.get("attributes") or {}
    raw_id = resource.get("id", "")
    description = attributes.get("description") or {}
    return UnifiedPlaylist(
        id=_APPLE.unified_id(raw_id),
        original_id=raw_id,
        service_type=_APPLE,
        name=attributes.get("name", ""),
        description=description.get("standard") if isinstance(description, dict) else description,
        image_url=_artwork_url(attributes),
        owner_name=attributes.get("curatorName") or "Apple Music",
        is_public=attributes.get("isPublic"),
        external_url=attributes.get("url"),
        uri=raw_id,
    )


def _data(payload: Any) -> list[dict[str, Any]]:
    if not payload:
        return []
    return [item for item in payload.get("data") or [] if item]


class AppleMusicCatalogProvider(ICatalogProvider):
    """Catalog provider backed by the Apple Music API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    developer_token:
        Signed MusicKit developer JWT.
    user_token:
        Music-User-Token for library and history endpoints.  Without it
        only catalog search and browse work.
    storefront:
        Two-letter storefront code for catalog lookups.
    timeout:
        Optional per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        developer_token: str,
        user_token: str | None = None,
        storefront: str = "us",
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._developer_token = developer_token
        self._user_token = user_token
        self._storefront = storefront
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._developer_token}"}
        if self._user_token:
            headers["Music-User-Token"] = self._user_token
        return headers

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

    def _catalog_path(self, suffix: str) -> str:
        return f"/catalog/{self._storefront}{suffix}"

    async def _search(self, query: str, search_type: str, limit: int) -> list[dict[str, Any]]:
        payload = await self._request(
            "GET",
            self._catalog_path("/search"),
            params={"term": query, "types": search_type, "limit": min(limit, _MAX_SEARCH_LIMIT)},
        )
        results = ((payload or {}).get("results") or {}).get(search_type) or {}
        items = _data(results)
        self._logger.debug(
            "apple_music_search_complete",
            search_type=search_type,
            query=query,
            result_count=len(items),
        )
        return items

    @staticmethod
    def _raw_id(value: str) -> str:
        return _APPLE.original_id(value)

    # -- ICatalogProvider: identity ------------------------------------------

    @property
    def service_type(self) -> ServiceType:
        return _APPLE

    @property
    def capabilities(self) -> CatalogCapabilities:
        return APPLE_MUSIC_CAPABILITIES

    def get_provider_name(self) -> str:
        return "apple_music"

    def get_track_uri(self, track: UnifiedTrack) -> str:
        return track.original_id

    def playlist_url(self, playlist_id: str) -> str | None:
        return f"{_LIBRARY_PLAYLIST_WEB_BASE}{self._raw_id(playlist_id)}"

    # -- ICatalogProvider: search --------------------------------------------

    async def search_tracks(self, query: str, limit: int = 20) -> list[UnifiedTrack]:
        return [_to_track(item) for item in await self._search(query, "songs", limit)]

    async def search_artists(self, query: str, limit: int = 20) -> list[UnifiedArtist]:
        return [_to_artist(item) for item in await self._search(query, "artists", limit)]

    async def search_albums(self, query: str, limit: int = 20) -> list[UnifiedAlbum]:
        return [_to_album(item) for item in await self._search(query, "albums", limit)]

    async def search_playlists(self, query: str, limit: int = 20) -> list[UnifiedPlaylist]:
        return [_to_playlist(item) for item in await self._search(query, "playlists", limit)]

    # -- ICatalogProvider: listening history ---------------------------------

    async def get_recently_played(self, limit: int = 20) -> list[UnifiedPlayHistory]:
        payload = await self._request(
            "GET", "/me/recent/played/tracks", params={"limit": min(limit, _RECENT_WINDOW)}
        )
        # The endpoint reports order but not play times.
        played_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
        return [
            UnifiedPlayHistory(track=_to_track(item), played_at=played_at)
            for item in _data(payload)
        ]

    async def get_top_artists(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedArtist]:
        """Most-played artists over the recently-played window.

        *time_range* is accepted for interface compatibility; Apple Music
        exposes a single history window.
        """
        history = await self.get_recently_played(limit=_RECENT_WINDOW)
        counts: Counter[str] = Counter()
        first_seen: dict[str, UnifiedArtist] = {}
        for play in history:
            artist = play.track.primary_artist
            if artist is None:
                continue
            counts[artist.id] += 1
            first_seen.setdefault(artist.id, artist)
        ranked = sorted(first_seen, key=lambda artist_id: -counts[artist_id])
        return [first_seen[artist_id] for artist_id in ranked[:limit]]

    async def get_top_tracks(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedTrack]:
        """Most-played tracks over the recently-played window."""
        history = await self.get_recently_played(limit=_RECENT_WINDOW)
        counts: Counter[str] = Counter(play.track.id for play in history)
        first_seen: dict[str, UnifiedTrack] = {}
        for play in history:
            first_seen.setdefault(play.track.id, play.track)
        ranked = sorted(first_seen, key=lambda track_id: -counts[track_id])
        return [first_seen[track_id] for track_id in ranked[:limit]]

    async def get_currently_playing(self) -> UnifiedCurrentlyPlaying | None:
        return None

    # -- ICatalogProvider: browse --------------------------------------------

    async def get_artist_top_tracks(self, artist_id: str) -> list[UnifiedTrack]:
        payload = await self._request(
            "GET", self._catalog_path(f"/artists/{self._raw_id(artist_id)}/view/top-songs")
        )
        return [_to_track(item) for item in _data(payload)]

    async def get_artist_albums(self, artist_id: str, limit: int = 20) -> list[UnifiedAlbum]:
        payload = await self._request(
            "GET",
            self._catalog_path(f"/artists/{self._raw_id(artist_id)}/albums"),
            params={"limit": limit},
        )
        return [_to_album(item) for item in _data(payload)][:limit]

    async def get_album_tracks(
        self, album_id: str, limit: int = 50
    ) -> list[UnifiedSimplifiedTrack]:
        payload = await self._request(
            "GET",
            self._catalog_path(f"/albums/{self._raw_id(album_id)}/tracks"),
            params={"limit": limit},
        )
        return [
            _to_simplified_track(item, position)
            for position, item in enumerate(_data(payload)[:limit], start=1)
        ]

    async def get_current_user(self) -> UnifiedUserProfile | None:
        return None

    # -- ICatalogProvider: playlists -----------------------------------------

    async def get_user_playlists(
        self, limit: int = 20, offset: int = 0
    ) -> list[UnifiedPlaylist]:
        payload = await self._request(
            "GET", "/me/library/playlists", params={"limit": limit, "offset": offset}
        )
        return [_to_playlist(item) for item in _data(payload)]

    async def get_playlist_tracks(
        self, playlist_id: str, limit: int = 100
    ) -> list[UnifiedTrack]:
        raw_id = self._raw_id(playlist_id)
        # Library playlist ids start with "p."; everything else is catalog.
        if raw_id.startswith("p."):
            path = f"/me/library/playlists/{raw_id}/tracks"
        else:
            path = self._catalog_path(f"/playlists/{raw_id}/tracks")
        payload = await self._request("GET", path, params={"limit": limit})
        return [_to_track(item) for item in _data(payload)][:limit]

    async def create_playlist(self, name: str, description: str = "") -> str:
        payload = await self._request(
            "POST",
            "/me/library/playlists",
            json={"attributes": {"name": name, "description": description}},
        )
        created = _data(payload)
        if not created or not created[0].get("id"):
            raise CatalogRequestError(
                message="Playlist creation returned no id",
                provider_name=self.get_provider_name(),
            )
        playlist_id = created[0]["id"]
        self._logger.info("apple_music_playlist_created", playlist_id=playlist_id, name=name)
        return playlist_id

    async def add_tracks_to_playlist(self, playlist_id: str, track_uris: list[str]) -> None:
        raw_id = self._raw_id(playlist_id)
        body = {"data": [{"id": self._raw_id(uri), "type": "songs"} for uri in track_uris]}
        await self._request("POST", f"/me/library/playlists/{raw_id}/tracks", json=body)
        self._logger.info(
            "apple_music_playlist_tracks_added", playlist_id=raw_id, count=len(track_uris)
        )
