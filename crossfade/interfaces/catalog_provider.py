"""Abstract base class for music catalog providers.

Defines the one contract every streaming catalog (Spotify, Apple Music)
implements.  Catalogs do not all support the same features, so each
provider declares a :class:`CatalogCapabilities` record; an operation the
catalog lacks returns an empty value (``[]`` or ``None``) instead of
raising.  Absence of data is never a failure.

Identity defaults live in the free functions :func:`external_url_for` and
:func:`track_uri_for` so they can be applied to any unified record without
a provider instance.  Providers override ``get_external_url`` /
``get_track_uri`` only when their catalog needs a different format.

Every method that takes an id accepts either the unified id
(``"spotify_4uLU..."``) or the catalog's raw id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from urllib.parse import urlparse

from crossfade.models.catalog import (
    CatalogCapabilities,
    CatalogItem,
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


def external_url_for(item: CatalogItem) -> str | None:
    """Return the item's stored deep link if it is an absolute URL, else ``None``."""
    if not item.external_url:
        return None
    parsed = urlparse(item.external_url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return item.external_url


def track_uri_for(track: UnifiedTrack) -> str:
    """Return the track's stored provider URI, falling back to its raw catalog id."""
    return track.uri or track.original_id


def supports(provider: ICatalogProvider, capability_name: str) -> bool:
    """Return ``True`` if *provider* declares the named capability.

    Parameters
    ----------
    provider:
        Any catalog provider.
    capability_name:
        Field name on :class:`CatalogCapabilities`, e.g.
        ``"supports_currently_playing"``.  Unknown names are unsupported.
    """
    return bool(getattr(provider.capabilities, capability_name, False))


class ICatalogProvider(ABC):
    """Contract for streaming-catalog services.

    Implementations wrap one catalog's Web API and normalize every payload
    into the unified models.  Errors are normalized to the crossfade
    taxonomy: :class:`~crossfade.utils.errors.ProviderUnavailableError`
    for network/auth failures and
    :class:`~crossfade.utils.errors.CatalogRequestError` for rejected
    requests.  "Not found" is an empty return value.
    """

    @property
    @abstractmethod
    def service_type(self) -> ServiceType:
        """The catalog this provider talks to."""

    @property
    @abstractmethod
    def capabilities(self) -> CatalogCapabilities:
        """Static declaration of the optional operations this catalog supports."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"spotify"`` or ``"apple_music"``."""

    # -- Search --------------------------------------------------------------

    @abstractmethod
    async def search_tracks(self, query: str, limit: int = 20) -> list[UnifiedTrack]:
        """Search the catalog for tracks.

        Parameters
        ----------
        query:
            Free-text query, typically ``"<title> <artist>"``.
        limit:
            Maximum number of results.

        Returns
        -------
        list[UnifiedTrack]
            Results in the catalog's own relevance order; empty when
            nothing matched.
        """

    @abstractmethod
    async def search_artists(self, query: str, limit: int = 20) -> list[UnifiedArtist]:
        """Search the catalog for artists."""

    @abstractmethod
    async def search_albums(self, query: str, limit: int = 20) -> list[UnifiedAlbum]:
        """Search the catalog for albums."""

    @abstractmethod
    async def search_playlists(self, query: str, limit: int = 20) -> list[UnifiedPlaylist]:
        """Search the catalog for public playlists."""

    # -- Listening history ---------------------------------------------------

    @abstractmethod
    async def get_top_artists(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedArtist]:
        """Return the user's most-listened artists for *time_range*."""

    @abstractmethod
    async def get_top_tracks(
        self, time_range: TimeRange = TimeRange.MEDIUM_TERM, limit: int = 20
    ) -> list[UnifiedTrack]:
        """Return the user's most-listened tracks for *time_range*."""

    @abstractmethod
    async def get_recently_played(self, limit: int = 20) -> list[UnifiedPlayHistory]:
        """Return recent plays, newest first."""

    @abstractmethod
    async def get_currently_playing(self) -> UnifiedCurrentlyPlaying | None:
        """Return the current playback state.

        Returns
        -------
        UnifiedCurrentlyPlaying or None
            ``None`` when nothing is playing or when the catalog does not
            support this capability.
        """

    # -- Browse --------------------------------------------------------------

    @abstractmethod
    async def get_artist_top_tracks(self, artist_id: str) -> list[UnifiedTrack]:
        """Return an artist's most popular tracks."""

    @abstractmethod
    async def get_artist_albums(self, artist_id: str, limit: int = 20) -> list[UnifiedAlbum]:
        """Return an artist's albums."""

    @abstractmethod
    async def get_album_tracks(
        self, album_id: str, limit: int = 50
    ) -> list[UnifiedSimplifiedTrack]:
        """Return the tracks of an album in track-number order."""

    @abstractmethod
    async def get_current_user(self) -> UnifiedUserProfile | None:
        """Return the signed-in user's profile, when the catalog exposes one."""

    # -- Playlists -----------------------------------------------------------

    @abstractmethod
    async def get_user_playlists(
        self, limit: int = 20, offset: int = 0
    ) -> list[UnifiedPlaylist]:
        """Return the user's own playlists."""

    @abstractmethod
    async def get_playlist_tracks(
        self, playlist_id: str, limit: int = 100
    ) -> list[UnifiedTrack]:
        """Return the tracks of a playlist."""

    @abstractmethod
    async def create_playlist(self, name: str, description: str = "") -> str:
        """Create an empty playlist in the user's library.

        Returns
        -------
        str
            The catalog's raw id of the new playlist.
        """

    @abstractmethod
    async def add_tracks_to_playlist(self, playlist_id: str, track_uris: list[str]) -> None:
        """Append tracks (by :meth:`get_track_uri`) to a playlist."""

    async def add_track_to_playlist(self, playlist_id: str, track_uri: str) -> None:
        """Append a single track to a playlist."""
        await self.add_tracks_to_playlist(playlist_id, [track_uri])

    # -- Identity helpers ----------------------------------------------------

    def get_external_url(self, item: CatalogItem) -> str | None:
        """Deep link back into the catalog's app or web player."""
        return external_url_for(item)

    def get_track_uri(self, track: UnifiedTrack) -> str:
        """Identifier the catalog expects when adding *track* to a playlist."""
        return track_uri_for(track)

    def playlist_url(self, playlist_id: str) -> str | None:
        """Public URL of a playlist created by :meth:`create_playlist`, if known."""
        return None
