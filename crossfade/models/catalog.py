"""Provider-agnostic catalog records.

Every catalog provider normalizes its own payloads into these models so the
rest of crossfade never sees a Spotify or Apple Music JSON shape.  All
models use frozen config: a record is built once per normalization call
and copied (``model_copy(update=...)``) rather than mutated.

Identity rule:
    Two catalog records are the same item iff they share
    ``(service_type, original_id)``.  ``__eq__`` and ``__hash__`` use only
    that pair, so a track fetched twice with a different image URL or
    follower count still de-duplicates in a ``set``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ServiceType(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """The catalog a record came from."""

    SPOTIFY = "spotify"
    APPLE_MUSIC = "apple_music"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def id_prefix(self) -> str:
        """Prefix that turns a raw catalog id into a unified id."""
        return _ID_PREFIXES[self]

    def unified_id(self, original_id: str) -> str:
        return f"{self.id_prefix}{original_id}"

    def original_id(self, value: str) -> str:
        """Accept either a unified id or a raw catalog id and return the raw one."""
        if value.startswith(self.id_prefix):
            return value[len(self.id_prefix):]
        return value


_DISPLAY_NAMES = {
    ServiceType.SPOTIFY: "Spotify",
    ServiceType.APPLE_MUSIC: "Apple Music",
}

_ID_PREFIXES = {
    ServiceType.SPOTIFY: "spotify_",
    ServiceType.APPLE_MUSIC: "apple_",
}


class TimeRange(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Listening-history window for top artists/tracks."""

    SHORT_TERM = "short_term"    # ~4 weeks
    MEDIUM_TERM = "medium_term"  # ~6 months
    LONG_TERM = "long_term"      # all time


class CatalogItem(BaseModel):
    """Fields shared by every unified catalog record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unified id, e.g. 'spotify_4uLU6hMCjMI75M1A2tKUQC'.")
    original_id: str = Field(description="The provider's own id.")
    service_type: ServiceType
    name: str
    external_url: str | None = Field(
        default=None, description="Deep link into the provider's app or web player."
    )
    uri: str | None = Field(
        default=None, description="Provider URI used when mutating playlists."
    )

    @property
    def identity_key(self) -> tuple[ServiceType, str]:
        return (self.service_type, self.original_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogItem) or type(self) is not type(other):
            return NotImplemented
        return self.identity_key == other.identity_key

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.identity_key))


class UnifiedArtist(CatalogItem):
    image_url: str | None = None
    genres: list[str] = Field(default_factory=list)
    follower_count: int | None = None


class UnifiedAlbum(CatalogItem):
    image_url: str | None = None
    release_date: str = ""
    track_count: int = 0


class _TrackFields(CatalogItem):
    artists: list[UnifiedArtist] = Field(default_factory=list)
    duration_ms: int = 0
    is_explicit: bool = False
    preview_url: str | None = Field(
        default=None, description="30-second preview audio, when the catalog exposes one."
    )

    @property
    def artist_names(self) -> str:
        return ", ".join(artist.name for artist in self.artists)

    @property
    def primary_artist(self) -> UnifiedArtist | None:
        return self.artists[0] if self.artists else None

    @property
    def primary_artist_name(self) -> str:
        return self.artists[0].name if self.artists else ""

    @property
    def formatted_duration(self) -> str:
        minutes, remainder = divmod(self.duration_ms, 60_000)
        return f"{minutes}:{remainder // 1000:02d}"


class UnifiedTrack(_TrackFields):
    album: UnifiedAlbum | None = None

    def with_preview(self, preview_url: str | None) -> UnifiedTrack:
        """Return a copy carrying *preview_url*."""
        return self.model_copy(update={"preview_url": preview_url})


class UnifiedSimplifiedTrack(_TrackFields):
    """A track listed inside an album (no album back-reference)."""

    track_number: int = 0


class UnifiedPlaylist(CatalogItem):
    description: str | None = None
    image_url: str | None = None
    owner_name: str = ""
    track_count: int = 0
    is_public: bool | None = None
    is_collaborative: bool | None = None


class UnifiedUserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    service_type: ServiceType
    display_name: str | None = None
    email: str | None = None
    image_url: str | None = None
    follower_count: int | None = None
    country: str | None = None


class UnifiedPlayHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: UnifiedTrack
    played_at: str = Field(description="ISO-8601 timestamp of the play.")

    @property
    def id(self) -> str:
        return f"{self.track.id}_{self.played_at}"


class UnifiedCurrentlyPlaying(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: UnifiedTrack | None = None
    is_playing: bool = False
    progress_ms: int | None = None
    timestamp: int = 0


class CatalogCapabilities(BaseModel):
    """Static declaration of which optional operations a catalog supports."""

    model_config = ConfigDict(frozen=True)

    supports_currently_playing: bool
    supports_top_items: bool
    supports_recently_played: bool
    supports_playlist_creation: bool
    requires_subscription: bool


SPOTIFY_CAPABILITIES = CatalogCapabilities(
    supports_currently_playing=True,
    supports_top_items=True,
    supports_recently_played=True,
    supports_playlist_creation=True,
    requires_subscription=False,
)

# Apple Music has no "now playing" endpoint and no native top items;
# top artists/tracks are derived from recently played.
APPLE_MUSIC_CAPABILITIES = CatalogCapabilities(
    supports_currently_playing=False,
    supports_top_items=False,
    supports_recently_played=True,
    supports_playlist_creation=True,
    requires_subscription=True,
)
