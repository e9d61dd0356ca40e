"""Models for turning free-text song suggestions into playable tracks.

Suggestions come from an external recommendation generator that knows
nothing about catalog ids, so they are treated as untrusted text until the
track resolver has searched a catalog for them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from crossfade.models.catalog import UnifiedTrack


class SongSuggestion(BaseModel):
    """One ``(track, artist, reason)`` tuple from the suggestion generator."""

    model_config = ConfigDict(frozen=True)

    track_name: str
    artist_name: str = ""
    reason: str = ""

    @property
    def search_query(self) -> str:
        return f"{self.track_name} {self.artist_name}".strip()

    @property
    def is_searchable(self) -> bool:
        return bool(self.track_name.strip())


class ResolvedSong(BaseModel):
    """A suggestion paired with its best-effort catalog match.

    ``matched_track is None`` means "not found"; it is a normal outcome,
    not an error.
    """

    model_config = ConfigDict(frozen=True)

    suggestion: SongSuggestion
    matched_track: UnifiedTrack | None = None
    preview_url: str | None = Field(
        default=None,
        description="From the matched track, or from the preview fallback lookup.",
    )

    @property
    def is_resolved(self) -> bool:
        return self.matched_track is not None


class PreviewQuery(BaseModel):
    """One lookup for the preview-audio fallback provider."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Caller-chosen key echoed back in the result mapping.")
    track_name: str
    artist_name: str = ""


class SavedPlaylist(BaseModel):
    """Outcome of exporting resolved songs to a catalog playlist."""

    model_config = ConfigDict(frozen=True)

    playlist_id: str
    url: str | None = None
    track_count: int = 0
