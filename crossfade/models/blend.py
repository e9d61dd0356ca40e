"""Models for two-listener blends and taste compatibility.

The suggestion generator (external) produces a :class:`GeneratedBlend`:
a name, an analysis paragraph and candidate songs, each annotated with a
free-text explanation of why it suits user 1 and user 2.  The blend engine
turns that into a :class:`BlendResult` with numeric scores and resolved
tracks.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from crossfade.models.catalog import UnifiedArtist, UnifiedTrack
from crossfade.models.resolution import ResolvedSong
from crossfade.utils.scoring import ScoreBand, score_to_band

_MAX_PROFILE_ARTISTS = 10
_MAX_PROFILE_TRACKS = 20
_MAX_PROFILE_GENRES = 10


class MusicProfile(BaseModel):
    """Condensed listening identity handed to the suggestion generator."""

    model_config = ConfigDict(frozen=True)

    top_artists: list[str] = Field(default_factory=list)
    top_tracks: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    recent_tracks: list[str] = Field(default_factory=list)
    music_taste_tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_catalog(
        cls,
        artists: list[UnifiedArtist],
        tracks: list[UnifiedTrack],
        recent_tracks: list[UnifiedTrack] | None = None,
        tags: list[str] | None = None,
    ) -> MusicProfile:
        """Build a profile from catalog records.

        Tracks are rendered as "Title by Primary Artist"; genres are the
        de-duplicated union of the artists' genres in first-seen order.
        """
        genres: list[str] = []
        for artist in artists:
            for genre in artist.genres:
                if genre not in genres:
                    genres.append(genre)

        return cls(
            top_artists=[a.name for a in artists[:_MAX_PROFILE_ARTISTS]],
            top_tracks=[_describe(t) for t in tracks[:_MAX_PROFILE_TRACKS]],
            genres=genres[:_MAX_PROFILE_GENRES],
            recent_tracks=[_describe(t) for t in (recent_tracks or [])[:_MAX_PROFILE_TRACKS]],
            music_taste_tags=list(tags or []),
        )


def _describe(track: UnifiedTrack) -> str:
    return f"{track.name} by {track.primary_artist_name}"


class BlendCandidate(BaseModel):
    """A generator-proposed song with per-user affinity explanations."""

    model_config = ConfigDict(frozen=True)

    track_name: str
    artist_name: str = ""
    reason: str = ""
    user1_affinity: str = ""
    user2_affinity: str = ""


class GeneratedBlend(BaseModel):
    """Raw generator output for one blend."""

    model_config = ConfigDict(frozen=True)

    blend_name: str
    blend_analysis: str = ""
    candidates: list[BlendCandidate] = Field(default_factory=list)


class BlendRecommendation(BaseModel):
    """A scored, resolved blend candidate."""

    model_config = ConfigDict(frozen=True)

    track_name: str
    artist_name: str
    reason: str = ""
    user1_affinity: str = ""
    user2_affinity: str = ""
    blend_score: float = Field(ge=0.0, le=1.0)
    resolved: ResolvedSong | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None and self.resolved.is_resolved

    @property
    def score_band(self) -> ScoreBand:
        return score_to_band(self.blend_score)


class BlendResult(BaseModel):
    """A finished blend; ``recommendations`` is sorted by descending score."""

    model_config = ConfigDict(frozen=True)

    blend_name: str
    blend_analysis: str = ""
    recommendations: list[BlendRecommendation] = Field(default_factory=list)

    @property
    def saveable_recommendations(self) -> list[BlendRecommendation]:
        """Recommendations backed by a catalog track (eligible for playlist save)."""
        return [r for r in self.recommendations if r.is_resolved]

    @property
    def resolved_songs(self) -> list[ResolvedSong]:
        return [r.resolved for r in self.recommendations if r.resolved is not None]

    @property
    def can_save_playlist(self) -> bool:
        return any(r.is_resolved for r in self.recommendations)


class CompatibilityResult(BaseModel):
    """Taste overlap between two listeners."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    shared_artists: list[str] = Field(default_factory=list)
    shared_genres: list[str] = Field(default_factory=list)

    @property
    def level(self) -> ScoreBand:
        return score_to_band(self.score / 100.0)
