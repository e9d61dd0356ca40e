"""crossfade domain models -- re-exports all public model classes.

The models are organized across four submodules by domain concern:
    - catalog.py     -- Unified catalog records and capability declarations
    - resolution.py  -- Song suggestions, resolved songs, preview lookups
    - blend.py       -- Listening profiles, blends, compatibility
    - concert.py     -- Raw events, concerts, ranked artists/concerts
"""

from __future__ import annotations

from crossfade.models.blend import (
    BlendCandidate,
    BlendRecommendation,
    BlendResult,
    CompatibilityResult,
    GeneratedBlend,
    MusicProfile,
)
from crossfade.models.catalog import (
    APPLE_MUSIC_CAPABILITIES,
    SPOTIFY_CAPABILITIES,
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
from crossfade.models.concert import (
    Concert,
    EventImage,
    RankedArtist,
    RankedConcert,
    RawEvent,
    rank_artists,
)
from crossfade.models.resolution import (
    PreviewQuery,
    ResolvedSong,
    SavedPlaylist,
    SongSuggestion,
)

__all__ = [
    "APPLE_MUSIC_CAPABILITIES",
    "BlendCandidate",
    "BlendRecommendation",
    "BlendResult",
    "CatalogCapabilities",
    "CatalogItem",
    "CompatibilityResult",
    "Concert",
    "EventImage",
    "GeneratedBlend",
    "MusicProfile",
    "PreviewQuery",
    "RankedArtist",
    "RankedConcert",
    "RawEvent",
    "ResolvedSong",
    "SPOTIFY_CAPABILITIES",
    "SavedPlaylist",
    "ServiceType",
    "SongSuggestion",
    "TimeRange",
    "UnifiedAlbum",
    "UnifiedArtist",
    "UnifiedCurrentlyPlaying",
    "UnifiedPlayHistory",
    "UnifiedPlaylist",
    "UnifiedSimplifiedTrack",
    "UnifiedTrack",
    "UnifiedUserProfile",
    "rank_artists",
]
