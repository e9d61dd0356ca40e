"""Business logic built on top of the provider interfaces.

    track_resolver     -- suggestions -> catalog tracks + preview fallback
    playlist_exporter  -- resolved songs -> playlist in the user's library
    affinity           -- blend scores and taste compatibility
    blend_engine       -- two-listener blends
    concert_ranker     -- ranked, de-duplicated concert feed
"""

from crossfade.services.blend_engine import BlendEngine
from crossfade.services.concert_ranker import ConcertRanker
from crossfade.services.playlist_exporter import PlaylistExporter
from crossfade.services.track_resolver import TrackResolver

__all__ = [
    "BlendEngine",
    "ConcertRanker",
    "PlaylistExporter",
    "TrackResolver",
]
