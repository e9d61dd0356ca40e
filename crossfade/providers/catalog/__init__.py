"""Catalog provider implementations.

Two concrete implementations of ICatalogProvider:

    1. SpotifyCatalogProvider    -- Spotify Web API. Full-featured: currently
       playing, native top items, recently played, playlist creation.
    2. AppleMusicCatalogProvider -- Apple Music API. Subscription-gated; no
       currently playing, top items derived from recently played.

Both return the same unified models, so the resolver, blend engine and
concert ranker never branch on the catalog.
"""

from crossfade.providers.catalog.apple_music_provider import AppleMusicCatalogProvider
from crossfade.providers.catalog.spotify_provider import SpotifyCatalogProvider

__all__ = [
    "AppleMusicCatalogProvider",
    "SpotifyCatalogProvider",
]
