"""Public interface definitions for all external collaborators.

Every catalog, preview source and events feed is accessed exclusively
through the abstract base classes defined in this package.  Concrete
adapters live in ``crossfade/providers/`` and are injected by the caller
(see ``crossfade.main.build_core``); tests inject fakes instead.

CONCRETE PROVIDER MAP:
    Interface            ->  Concrete implementations (in crossfade/providers/)
    ---------------------------------------------------------------------
    ICatalogProvider     ->  SpotifyCatalogProvider, AppleMusicCatalogProvider
    IPreviewProvider     ->  ITunesPreviewProvider
    IEventsProvider      ->  TicketmasterEventsProvider
    ICacheProvider       ->  MemoryCacheProvider
"""

from crossfade.interfaces.cache_provider import ICacheProvider
from crossfade.interfaces.catalog_provider import (
    ICatalogProvider,
    external_url_for,
    supports,
    track_uri_for,
)
from crossfade.interfaces.events_provider import IEventsProvider
from crossfade.interfaces.preview_provider import IPreviewProvider

__all__ = [
    "ICacheProvider",
    "ICatalogProvider",
    "IEventsProvider",
    "IPreviewProvider",
    "external_url_for",
    "supports",
    "track_uri_for",
]
