"""Concrete adapters for the interfaces in :mod:`crossfade.interfaces`.

    catalog/   SpotifyCatalogProvider, AppleMusicCatalogProvider
    preview/   ITunesPreviewProvider
    events/    TicketmasterEventsProvider
    cache/     MemoryCacheProvider
"""
