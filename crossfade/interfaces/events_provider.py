"""Abstract base class for live-event search providers.

The concert ranker asks an events provider once per ranked artist.  How
the provider turns an artist and a location hint into a query (keyword
search, attraction id lookup, radius search) is its own concern; the
ranker only consumes the structured :class:`RawEvent` records it returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from crossfade.models.catalog import UnifiedArtist
from crossfade.models.concert import RawEvent


class IEventsProvider(ABC):
    """Contract for upcoming-event search services."""

    @abstractmethod
    async def search_events(
        self, artist: UnifiedArtist, location_hint: str | None = None
    ) -> list[RawEvent]:
        """Return upcoming events for *artist*.

        Parameters
        ----------
        artist:
            The artist to search for.
        location_hint:
            Optional city used to narrow or bias the search.

        Returns
        -------
        list[RawEvent]
            Zero or more events, soonest first.

        Raises
        ------
        crossfade.utils.errors.ProviderUnavailableError
            If the service cannot be reached or rejects the credentials.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"ticketmaster"``."""
