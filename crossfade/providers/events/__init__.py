"""Live-event providers.

TicketmasterEventsProvider searches the Ticketmaster Discovery API once
per artist; the concert ranker normalizes, de-duplicates and orders the
results.
"""

from crossfade.providers.events.ticketmaster_provider import TicketmasterEventsProvider

__all__ = ["TicketmasterEventsProvider"]
