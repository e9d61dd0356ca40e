"""Models for live-event discovery and ranking.

``RawEvent`` is what an events collaborator (e.g. Ticketmaster) hands
back; the concert ranker normalizes it into a display-ready ``Concert``
and tags it with the preference rank of the artist it was found for.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from crossfade.models.catalog import UnifiedArtist
from crossfade.utils.text_normalizer import normalize_key


class RankedArtist(BaseModel):
    """An artist at a dense 1-based preference position."""

    model_config = ConfigDict(frozen=True)

    artist: UnifiedArtist
    rank: int = Field(ge=1)

    @property
    def id(self) -> str:
        return self.artist.id


def rank_artists(artists: list[UnifiedArtist]) -> list[RankedArtist]:
    """Assign ranks 1..N in list order (top-listened or manual order first)."""
    return [RankedArtist(artist=artist, rank=index) for index, artist in enumerate(artists, start=1)]


class EventImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    ratio: str | None = None
    width: int | None = None
    height: int | None = None


class RawEvent(BaseModel):
    """An upcoming event as returned by an events collaborator."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    name: str = ""
    artist_name: str | None = Field(
        default=None, description="Headlining attraction, when the feed names one."
    )
    additional_artists: list[str] = Field(default_factory=list)
    venue_name: str | None = None
    venue_address: str | None = None
    city: str | None = None
    local_date: datetime.date
    local_time: datetime.time | None = None
    ticket_url: str | None = None
    images: list[EventImage] = Field(default_factory=list)
    price_min: float | None = None
    price_max: float | None = None
    currency: str | None = None


class Concert(BaseModel):
    """A normalized upcoming show."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    artist_name: str
    artist_image_url: str | None = None
    venue_name: str
    venue_address: str = ""
    city: str = ""
    date: datetime.datetime
    price_range: str | None = None
    ticket_url: str = ""
    additional_artists: list[str] = Field(default_factory=list)

    @property
    def dedup_key(self) -> tuple[str, str, datetime.date]:
        """Identity of the show across feeds: artist, venue and calendar day."""
        return (normalize_key(self.artist_name), normalize_key(self.venue_name), self.date.date())


class RankedConcert(BaseModel):
    model_config = ConfigDict(frozen=True)

    concert: Concert
    artist_rank: int = Field(ge=1)
    is_home_city: bool = False

    @property
    def id(self) -> str:
        return self.concert.id
