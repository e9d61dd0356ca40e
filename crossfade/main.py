"""Composition root for crossfade.

Wires the shared HTTP client, providers and services together by
dependency injection.  Nothing here is a module-level singleton: an
application builds one :class:`CrossfadeCore` per process (or per test)
and passes its pieces wherever they are needed.

Example::

    settings = load_settings()
    core = build_core(settings)
    try:
        spotify = core.catalog("spotify")
        blend = await core.blend_engine.create_blend(generated, spotify)
    finally:
        await core.aclose()
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import structlog

from crossfade.config.settings import Settings
from crossfade.interfaces.cache_provider import ICacheProvider
from crossfade.interfaces.catalog_provider import ICatalogProvider
from crossfade.interfaces.events_provider import IEventsProvider
from crossfade.interfaces.preview_provider import IPreviewProvider
from crossfade.providers.cache.memory_cache import MemoryCacheProvider
from crossfade.providers.catalog.apple_music_provider import AppleMusicCatalogProvider
from crossfade.providers.catalog.spotify_provider import SpotifyCatalogProvider
from crossfade.providers.events.ticketmaster_provider import TicketmasterEventsProvider
from crossfade.providers.preview.itunes_provider import ITunesPreviewProvider
from crossfade.services.blend_engine import BlendEngine
from crossfade.services.concert_ranker import ConcertRanker
from crossfade.services.playlist_exporter import PlaylistExporter
from crossfade.services.track_resolver import TrackResolver
from crossfade.utils.errors import ConfigurationError
from crossfade.utils.logging import configure_logging

logger: structlog.BoundLogger = structlog.get_logger(logger_name=__name__)


@dataclass
class CrossfadeCore:
    """Every constructed component, keyed by role."""

    settings: Settings
    http_client: httpx.AsyncClient
    cache: ICacheProvider
    preview_provider: IPreviewProvider
    track_resolver: TrackResolver
    blend_engine: BlendEngine
    playlist_exporter: PlaylistExporter
    catalogs: dict[str, ICatalogProvider] = field(default_factory=dict)
    events_provider: IEventsProvider | None = None
    concert_ranker: ConcertRanker | None = None
    owns_http_client: bool = True

    def catalog(self, name: str) -> ICatalogProvider:
        """Return the configured catalog provider called *name*.

        Raises:
            ConfigurationError: If that catalog has no credentials.
        """
        try:
            return self.catalogs[name]
        except KeyError:
            raise ConfigurationError(
                message=f"Catalog '{name}' is not configured",
                provider_name=name,
            ) from None

    async def aclose(self) -> None:
        """Close the shared HTTP client if this core created it."""
        if self.owns_http_client:
            await self.http_client.aclose()


def _build_catalogs(
    settings: Settings, http_client: httpx.AsyncClient
) -> dict[str, ICatalogProvider]:
    catalogs: dict[str, ICatalogProvider] = {}
    if settings.spotify_access_token:
        catalogs["spotify"] = SpotifyCatalogProvider(
            http_client=http_client,
            access_token=settings.spotify_access_token,
        )
    if settings.apple_music_developer_token:
        catalogs["apple_music"] = AppleMusicCatalogProvider(
            http_client=http_client,
            developer_token=settings.apple_music_developer_token,
            user_token=settings.apple_music_user_token or None,
            storefront=settings.apple_music_storefront,
        )
    return catalogs


def build_core(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    cache: ICacheProvider | None = None,
) -> CrossfadeCore:
    """Construct every provider and service from *settings*.

    Catalogs and the events provider are only built when their credentials
    are configured, so a partially configured core is still usable.

    Args:
        settings: Settings to build from; read from the environment when omitted.
        http_client: Shared client; one is created when omitted.  An injected
            client stays open after :meth:`CrossfadeCore.aclose`.
        cache: Cache for preview lookups; an in-memory TTL cache by default.
    """
    settings = settings or Settings()
    configure_logging(log_level=settings.log_level, json_output=settings.app_env == "production")

    owns_http_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    cache = cache or MemoryCacheProvider()
    options = settings.batch_options()

    preview_provider = ITunesPreviewProvider(
        http_client=http_client,
        cache=cache,
        max_concurrency=settings.max_concurrency,
    )
    track_resolver = TrackResolver(preview_provider=preview_provider, options=options)

    events_provider: IEventsProvider | None = None
    concert_ranker: ConcertRanker | None = None
    if settings.ticketmaster_api_key:
        events_provider = TicketmasterEventsProvider(
            http_client=http_client,
            api_key=settings.ticketmaster_api_key,
            days_ahead=settings.concert_days_ahead,
        )
        concert_ranker = ConcertRanker(
            events_provider, options=options, rank_cap=settings.artist_rank_cap
        )

    core = CrossfadeCore(
        settings=settings,
        http_client=http_client,
        cache=cache,
        preview_provider=preview_provider,
        track_resolver=track_resolver,
        blend_engine=BlendEngine(track_resolver),
        playlist_exporter=PlaylistExporter(),
        catalogs=_build_catalogs(settings, http_client),
        events_provider=events_provider,
        concert_ranker=concert_ranker,
        owns_http_client=owns_http_client,
    )
    logger.info(
        "crossfade_core_built",
        catalogs=sorted(core.catalogs),
        events=events_provider.get_provider_name() if events_provider else None,
        max_concurrency=options.max_concurrency,
        unit_timeout=options.unit_timeout,
    )
    return core
