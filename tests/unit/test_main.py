"""Unit tests for the build_core composition root."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from crossfade.config.settings import Settings
from crossfade.main import build_core
from crossfade.providers.catalog.apple_music_provider import AppleMusicCatalogProvider
from crossfade.providers.catalog.spotify_provider import SpotifyCatalogProvider
from crossfade.providers.events.ticketmaster_provider import TicketmasterEventsProvider
from crossfade.services.concert_ranker import ConcertRanker
from crossfade.utils.errors import ConfigurationError


class TestBuildCore:
    def test_unconfigured_core_has_no_catalogs(self, mock_http_client: MagicMock) -> None:
        core = build_core(Settings(), http_client=mock_http_client)

        assert core.catalogs == {}
        assert core.events_provider is None
        assert core.concert_ranker is None
        assert core.preview_provider.get_provider_name() == "itunes"
        with pytest.raises(ConfigurationError):
            core.catalog("spotify")

    def test_configured_core_builds_everything(self, mock_http_client: MagicMock) -> None:
        settings = Settings(
            spotify_access_token="sp",
            apple_music_developer_token="dev",
            apple_music_user_token="user",
            ticketmaster_api_key="tm",
            artist_rank_cap=5,
        )

        core = build_core(settings, http_client=mock_http_client)

        assert isinstance(core.catalog("spotify"), SpotifyCatalogProvider)
        assert isinstance(core.catalog("apple_music"), AppleMusicCatalogProvider)
        assert isinstance(core.events_provider, TicketmasterEventsProvider)
        assert isinstance(core.concert_ranker, ConcertRanker)
        assert core.http_client is mock_http_client

    @pytest.mark.asyncio
    async def test_aclose_closes_client_it_created(self) -> None:
        core = build_core(Settings())
        assert core.owns_http_client

        await core.aclose()

        assert core.http_client.is_closed

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, mock_http_client: MagicMock) -> None:
        core = build_core(Settings(), http_client=mock_http_client)

        await core.aclose()

        assert not core.owns_http_client
        mock_http_client.aclose.assert_not_called()
