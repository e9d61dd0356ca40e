"""Unit tests for PlaylistExporter."""

from __future__ import annotations

import pytest

from crossfade.models.blend import BlendRecommendation, BlendResult
from crossfade.models.catalog import CatalogCapabilities
from crossfade.models.resolution import ResolvedSong, SongSuggestion
from crossfade.services.playlist_exporter import DEFAULT_DESCRIPTION, PlaylistExporter
from crossfade.utils.errors import NoResolvableTracksError
from tests.conftest import FakeCatalogProvider, make_track


def _song(name: str, resolved: bool = True) -> ResolvedSong:
    return ResolvedSong(
        suggestion=SongSuggestion(track_name=name),
        matched_track=make_track(name, raw_id=name.lower()) if resolved else None,
    )


class TestSave:
    @pytest.mark.asyncio
    async def test_adds_only_resolved_songs_in_order(self, fake_catalog: FakeCatalogProvider) -> None:
        saved = await PlaylistExporter().save(
            fake_catalog, "Blend", "desc", [_song("A"), _song("B", resolved=False), _song("C")]
        )

        assert saved is not None
        assert saved.playlist_id == "pl1"
        assert saved.track_count == 2
        assert saved.url == "https://catalog.test/playlist/pl1"
        assert fake_catalog.created_playlists == [("Blend", "desc")]
        assert fake_catalog.added_tracks == {"pl1": ["a", "c"]}

    @pytest.mark.asyncio
    async def test_nothing_resolved_raises(self, fake_catalog: FakeCatalogProvider) -> None:
        with pytest.raises(NoResolvableTracksError):
            await PlaylistExporter().save(fake_catalog, "Blend", "", [_song("A", resolved=False)])
        assert fake_catalog.created_playlists == []

    @pytest.mark.asyncio
    async def test_unsupported_catalog_returns_none(self) -> None:
        catalog = FakeCatalogProvider(
            capabilities=CatalogCapabilities(
                supports_currently_playing=False,
                supports_top_items=False,
                supports_recently_played=False,
                supports_playlist_creation=False,
                requires_subscription=False,
            )
        )

        assert await PlaylistExporter().save(catalog, "Blend", "", [_song("A")]) is None
        assert catalog.created_playlists == []


class TestSaveBlend:
    @pytest.mark.asyncio
    async def test_uses_blend_name_and_default_description(self, fake_catalog: FakeCatalogProvider) -> None:
        blend = BlendResult(
            blend_name="Sunday Reset",
            recommendations=[
                BlendRecommendation(track_name="A", artist_name="x", blend_score=0.9, resolved=_song("A")),
                BlendRecommendation(track_name="B", artist_name="y", blend_score=0.5, resolved=_song("B", resolved=False)),
            ],
        )

        saved = await PlaylistExporter().save_blend(fake_catalog, blend)

        assert saved is not None
        assert saved.track_count == 1
        assert fake_catalog.created_playlists == [("Sunday Reset", DEFAULT_DESCRIPTION)]
