"""Unit tests for the unified catalog, resolution, blend and concert models."""

from __future__ import annotations

import datetime

import pytest
from pydantic import ValidationError

from crossfade.models.blend import BlendRecommendation, BlendResult, CompatibilityResult, MusicProfile
from crossfade.models.catalog import (
    ServiceType,
    UnifiedAlbum,
    UnifiedPlayHistory,
    UnifiedTrack,
)
from crossfade.models.concert import Concert, RankedArtist, rank_artists
from crossfade.models.resolution import ResolvedSong, SongSuggestion
from crossfade.utils.scoring import ScoreBand
from tests.conftest import make_artist, make_track

# ======================================================================
# ServiceType
# ======================================================================


class TestServiceType:
    def test_unified_id_round_trips_through_original_id(self) -> None:
        service = ServiceType.SPOTIFY
        assert service.unified_id("abc") == "spotify_abc"
        assert service.original_id("spotify_abc") == "abc"
        assert service.original_id("abc") == "abc"

    def test_display_names(self) -> None:
        assert ServiceType.APPLE_MUSIC.display_name == "Apple Music"
        assert ServiceType.APPLE_MUSIC.unified_id("1") == "apple_1"


# ======================================================================
# Identity
# ======================================================================


class TestCatalogIdentity:
    def test_equality_ignores_non_identity_fields(self) -> None:
        a = make_track("Strobe", "deadmau5", raw_id="t1", preview_url=None)
        b = make_track("Strobe (Remastered)", "deadmau5", raw_id="t1", preview_url="https://p")
        assert a == b
        assert len({a, b}) == 1

    def test_same_raw_id_on_different_services_differs(self) -> None:
        spotify = make_track("Strobe", raw_id="1", service=ServiceType.SPOTIFY)
        apple = make_track("Strobe", raw_id="1", service=ServiceType.APPLE_MUSIC)
        assert spotify != apple

    def test_models_are_frozen(self) -> None:
        track = make_track("Strobe")
        with pytest.raises(ValidationError):
            track.name = "Other"  # type: ignore[misc]

    def test_with_preview_returns_copy(self) -> None:
        track = make_track("Strobe")
        updated = track.with_preview("https://audio")
        assert updated.preview_url == "https://audio"
        assert track.preview_url is None


class TestTrackHelpers:
    def test_artist_names_and_duration(self) -> None:
        track = UnifiedTrack(
            id="spotify_1",
            original_id="1",
            service_type=ServiceType.SPOTIFY,
            name="Harder Better Faster Stronger",
            artists=[make_artist("Daft Punk"), make_artist("Kanye West")],
            duration_ms=224_000,
            album=UnifiedAlbum(
                id="spotify_a", original_id="a", service_type=ServiceType.SPOTIFY, name="Discovery"
            ),
        )
        assert track.artist_names == "Daft Punk, Kanye West"
        assert track.primary_artist_name == "Daft Punk"
        assert track.formatted_duration == "3:44"

    def test_track_without_artists(self) -> None:
        track = UnifiedTrack(
            id="spotify_1", original_id="1", service_type=ServiceType.SPOTIFY, name="Untitled"
        )
        assert track.primary_artist is None
        assert track.primary_artist_name == ""

    def test_play_history_id(self) -> None:
        play = UnifiedPlayHistory(track=make_track("A", raw_id="x"), played_at="2026-01-01T00:00:00Z")
        assert play.id == "spotify_x_2026-01-01T00:00:00Z"


# ======================================================================
# Resolution
# ======================================================================


class TestSongSuggestion:
    def test_search_query_joins_title_and_artist(self) -> None:
        assert SongSuggestion(track_name="Strobe", artist_name="deadmau5").search_query == "Strobe deadmau5"
        assert SongSuggestion(track_name="Strobe").search_query == "Strobe"

    def test_blank_title_is_not_searchable(self) -> None:
        assert not SongSuggestion(track_name="   ", artist_name="x").is_searchable

    def test_resolved_song_flags(self) -> None:
        suggestion = SongSuggestion(track_name="Strobe")
        assert not ResolvedSong(suggestion=suggestion).is_resolved
        assert ResolvedSong(suggestion=suggestion, matched_track=make_track("Strobe")).is_resolved


# ======================================================================
# Blend
# ======================================================================


class TestMusicProfile:
    def test_from_catalog_collects_unique_genres(self) -> None:
        artists = [
            make_artist("Burial", genres=["dubstep", "uk garage"]),
            make_artist("Four Tet", genres=["uk garage", "electronica"]),
        ]
        tracks = [make_track("Archangel", "Burial")]

        profile = MusicProfile.from_catalog(artists, tracks, tags=["night bus"])

        assert profile.top_artists == ["Burial", "Four Tet"]
        assert profile.top_tracks == ["Archangel by Burial"]
        assert profile.genres == ["dubstep", "uk garage", "electronica"]
        assert profile.music_taste_tags == ["night bus"]
        assert profile.recent_tracks == []


class TestBlendResult:
    def test_saveable_excludes_unresolved(self) -> None:
        resolved = ResolvedSong(
            suggestion=SongSuggestion(track_name="A"), matched_track=make_track("A")
        )
        unresolved = ResolvedSong(suggestion=SongSuggestion(track_name="B"))
        result = BlendResult(
            blend_name="Mix",
            recommendations=[
                BlendRecommendation(track_name="A", artist_name="x", blend_score=0.9, resolved=resolved),
                BlendRecommendation(track_name="B", artist_name="y", blend_score=0.4, resolved=unresolved),
            ],
        )
        assert [r.track_name for r in result.saveable_recommendations] == ["A"]
        assert result.resolved_songs == [resolved, unresolved]
        assert result.can_save_playlist
        assert result.recommendations[0].score_band is ScoreBand.HIGH

    def test_empty_blend_cannot_be_saved(self) -> None:
        assert not BlendResult(blend_name="Empty").can_save_playlist

    def test_score_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlendRecommendation(track_name="A", artist_name="x", blend_score=1.5)

    def test_compatibility_level(self) -> None:
        assert CompatibilityResult(score=85).level is ScoreBand.HIGH
        assert CompatibilityResult(score=20).level is ScoreBand.LOW


# ======================================================================
# Concerts
# ======================================================================


class TestConcertModels:
    def test_rank_artists_is_dense_and_one_based(self) -> None:
        ranked = rank_artists([make_artist("A"), make_artist("B"), make_artist("C")])
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert ranked[0].id == "spotify_a"

    def test_rank_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RankedArtist(artist=make_artist("A"), rank=0)

    def test_dedup_key_is_case_insensitive_and_day_level(self) -> None:
        first = Concert(
            id="1",
            artist_name="Bicep",
            venue_name="Printworks",
            date=datetime.datetime(2026, 11, 20, 19, 0),
        )
        second = Concert(
            id="2",
            artist_name="  BICEP ",
            venue_name="printworks",
            date=datetime.datetime(2026, 11, 20, 23, 30),
        )
        assert first.dedup_key == second.dedup_key
        assert first.dedup_key == ("bicep", "printworks", datetime.date(2026, 11, 20))
