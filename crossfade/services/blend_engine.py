"""Two-listener blend construction.

The blend engine sits between an external suggestion generator and the
catalog.  It never invents songs or explanations itself; it

1. builds the :class:`MusicProfile` each listener hands to the generator,
2. resolves the generator's candidates through the :class:`TrackResolver`,
3. scores each candidate from its two affinity explanations, and
4. returns them sorted by descending blend score, ties in input order.

Unresolved candidates stay in the result so the listener can still see
them, but they are excluded from playlist-save eligibility.
"""

from __future__ import annotations

import asyncio

import structlog

from crossfade.interfaces.catalog_provider import ICatalogProvider, supports
from crossfade.models.blend import (
    BlendCandidate,
    BlendRecommendation,
    BlendResult,
    GeneratedBlend,
    MusicProfile,
)
from crossfade.models.catalog import TimeRange, UnifiedTrack
from crossfade.models.resolution import ResolvedSong, SongSuggestion
from crossfade.services.affinity import affinity_strength, blend_score
from crossfade.services.track_resolver import TrackResolver
from crossfade.utils.concurrency import BatchOptions
from crossfade.utils.errors import ProviderUnavailableError
from crossfade.utils.logging import get_logger

_PROFILE_ARTIST_LIMIT = 10
_PROFILE_TRACK_LIMIT = 20


def score_candidate(candidate: BlendCandidate) -> float:
    """Blend score of one candidate from its two affinity explanations."""
    return blend_score(
        affinity_strength(candidate.user1_affinity),
        affinity_strength(candidate.user2_affinity),
    )


class BlendEngine:
    """Turns generator output into a scored, resolved :class:`BlendResult`.

    Parameters
    ----------
    resolver:
        Track resolver used for every candidate.
    """

    def __init__(self, resolver: TrackResolver) -> None:
        self._resolver = resolver
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def create_blend(
        self,
        generated: GeneratedBlend,
        provider: ICatalogProvider,
        *,
        cancel_event: asyncio.Event | None = None,
        options: BatchOptions | None = None,
    ) -> BlendResult:
        """Resolve and rank the generator's candidates.

        Raises
        ------
        BatchCancelledError
            If *cancel_event* fires during resolution.
        AllSourcesFailedError
            If every candidate's catalog search failed.
        """
        candidates = generated.candidates
        resolved = await self._resolver.resolve(
            [
                SongSuggestion(
                    track_name=c.track_name, artist_name=c.artist_name, reason=c.reason
                )
                for c in candidates
            ],
            provider,
            cancel_event=cancel_event,
            options=options,
        )

        recommendations = [
            self._recommend(candidate, song) for candidate, song in zip(candidates, resolved)
        ]
        # sorted() is stable, so equal scores keep generator order.
        recommendations = sorted(recommendations, key=lambda r: -r.blend_score)

        result = BlendResult(
            blend_name=generated.blend_name,
            blend_analysis=generated.blend_analysis,
            recommendations=recommendations,
        )
        self._logger.info(
            "blend_created",
            provider=provider.get_provider_name(),
            candidates=len(candidates),
            resolved=len(result.saveable_recommendations),
            top_score=recommendations[0].blend_score if recommendations else None,
        )
        return result

    async def build_profile(
        self,
        provider: ICatalogProvider,
        time_range: TimeRange = TimeRange.MEDIUM_TERM,
        tags: list[str] | None = None,
    ) -> MusicProfile:
        """Collect one listener's top artists, top tracks and recent plays.

        Recent plays are optional context: a catalog without that
        capability, or a failing history call, leaves them empty.
        """
        artists, tracks, recent = await asyncio.gather(
            provider.get_top_artists(time_range, limit=_PROFILE_ARTIST_LIMIT),
            provider.get_top_tracks(time_range, limit=_PROFILE_TRACK_LIMIT),
            self._recent_tracks(provider),
        )
        profile = MusicProfile.from_catalog(artists, tracks, recent_tracks=recent, tags=tags)
        self._logger.debug(
            "music_profile_built",
            provider=provider.get_provider_name(),
            time_range=time_range.value,
            artists=len(profile.top_artists),
            tracks=len(profile.top_tracks),
            genres=len(profile.genres),
        )
        return profile

    async def _recent_tracks(self, provider: ICatalogProvider) -> list[UnifiedTrack]:
        if not supports(provider, "supports_recently_played"):
            return []
        try:
            history = await provider.get_recently_played(limit=_PROFILE_TRACK_LIMIT)
        except ProviderUnavailableError as exc:
            self._logger.warning(
                "recently_played_unavailable",
                provider=provider.get_provider_name(),
                error=str(exc),
            )
            return []
        return [play.track for play in history]

    @staticmethod
    def _recommend(candidate: BlendCandidate, song: ResolvedSong) -> BlendRecommendation:
        return BlendRecommendation(
            track_name=candidate.track_name,
            artist_name=candidate.artist_name,
            reason=candidate.reason,
            user1_affinity=candidate.user1_affinity,
            user2_affinity=candidate.user2_affinity,
            blend_score=score_candidate(candidate),
            resolved=song,
        )
