"""Resolution of free-text song suggestions into catalog tracks.

A recommendation generator hands back ``(track, artist, reason)`` text with
no catalog ids.  The resolver searches the active catalog once per
suggestion and trusts the catalog's own relevance ranking: the first hit
is the match, with no secondary fuzzy scoring.  Afterwards, lookups against
a preview provider (one unit per song, each under its own timeout) fill in
30-second previews the catalog did not supply.

Failure model
-------------
Resolution is best-effort.  A search that finds nothing, raises, or times
out leaves that suggestion unresolved (``matched_track=None``) and never
disturbs its siblings.  Only two things abort a batch:

* the caller's cancel signal  -> :class:`BatchCancelledError`
* every attempted search failed -> :class:`AllSourcesFailedError`

Output order always equals input order; duplicates are resolved
independently because their reasons may differ.
"""

from __future__ import annotations

import asyncio

import structlog

from crossfade.interfaces.catalog_provider import ICatalogProvider
from crossfade.interfaces.preview_provider import IPreviewProvider
from crossfade.models.catalog import UnifiedTrack
from crossfade.models.resolution import PreviewQuery, ResolvedSong, SongSuggestion
from crossfade.utils.concurrency import BatchOptions, UnitOutcome, count_failures, run_bounded
from crossfade.utils.errors import AllSourcesFailedError
from crossfade.utils.logging import batch_context, get_logger


class TrackResolver:
    """Maps song suggestions onto tracks of one catalog.

    Parameters
    ----------
    preview_provider:
        Optional fallback source for preview audio.  Without one, songs
        keep whatever preview their catalog returned.
    options:
        Default concurrency cap and per-unit timeout; a ``resolve`` call
        may override them.
    """

    def __init__(
        self,
        preview_provider: IPreviewProvider | None = None,
        options: BatchOptions | None = None,
    ) -> None:
        self._preview = preview_provider
        self._options = options or BatchOptions()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(
        self,
        suggestions: list[SongSuggestion],
        provider: ICatalogProvider,
        *,
        cancel_event: asyncio.Event | None = None,
        options: BatchOptions | None = None,
    ) -> list[ResolvedSong]:
        """Resolve every suggestion against *provider*.

        Parameters
        ----------
        suggestions:
            Ordered generator output.
        provider:
            The catalog to search.
        cancel_event:
            Optional external cancellation signal.
        options:
            Per-call override of the resolver's batch options.

        Returns
        -------
        list[ResolvedSong]
            One entry per suggestion, in input order.

        Raises
        ------
        BatchCancelledError
            If *cancel_event* fires before the batch finishes.
        AllSourcesFailedError
            If at least one search was attempted and every one of them
            failed or timed out.
        """
        options = options or self._options
        if not suggestions:
            return []

        with batch_context("track_resolution"):
            outcomes = await run_bounded(
                suggestions,
                lambda suggestion: self._match(suggestion, provider),
                options=options,
                cancel_event=cancel_event,
                logger=self._logger,
            )
            self._raise_if_all_failed(suggestions, outcomes, provider)

            matches = [outcome.value for outcome in outcomes]
            previews = await self._lookup_previews(
                suggestions, matches, options=options, cancel_event=cancel_event
            )

            resolved = [
                self._build(index, suggestion, matches[index], previews)
                for index, suggestion in enumerate(suggestions)
            ]

            self._logger.info(
                "track_resolution_complete",
                provider=provider.get_provider_name(),
                total=len(resolved),
                resolved=sum(1 for song in resolved if song.is_resolved),
                with_preview=sum(1 for song in resolved if song.preview_url),
                failed=sum(1 for outcome in outcomes if not outcome.ok),
            )
            return resolved

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _match(
        self, suggestion: SongSuggestion, provider: ICatalogProvider
    ) -> UnifiedTrack | None:
        if not suggestion.is_searchable:
            return None
        results = await provider.search_tracks(suggestion.search_query, limit=1)
        return results[0] if results else None

    def _raise_if_all_failed(
        self,
        suggestions: list[SongSuggestion],
        outcomes: list[UnitOutcome[UnifiedTrack | None]],
        provider: ICatalogProvider,
    ) -> None:
        attempted = [
            outcome
            for suggestion, outcome in zip(suggestions, outcomes)
            if suggestion.is_searchable
        ]
        if attempted and all(not outcome.ok for outcome in attempted):
            self._logger.error(
                "track_resolution_all_failed",
                provider=provider.get_provider_name(),
                attempted=len(attempted),
            )
            raise AllSourcesFailedError(
                message=f"All {len(attempted)} track searches failed",
                provider_name=provider.get_provider_name(),
                failures=len(attempted),
            )

    async def _lookup_previews(
        self,
        suggestions: list[SongSuggestion],
        matches: list[UnifiedTrack | None],
        *,
        options: BatchOptions,
        cancel_event: asyncio.Event | None,
    ) -> dict[str, str]:
        if self._preview is None:
            return {}

        queries: list[PreviewQuery] = []
        for index, (suggestion, match) in enumerate(zip(suggestions, matches)):
            if not suggestion.is_searchable or (match is not None and match.preview_url):
                continue
            if match is not None:
                track_name = match.name
                artist_name = match.primary_artist_name or suggestion.artist_name
            else:
                track_name = suggestion.track_name
                artist_name = suggestion.artist_name
            queries.append(
                PreviewQuery(key=str(index), track_name=track_name, artist_name=artist_name)
            )

        if not queries:
            return {}

        # One unit per query: a slow lookup costs only its own preview.
        preview_provider = self._preview
        outcomes = await run_bounded(
            queries,
            lambda query: preview_provider.search_previews([query]),
            options=options,
            cancel_event=cancel_event,
            logger=self._logger,
        )

        previews: dict[str, str] = {}
        for outcome in outcomes:
            if outcome.ok and outcome.value:
                previews.update(outcome.value)

        failed = count_failures(outcomes)
        if failed:
            self._logger.warning(
                "preview_lookup_failed",
                provider=preview_provider.get_provider_name(),
                queries=len(queries),
                failed=failed,
                timed_out=sum(1 for outcome in outcomes if outcome.timed_out),
            )
        return previews

    @staticmethod
    def _build(
        index: int,
        suggestion: SongSuggestion,
        match: UnifiedTrack | None,
        previews: dict[str, str],
    ) -> ResolvedSong:
        preview_url = match.preview_url if match is not None else None
        if not preview_url:
            preview_url = previews.get(str(index))
            if preview_url and match is not None:
                match = match.with_preview(preview_url)
        return ResolvedSong(suggestion=suggestion, matched_track=match, preview_url=preview_url)
