"""Saving resolved songs as a playlist in the user's catalog library."""

from __future__ import annotations

import structlog

from crossfade.interfaces.catalog_provider import ICatalogProvider, supports
from crossfade.models.blend import BlendResult
from crossfade.models.resolution import ResolvedSong, SavedPlaylist
from crossfade.utils.errors import NoResolvableTracksError
from crossfade.utils.logging import get_logger

DEFAULT_DESCRIPTION = "Created by crossfade"


class PlaylistExporter:
    """Creates a playlist from the resolved subset of a song list.

    Unresolved songs are skipped; they have no catalog identity to add.
    """

    def __init__(self) -> None:
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def save(
        self,
        provider: ICatalogProvider,
        name: str,
        description: str,
        songs: list[ResolvedSong],
    ) -> SavedPlaylist | None:
        """Create playlist *name* and add every resolved song to it.

        Returns
        -------
        SavedPlaylist or None
            ``None`` when *provider* cannot create playlists.

        Raises
        ------
        NoResolvableTracksError
            If none of *songs* resolved to a catalog track.
        """
        provider_name = provider.get_provider_name()
        if not supports(provider, "supports_playlist_creation"):
            self._logger.info("playlist_creation_unsupported", provider=provider_name)
            return None

        track_uris = [
            provider.get_track_uri(song.matched_track)
            for song in songs
            if song.matched_track is not None
        ]
        if not track_uris:
            raise NoResolvableTracksError(provider_name=provider_name)

        playlist_id = await provider.create_playlist(name, description)
        await provider.add_tracks_to_playlist(playlist_id, track_uris)

        saved = SavedPlaylist(
            playlist_id=playlist_id,
            url=provider.playlist_url(playlist_id),
            track_count=len(track_uris),
        )
        self._logger.info(
            "playlist_saved",
            provider=provider_name,
            playlist_id=playlist_id,
            track_count=saved.track_count,
            skipped=len(songs) - saved.track_count,
        )
        return saved

    async def save_blend(
        self,
        provider: ICatalogProvider,
        blend: BlendResult,
        description: str = DEFAULT_DESCRIPTION,
    ) -> SavedPlaylist | None:
        """Save a blend under its generated name, in recommendation order."""
        return await self.save(provider, blend.blend_name, description, blend.resolved_songs)
