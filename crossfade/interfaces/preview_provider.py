"""Abstract base class for preview-audio fallback providers.

Some catalogs (notably Spotify for many regions) return tracks without a
30-second preview.  A preview provider looks songs up by title and artist
in a second source and returns whatever preview URLs it can find.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from crossfade.models.resolution import PreviewQuery


class IPreviewProvider(ABC):
    """Contract for preview-audio lookup services.

    Implementations are best-effort: they never raise for a miss and should
    swallow per-query failures, so the caller can treat a missing key as
    "no preview found".
    """

    @abstractmethod
    async def search_previews(self, queries: list[PreviewQuery]) -> dict[str, str]:
        """Look up preview URLs for a batch of songs.

        Parameters
        ----------
        queries:
            Songs to look up; each carries a caller-chosen ``key``.

        Returns
        -------
        dict[str, str]
            Mapping of ``query.key`` to a playable preview URL, containing
            only the queries that matched.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"itunes"``."""
