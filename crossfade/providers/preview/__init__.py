"""Preview-audio fallback providers.

ITunesPreviewProvider fills in 30-second previews for tracks whose catalog
did not return one, matching by normalized title and artist.
"""

from crossfade.providers.preview.itunes_provider import ITunesPreviewProvider

__all__ = ["ITunesPreviewProvider"]
