"""Library settings loaded from environment variables via pydantic-settings.

Field names map to upper-cased environment variables
(``spotify_access_token`` -> ``SPOTIFY_ACCESS_TOKEN``); a ``.env`` file in
the working directory is read as well.  Environment variables win over the
``.env`` file, which wins over the defaults below.

Tokens are supplied by the embedding application (it owns the OAuth flows
and token storage); an empty string means "not configured".
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crossfade.utils.concurrency import BatchOptions


class Settings(BaseSettings):
    """crossfade settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Catalogs ===
    spotify_access_token: str = ""
    apple_music_developer_token: str = ""
    apple_music_user_token: str = ""
    apple_music_storefront: str = "us"

    # === Events ===
    ticketmaster_api_key: str = ""
    home_city: str = ""
    artist_rank_cap: int = Field(default=20, ge=1)
    concert_days_ahead: int = Field(default=60, ge=1)

    # === Batch limits ===
    max_concurrency: int = Field(default=6, ge=1, le=32)
    unit_timeout_seconds: float = Field(default=10.0, gt=0)
    http_timeout_seconds: float = Field(default=15.0, gt=0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def batch_options(self) -> BatchOptions:
        """Per-invocation batch limits derived from these settings."""
        return BatchOptions(
            max_concurrency=self.max_concurrency,
            unit_timeout=self.unit_timeout_seconds,
        )

    def get_available_catalogs(self) -> list[str]:
        """Return the catalog provider names that have credentials configured."""
        catalogs: list[str] = []
        if self.spotify_access_token:
            catalogs.append("spotify")
        if self.apple_music_developer_token:
            catalogs.append("apple_music")
        return catalogs
