"""Custom exception hierarchy for crossfade.

All library exceptions inherit from :class:`CrossfadeError`, which carries
an optional ``provider_name`` so callers can tell which external catalog or
events service (e.g. "spotify", "apple_music", "ticketmaster") caused the
failure.

The hierarchy is organized by how the caller is expected to react:

    CrossfadeError  (base -- catch-all for any crossfade error)
    +-- ProviderUnavailableError (network / auth failure -- retry later)
    |   +-- RateLimitError       (provider rate-limit exceeded)
    +-- CatalogRequestError      (provider rejected the request itself)
    +-- BatchCancelledError      (batch aborted by the caller's signal)
    +-- AllSourcesFailedError    (every unit of a fan-out batch failed)
    +-- NoResolvableTracksError  (nothing playable to save)
    +-- ConfigurationError       (startup / missing config)

"Not found" has no exception: an empty search is an empty value
(``None`` or ``[]``), never an exception.
"""


class CrossfadeError(Exception):
    """Base exception for all crossfade errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[spotify] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(CrossfadeError):
    """Raised when a catalog or events provider is unreachable or refuses auth.

    Recoverable by retrying the whole operation later.  Inside a fan-out
    batch this is swallowed per unit and turned into an empty result.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(ProviderUnavailableError):
    """Raised when a provider answers HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._retry_after = retry_after

    @property
    def retry_after(self) -> float | None:
        """Seconds the provider asked us to wait, when it said so."""
        return self._retry_after


class CatalogRequestError(CrossfadeError):
    """Raised when a provider rejects a request as malformed (4xx other than auth/404/429)."""

    def __init__(
        self,
        message: str = "Catalog request was rejected",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


# ---------------------------------------------------------------------------
# Batch-level errors -- the only failures a fan-out operation surfaces
# ---------------------------------------------------------------------------

class BatchCancelledError(CrossfadeError):
    """Raised when the caller's cancellation signal fires mid-batch.

    Callers never observe a half-filled result list; they get this instead.
    """

    def __init__(
        self,
        message: str = "Batch operation was cancelled",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AllSourcesFailedError(CrossfadeError):
    """Raised when every unit of a fan-out batch failed.

    Partial failures never raise; this is reserved for total failure such
    as no network at all.
    """

    def __init__(
        self,
        message: str = "Every source in the batch failed",
        provider_name: str | None = None,
        failures: int = 0,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._failures = failures

    @property
    def failures(self) -> int:
        return self._failures


class NoResolvableTracksError(CrossfadeError):
    """Raised when a playlist save is requested but no song resolved to a track."""

    def __init__(
        self,
        message: str = "No tracks to add to playlist",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(CrossfadeError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
