"""Utility modules for crossfade.

Available utility modules (re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at CrossfadeError; batch
  operations only ever raise BatchCancelledError or AllSourcesFailedError.
- **concurrency** -- Bounded fan-out with index-addressed fan-in,
  per-unit timeouts and external cancellation.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **scoring** -- Weighted averages and high/medium/low banding.
- **text_normalizer** -- Title cleanup, artist credit splitting and
  comparison keys.
- **http** (not re-exported here) -- JSON request helper that maps HTTP
  status codes onto the error hierarchy.
"""

# -- Domain exception hierarchy --------------------------------------------
from crossfade.utils.errors import (
    AllSourcesFailedError,
    BatchCancelledError,
    CatalogRequestError,
    ConfigurationError,
    CrossfadeError,
    NoResolvableTracksError,
    ProviderUnavailableError,
    RateLimitError,
)

# -- Async concurrency helpers ---------------------------------------------
from crossfade.utils.concurrency import BatchOptions, UnitOutcome, run_bounded, throttled_gather

# -- Structured logging setup ----------------------------------------------
from crossfade.utils.logging import batch_context, configure_logging, get_logger

# -- Scoring ---------------------------------------------------------------
from crossfade.utils.scoring import ScoreBand, score_to_band, weighted_average

# -- Text normalization ----------------------------------------------------
from crossfade.utils.text_normalizer import (
    extract_artist_names,
    normalize_key,
    normalize_track_name,
)

__all__ = [
    "AllSourcesFailedError",
    "BatchCancelledError",
    "BatchOptions",
    "CatalogRequestError",
    "ConfigurationError",
    "CrossfadeError",
    "NoResolvableTracksError",
    "ProviderUnavailableError",
    "RateLimitError",
    "ScoreBand",
    "UnitOutcome",
    "batch_context",
    "configure_logging",
    "extract_artist_names",
    "get_logger",
    "normalize_key",
    "normalize_track_name",
    "run_bounded",
    "score_to_band",
    "throttled_gather",
    "weighted_average",
]
