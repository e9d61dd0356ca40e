"""crossfade: cross-catalog music resolution and recommendation core.

Reconciles capability-mismatched streaming catalogs into one model,
resolves free-text song suggestions into playable tracks, scores
two-listener blends and ranks concerts against an artist preference list.
"""

__version__ = "0.1.0"
