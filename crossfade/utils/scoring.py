"""Scoring utilities shared by the affinity and blend computations.

Scores throughout crossfade live in [0.0, 1.0]:

1. **weighted_average** -- Weighted mean of several signals, clamped.
2. **geometric_mean** -- Mean that collapses to 0 when any signal is 0,
   used to penalise one-sided blend candidates.
3. **score_to_band** -- Maps a numeric score to the three display bands
   (high / medium / low) used by blend and compatibility results.
"""

import math
from enum import Enum


class ScoreBand(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Display bands for blend and compatibility scores.

    Thresholds:
        HIGH:   >= 0.8
        MEDIUM: >= 0.5
        LOW:    <  0.5
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def clamp_unit(value: float) -> float:
    """Clamp *value* to [0.0, 1.0]; NaN becomes 0.0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def weighted_average(
    scores: list[float],
    weights: list[float] | None = None,
) -> float:
    """Compute a weighted average score.

    Args:
        scores: Individual scores, each in [0.0, 1.0].
        weights: Optional weights for each score. Defaults to equal weighting.

    Returns:
        Weighted average clamped to [0.0, 1.0].

    Raises:
        ValueError: If scores is empty or lengths of scores and weights differ.
    """
    if not scores:
        raise ValueError("scores must not be empty")

    if weights is None:
        weights = [1.0] * len(scores)

    if len(scores) != len(weights):
        raise ValueError("scores and weights must have the same length")

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0

    weighted_sum = sum(s * w for s, w in zip(scores, weights, strict=True))
    return clamp_unit(weighted_sum / total_weight)


def geometric_mean(scores: list[float]) -> float:
    """Geometric mean of unit scores; 0.0 if any score is 0 or the list is empty."""
    if not scores or any(s <= 0.0 for s in scores):
        return 0.0
    log_sum = sum(math.log(clamp_unit(s)) for s in scores)
    return clamp_unit(math.exp(log_sum / len(scores)))


def score_to_band(score: float) -> ScoreBand:
    """Map a numeric score in [0.0, 1.0] to its display band."""
    if score >= 0.8:
        return ScoreBand.HIGH
    if score >= 0.5:
        return ScoreBand.MEDIUM
    return ScoreBand.LOW
