"""Affinity scoring between two listeners.

Two independent measures live here:

1. **Blend score** -- how well one candidate song suits *both* listeners,
   derived from the generator's free-text affinity explanations.  Each
   explanation is reduced to a strength in [0, 1] by
   :func:`affinity_strength`, then the two strengths are combined by
   :func:`blend_score`:

       blend = 0.5 * arithmetic_mean(s1, s2) + 0.5 * geometric_mean(s1, s2)

   Both listeners weigh equally, the result rises with either strength,
   and a song that suits only one listener (other strength 0) scores at
   most half of that listener's strength.

2. **Compatibility** -- overall taste overlap from top artists and genres,
   as Jaccard overlap of the normalized sets, weighted 90/10 towards
   artists (real listening data) over genres (often hand-picked tags).
"""

from __future__ import annotations

import math
import re

from crossfade.models.blend import CompatibilityResult, MusicProfile
from crossfade.utils.scoring import (
    ScoreBand,
    clamp_unit,
    geometric_mean,
    score_to_band,
    weighted_average,
)
from crossfade.utils.text_normalizer import normalize_key

# ------------------------------------------------------------------
# Affinity strength
# ------------------------------------------------------------------

STRONG_AFFINITY = 1.0
MODERATE_AFFINITY = 0.6
UNQUALIFIED_AFFINITY = 0.5
WEAK_AFFINITY = 0.3
NEGATED_AFFINITY = 0.1

_WORD = re.compile(r"[a-z']+")
_NUMERIC = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(%?)\s*$")

# A negation only counts when one of the next _NEGATION_REACH words is a
# sentiment word ("not a fan", "doesn't really like").
_NEGATIONS = frozenset({
    "not", "never", "don't", "doesn't", "didn't", "isn't", "won't",
    "wouldn't", "unlikely", "hardly", "rarely",
})
_NEGATIVE_WORDS = frozenset({"dislike", "dislikes", "hate", "hates"})
_NEGATION_REACH = 3
_HEDGES = frozenset({
    "might", "may", "could", "maybe", "perhaps", "possibly", "slightly",
    "somewhat", "occasionally", "stretch", "unexpected", "curveball",
})
_STRONG = frozenset({
    "love", "loves", "loved", "favorite", "favourite", "favorites", "perfect",
    "perfectly", "obsessed", "huge", "exactly", "strongly", "definitely",
    "absolutely", "staple", "signature", "core", "essential", "heavy",
})
_MODERATE = frozenset({
    "like", "likes", "enjoy", "enjoys", "fan", "similar", "fits", "matches",
    "match", "vibe", "vibes", "into", "appreciate", "appreciates", "familiar",
    "echoes", "reminiscent", "listen", "listens",
})
_SENTIMENT = _STRONG | _MODERATE


def affinity_strength(text: str | None) -> float:
    """Reduce one free-text affinity explanation to a strength in [0, 1].

    Rules, first match wins:

    * blank                                   -> 0.0
    * a bare number in [0, 1] or a percentage -> that value
    * negated sentiment ("not a fan")         -> 0.1
    * hedging ("might", "maybe", ...)         -> 0.3
    * strong wording ("loves", "favorite")    -> 1.0
    * moderate wording ("likes", "similar")   -> 0.6
    * any other explanation                   -> 0.5
    """
    if text is None or not text.strip():
        return 0.0

    numeric = _NUMERIC.match(text)
    if numeric:
        value = float(numeric.group(1))
        if numeric.group(2):
            value /= 100.0
        if 0.0 <= value <= 1.0:
            return value

    tokens = _WORD.findall(text.lower().replace("\u2019", "'"))
    words = set(tokens)
    if _is_negated(tokens):
        return NEGATED_AFFINITY
    if words & _HEDGES:
        return WEAK_AFFINITY
    if words & _STRONG:
        return STRONG_AFFINITY
    if words & _MODERATE:
        return MODERATE_AFFINITY
    return UNQUALIFIED_AFFINITY


def _is_negated(tokens: list[str]) -> bool:
    for index, token in enumerate(tokens):
        if token in _NEGATIVE_WORDS:
            return True
        if token in _NEGATIONS and any(
            following in _SENTIMENT
            for following in tokens[index + 1 : index + 1 + _NEGATION_REACH]
        ):
            return True
    return False


def blend_score(user1_strength: float, user2_strength: float) -> float:
    """Combine two per-listener strengths into one blend score in [0, 1]."""
    strengths = [clamp_unit(user1_strength), clamp_unit(user2_strength)]
    score = 0.5 * weighted_average(strengths) + 0.5 * geometric_mean(strengths)
    # Rounded so equal inputs give equal floats regardless of log/exp noise.
    return round(clamp_unit(score), 6)


def score_band(score: float) -> ScoreBand:
    """High (>= 0.8), medium (>= 0.5) or low."""
    return score_to_band(score)


# ------------------------------------------------------------------
# Compatibility
# ------------------------------------------------------------------

_ARTIST_WEIGHT = 0.9
_GENRE_WEIGHT = 0.1


def _overlap(left: set[str], right: set[str]) -> float:
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def calculate_compatibility(
    user_artists: list[str],
    user_genres: list[str],
    friend_artists: list[str],
    friend_genres: list[str],
) -> CompatibilityResult:
    """Score taste overlap between two listeners on a 0-100 scale.

    When neither listener has artist data only genres count, and vice
    versa.  Shared names are reported in the first listener's spelling and
    order.
    """
    artists_a = {normalize_key(a) for a in user_artists} - {""}
    artists_b = {normalize_key(a) for a in friend_artists} - {""}
    genres_a = {normalize_key(g) for g in user_genres} - {""}
    genres_b = {normalize_key(g) for g in friend_genres} - {""}

    artist_score = _overlap(artists_a, artists_b)
    genre_score = _overlap(genres_a, genres_b)

    if not artists_a and not artists_b:
        weighted = genre_score
    elif not genres_a and not genres_b:
        weighted = artist_score
    else:
        weighted = weighted_average([artist_score, genre_score], [_ARTIST_WEIGHT, _GENRE_WEIGHT])

    shared_artist_keys = artists_a & artists_b
    shared_genre_keys = genres_a & genres_b
    return CompatibilityResult(
        score=max(0, min(100, math.floor(weighted * 100 + 1e-9))),
        shared_artists=[a for a in _unique(user_artists) if normalize_key(a) in shared_artist_keys],
        shared_genres=[g for g in _unique(user_genres) if normalize_key(g) in shared_genre_keys],
    )


def compatibility_between(first: MusicProfile, second: MusicProfile) -> CompatibilityResult:
    """Compatibility from two listening profiles (top artists and genres)."""
    return calculate_compatibility(
        first.top_artists, first.genres, second.top_artists, second.genres
    )


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        key = normalize_key(value)
        if key and key not in seen:
            seen.add(key)
            unique.append(value)
    return unique
