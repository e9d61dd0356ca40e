"""Text normalization utilities for track titles, artist names and places.

This module handles three distinct normalization concerns:

1. **Comparison keys** -- Case-folds and collapses whitespace so that
   "  New  York " and "new york" compare equal.  Used for home-city
   matching, concert de-duplication and taste-overlap scoring.

2. **Track title cleanup** -- Strips "(feat. ...)", "[Remastered]",
   "- Single" and similar decorations that catalogs append to titles, and
   detects remix/alternate versions so the preview lookup does not hand
   back a club mix when the original was asked for.

3. **Artist splitting and matching** -- Splits credit strings such as
   "Daft Punk feat. Pharrell Williams & Nile Rodgers" into individual
   names and compares them with rapidfuzz so minor spelling differences
   between catalogs still match.
"""

import re

from rapidfuzz import fuzz

_MULTI_SPACE = re.compile(r"\s+")


def normalize_key(value: str | None) -> str:
    """Return a case-folded, whitespace-collapsed comparison key.

    Args:
        value: Raw string (``None`` is treated as empty).

    Returns:
        The normalized key; empty string for blank input.
    """
    if not value:
        return ""
    return _MULTI_SPACE.sub(" ", value).strip().casefold()


# ------------------------------------------------------------------
# Track titles
# ------------------------------------------------------------------

# Decorations catalogs attach to otherwise identical titles.  Order
# matters: bracketed credits go first so "- Remastered" tails that follow
# them are still reachable.
_TITLE_DECORATIONS: list[re.Pattern[str]] = [
    re.compile(r"\s*\(feat\..*\)", re.IGNORECASE),
    re.compile(r"\s*\(ft\..*\)", re.IGNORECASE),
    re.compile(r"\s*\(with.*\)", re.IGNORECASE),
    re.compile(r"\s*\[.*\]", re.IGNORECASE),
    re.compile(r"\s*-\s*remaster.*", re.IGNORECASE),
    re.compile(r"\s*-\s*single.*", re.IGNORECASE),
    re.compile(r"\s*\(remaster.*\)", re.IGNORECASE),
]

_ALTERNATE_VERSION_MARKERS = (
    "remix", "mix", "edit", "version", "bootleg", "rework",
    "vip", "flip", "mashup", "mash-up", "cover", "acoustic",
    "live", "instrumental", "acapella", "a cappella", "extended",
    "radio edit", "club mix", "dub mix", "stripped",
)


def normalize_track_name(name: str) -> str:
    """Lower-case a track title and strip featuring/remaster decorations.

    Example: "Get Lucky (feat. Pharrell Williams) - Remastered 2013"
    -> "get lucky".
    """
    normalized = name.lower()
    for pattern in _TITLE_DECORATIONS:
        normalized = pattern.sub("", normalized)
    return normalized.strip()


def is_remix_or_alternate_version(name: str) -> bool:
    """Return ``True`` if the title looks like a remix, live take, cover, etc."""
    lowered = name.lower()
    return any(marker in lowered for marker in _ALTERNATE_VERSION_MARKERS)


def titles_match(candidate: str, wanted: str) -> bool:
    """Loose title equality on already-normalized titles.

    Accepts exact matches, either title being the other plus extra words,
    and containment when the wanted title is long enough (4+ chars) not to
    match everything.
    """
    if not candidate or not wanted:
        return False
    return (
        candidate == wanted
        or candidate.startswith(wanted + " ")
        or wanted.startswith(candidate + " ")
        or (wanted in candidate and len(wanted) >= 4)
    )


# ------------------------------------------------------------------
# Artist credits
# ------------------------------------------------------------------

_ARTIST_SEPARATOR = re.compile(
    r"\s+feat\.?\s+|\s+ft\.?\s+|\s+featuring\s+|\s+&\s+|,\s*|\s+x\s+|\s+with\s+",
    re.IGNORECASE,
)


def extract_artist_names(raw: str) -> list[str]:
    """Split a credit string into lower-cased individual artist names.

    "Calvin Harris feat. Rihanna" -> ["calvin harris", "rihanna"]

    Args:
        raw: Artist credit as shown by a catalog or typed by a generator.

    Returns:
        Non-empty, stripped, lower-cased names in credit order.
    """
    parts = _ARTIST_SEPARATOR.split(raw.lower())
    return [part.strip() for part in parts if part.strip()]


def artist_names_match(left: str, right: str, threshold: float = 0.9) -> bool:
    """Return ``True`` if two single artist names refer to the same act.

    Equality or containment ("the weeknd" / "weeknd") wins immediately;
    otherwise rapidfuzz ``token_sort_ratio`` handles word order and small
    spelling differences between catalogs.
    """
    if not left or not right:
        return False
    if left == right or left in right or right in left:
        return True
    return fuzz.token_sort_ratio(left, right) >= threshold * 100
