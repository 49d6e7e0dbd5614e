"""Deterministic ranking of artwork candidates.

Candidates are ordered by language tier first and score second:

    4  language equals the preferred language
    3  English
    2  no language (textless artwork)
    1  any other language

Score is only compared inside a tier. Equal (tier, score) pairs keep the
order the provider returned them in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ArtworkCandidate:
    """A single piece of artwork offered by a provider."""

    url: str
    language: str | None = None
    score: float = 0.0


def parse_score(raw: Any) -> float:
    """Coerce a provider score (number or numeric string) to float.

    Missing, non-numeric and NaN values count as 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


def language_tier(language: str | None, preferred_language: str) -> int:
    """Return the language priority tier for a candidate."""
    if language == preferred_language:
        return 4
    if language == "en":
        return 3
    if not language:
        return 2
    return 1


def select_best(
    candidates: list[ArtworkCandidate], preferred_language: str
) -> ArtworkCandidate | None:
    """Pick the best candidate for `preferred_language`.

    Args:
        candidates: Candidates in provider-returned order
        preferred_language: ISO 639-1 code requested by the caller

    Returns:
        The top-ranked candidate, or None for an empty list
    """
    if not candidates:
        return None

    # max() returns the first maximal element, which keeps ties stable.
    return max(
        candidates,
        key=lambda c: (
            language_tier(c.language, preferred_language),
            parse_score(c.score),
        ),
    )
