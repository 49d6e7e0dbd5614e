"""External identifier parsing.

Accepted formats (season/episode suffixes are tolerated and discarded):

    tmdb:603, tmdb-603, tmdb:1399:1:2   -> ExternalId("tmdb", "603")
    tt0133093, tt0944947:1:2            -> ExternalId("imdb", "tt0133093")
    tvdb:121361, tvdb-121361:3:4        -> ExternalId("tvdb", "121361")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

IdKind = Literal["imdb", "tmdb", "tvdb"]
ContentType = Literal["movie", "series", "tv"]
NormalizedType = Literal["movie", "series"]

_TMDB_ID_RE = re.compile(r"tmdb[-:](\d+)(?::\d+:\d+)?", re.ASCII)
_IMDB_ID_RE = re.compile(r"tt(\d+)(?::\d+:\d+)?", re.ASCII)
_TVDB_ID_RE = re.compile(r"tvdb[-:](\d+)(?::\d+:\d+)?", re.ASCII)


@dataclass(frozen=True)
class ExternalId:
    """A typed identifier for a movie or series in a third-party database."""

    kind: IdKind
    value: str

    def __str__(self) -> str:
        if self.kind == "imdb":
            return self.value
        return f"{self.kind}:{self.value}"


def parse_external_id(raw: object) -> ExternalId | None:
    """Parse an opaque identifier string into an `ExternalId`.

    Args:
        raw: Identifier as received from the caller

    Returns:
        The parsed id, or None when no supported format matches
    """
    if not isinstance(raw, str):
        return None

    match = _TMDB_ID_RE.fullmatch(raw)
    if match:
        return ExternalId("tmdb", match.group(1))

    match = _IMDB_ID_RE.fullmatch(raw)
    if match:
        return ExternalId("imdb", f"tt{match.group(1)}")

    match = _TVDB_ID_RE.fullmatch(raw)
    if match:
        return ExternalId("tvdb", match.group(1))

    return None


def normalize_content_type(content_type: str) -> NormalizedType | None:
    """Collapse the `tv` alias onto `series`; unknown types map to None."""
    if content_type == "movie":
        return "movie"
    if content_type in ("series", "tv"):
        return "series"
    return None
