"""Artwork providers for RPDB, Fanart.tv and TMDB.

Security: API keys are passed in explicitly or read from environment variables.
Rate limiting: Each provider enforces conservative limits to prevent bans.
"""

from artwork_aggregator.metadata.providers.base import (
    BaseProvider,
    Endpoint,
    ProviderError,
    ProviderUnavailableError,
    RateLimitError,
)
from artwork_aggregator.metadata.providers.fanarttv import FanartTVProvider
from artwork_aggregator.metadata.providers.rpdb import RPDBProvider
from artwork_aggregator.metadata.providers.tmdb import TMDBProvider

__all__ = [
    "BaseProvider",
    "Endpoint",
    "ProviderError",
    "ProviderUnavailableError",
    "RateLimitError",
    "FanartTVProvider",
    "RPDBProvider",
    "TMDBProvider",
]
