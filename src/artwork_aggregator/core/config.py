"""Environment-backed settings for the artwork providers.

Keys and tokens are only ever read from the environment (or passed in
explicitly); nothing is hardcoded.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_KEY_VALIDITY_TTL = 7 * 24 * 60 * 60
DEFAULT_LOGO_CACHE_TTL = 24 * 60 * 60

_TRUTHY = ("1", "true", "yes", "on")


def _env_str(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name, "").strip()
    return value or None


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class ArtworkSettings:
    """Provider credentials, toggles and cache TTLs.

    Attributes:
        rpdb_api_key: RPDB key, enables rendered poster URLs
        fanart_api_key: Fanart.tv personal or project key
        fanart_enabled: Whether Fanart.tv is used for posters
        tmdb_access_token: TMDB v4 read token or v3 API key
        api_key_validity_ttl: Seconds a key validation result is reused
        logo_cache_ttl: Seconds a logo lookup (including "none") is reused
        request_timeout: Timeout for artwork lookups, in seconds
        validation_timeout: Timeout for key validation probes, in seconds
    """

    rpdb_api_key: str | None = None
    fanart_api_key: str | None = None
    fanart_enabled: bool = True
    tmdb_access_token: str | None = None
    api_key_validity_ttl: int = DEFAULT_KEY_VALIDITY_TTL
    logo_cache_ttl: int = DEFAULT_LOGO_CACHE_TTL
    request_timeout: float = 10.0
    validation_timeout: float = 5.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ArtworkSettings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            rpdb_api_key=_env_str(env, "RPDB_API_KEY"),
            fanart_api_key=_env_str(env, "FANART_API_KEY"),
            fanart_enabled=_env_bool(env, "FANART_ENABLED", True),
            tmdb_access_token=_env_str(env, "TMDB_ACCESS_TOKEN"),
            api_key_validity_ttl=_env_int(
                env, "RPDB_API_KEY_VALIDITY_CACHE_TTL", DEFAULT_KEY_VALIDITY_TTL
            ),
            logo_cache_ttl=_env_int(
                env, "ARTWORK_LOGO_CACHE_TTL", DEFAULT_LOGO_CACHE_TTL
            ),
        )
