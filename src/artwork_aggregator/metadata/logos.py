"""Logo lookup with cache-aside and Fanart.tv -> TMDB fallback.

Outcomes are cached for `logo_cache_ttl` (24h by default), including
"no logo": a cached None stops repeated parsing and provider traffic for
ids that have nothing. A miss is only cached when every provider answered;
if one was throttled or failed, nothing is stored and the next call retries.
"""

from typing import Any

import httpx
import structlog

from artwork_aggregator.cache.provider_cache import ProviderCache
from artwork_aggregator.core.config import ArtworkSettings
from artwork_aggregator.core.ids import ContentType, parse_external_id
from artwork_aggregator.metadata.fallback import (
    Attempt,
    first_available,
    optional_provider,
)
from artwork_aggregator.metadata.providers.fanarttv import FanartTVProvider
from artwork_aggregator.metadata.providers.tmdb import TMDBProvider

logger = structlog.get_logger(__name__)

LOGO_CACHE_NAMESPACE = "logo"


class LogoService:
    """Logo fallback orchestrator backed by an injected cache."""

    def __init__(
        self,
        tmdb_access_token: str | None = None,
        fanart_api_key: str | None = None,
        *,
        cache: ProviderCache,
        settings: ArtworkSettings | None = None,
        client: httpx.AsyncClient | None = None,
        fanart: FanartTVProvider | None = None,
        tmdb: TMDBProvider | None = None,
    ) -> None:
        """Initialize the logo service.

        Args:
            tmdb_access_token: Overrides the configured TMDB token
            fanart_api_key: Overrides the configured Fanart.tv key
            cache: Cache handle for logo results and key validation
            settings: Keys and TTLs; read from the environment if omitted
            client: Shared httpx client; created and owned here if omitted
            fanart: Pre-built Fanart.tv provider
            tmdb: Pre-built TMDB provider
        """
        self._settings = settings or ArtworkSettings.from_env()
        self._cache = cache
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._settings.request_timeout
        )

        common: dict[str, Any] = {
            "client": self._client,
            "cache": cache,
            "request_timeout": self._settings.request_timeout,
            "validation_timeout": self._settings.validation_timeout,
            "key_validity_ttl": self._settings.api_key_validity_ttl,
        }

        self._tmdb = tmdb
        token = tmdb_access_token or self._settings.tmdb_access_token
        if self._tmdb is None and token:
            self._tmdb = optional_provider(
                "TMDB", lambda: TMDBProvider(token, **common)
            )

        self._fanart = fanart
        fanart_key = fanart_api_key or self._settings.fanart_api_key
        if self._fanart is None and fanart_key:
            resolver = self._tmdb
            self._fanart = optional_provider(
                "FanartTV",
                lambda: FanartTVProvider(fanart_key, id_resolver=resolver, **common),
            )

    def has_providers(self) -> bool:
        """True if at least one logo provider is configured."""
        return self._fanart is not None or self._tmdb is not None

    async def validate_api_keys(self) -> dict[str, bool | None]:
        """Validate the Fanart.tv key and TMDB token (cached per key)."""
        results: dict[str, bool | None] = {}
        if self._fanart is not None:
            results["fanart"] = await self._fanart.validate_api_key()
        if self._tmdb is not None:
            results["tmdb"] = await self._tmdb.validate_api_key()
        return results

    async def get_logo(
        self, id: str, content_type: ContentType, language: str = "en"
    ) -> str | None:
        """Get a logo URL, trying Fanart.tv first and TMDB second.

        Args:
            id: Item id in any supported format (tt..., tmdb:..., tvdb:...)
            content_type: "movie", "series" or "tv"
            language: Preferred ISO 639-1 language

        Returns:
            Logo URL, or None if no provider has one
        """
        cache_key = f"{id}-{content_type}-{language}"
        ttl = self._settings.logo_cache_ttl
        try:
            cached = await self._cache.get(LOGO_CACHE_NAMESPACE, cache_key)
            if cached is not None:
                logger.debug("logo_cache_hit", id=id)
                return cached.value

            external_id = parse_external_id(id)
            if external_id is None:
                logger.debug("logo_id_unparseable", id=id)
                await self._cache.set(LOGO_CACHE_NAMESPACE, cache_key, None, ttl=ttl)
                return None

            attempts: list[Attempt] = []
            fanart, tmdb = self._fanart, self._tmdb
            if fanart is not None:
                attempts.append(
                    (
                        "fanart",
                        lambda: fanart.get_logo_url(
                            content_type, external_id, language
                        ),
                    )
                )
            if tmdb is not None:
                attempts.append(
                    (
                        "tmdb",
                        lambda: tmdb.get_logo_url(content_type, external_id, language),
                    )
                )

            found = await first_available(attempts)
            if found.value is not None:
                logger.debug("logo_found", id=id, provider=found.provider)
            elif not found.conclusive:
                # Throttled or unreachable providers confirm nothing.
                logger.debug("logo_lookup_incomplete", id=id, failed=list(found.failed))
                return None
            else:
                logger.debug("logo_not_found", id=id)

            await self._cache.set(LOGO_CACHE_NAMESPACE, cache_key, found.value, ttl=ttl)
            return found.value
        except Exception as exc:  # noqa: BLE001 - lookups never raise
            logger.error(
                "logo_lookup_failed",
                id=id,
                content_type=content_type,
                error=str(exc),
            )
            return None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LogoService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


async def get_logo(
    id: str,
    content_type: ContentType,
    language: str = "en",
    *,
    cache: ProviderCache | None = None,
) -> str | None:
    """One-shot logo lookup with settings from the environment.

    Opens the default cache database when no cache handle is given.
    """
    if cache is not None:
        async with LogoService(cache=cache) as service:
            return await service.get_logo(id, content_type, language)

    async with ProviderCache() as owned_cache:
        async with LogoService(cache=owned_cache) as service:
            return await service.get_logo(id, content_type, language)


async def get_tv_logo(
    id: str, language: str = "en", *, cache: ProviderCache | None = None
) -> str | None:
    """Shorthand for `get_logo(id, "tv", language)`."""
    return await get_logo(id, "tv", language, cache=cache)
