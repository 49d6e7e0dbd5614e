"""Poster lookup across RPDB and Fanart.tv.

RPDB is tried first because its URLs are built locally; Fanart.tv needs a
network round-trip and only runs when RPDB has nothing.
"""

from typing import Any

import httpx
import structlog

from artwork_aggregator.cache.provider_cache import ProviderCache
from artwork_aggregator.core.config import ArtworkSettings
from artwork_aggregator.core.ids import parse_external_id
from artwork_aggregator.metadata.fallback import (
    Attempt,
    first_available,
    optional_provider,
)
from artwork_aggregator.metadata.providers.base import BaseProvider
from artwork_aggregator.metadata.providers.fanarttv import FanartTVProvider
from artwork_aggregator.metadata.providers.rpdb import RPDBProvider
from artwork_aggregator.metadata.providers.tmdb import TMDBProvider

logger = structlog.get_logger(__name__)


class ArtworkProvider:
    """Poster fallback orchestrator.

    Providers are selected by configuration: RPDB when a key is set,
    Fanart.tv when a key is set and it is enabled. A TMDB token, if present,
    lets Fanart.tv serve IMDb movie ids.
    """

    def __init__(
        self,
        settings: ArtworkSettings | None = None,
        *,
        cache: ProviderCache | None = None,
        client: httpx.AsyncClient | None = None,
        rpdb: RPDBProvider | None = None,
        fanart: FanartTVProvider | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Keys and TTLs; read from the environment if omitted
            cache: Cache handle for API key validation results
            client: Shared httpx client; created and owned here if omitted
            rpdb: Pre-built RPDB provider (skips construction from settings)
            fanart: Pre-built Fanart.tv provider (skips construction from settings)
        """
        self._settings = settings or ArtworkSettings.from_env()
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

        self._rpdb = rpdb
        if self._rpdb is None and self._settings.rpdb_api_key:
            key = self._settings.rpdb_api_key
            self._rpdb = optional_provider("RPDB", lambda: RPDBProvider(key, **common))

        self._fanart = fanart
        if (
            self._fanart is None
            and self._settings.fanart_api_key
            and self._settings.fanart_enabled
        ):
            resolver = None
            if self._settings.tmdb_access_token:
                token = self._settings.tmdb_access_token
                resolver = optional_provider(
                    "TMDB", lambda: TMDBProvider(token, **common)
                )
            fanart_key = self._settings.fanart_api_key
            self._fanart = optional_provider(
                "FanartTV",
                lambda: FanartTVProvider(fanart_key, id_resolver=resolver, **common),
            )

    def has_providers(self) -> bool:
        """True if at least one poster provider is configured."""
        return self._rpdb is not None or self._fanart is not None

    def _providers(self) -> dict[str, BaseProvider]:
        providers: dict[str, BaseProvider] = {}
        if self._rpdb is not None:
            providers["rpdb"] = self._rpdb
        if self._fanart is not None:
            providers["fanart"] = self._fanart
        return providers

    async def get_poster_url(self, content_type: str, id: str) -> str | None:
        """Get a poster URL, trying RPDB first and Fanart.tv second.

        Args:
            content_type: "movie", "series" or "tv"
            id: Item id in any supported format (tt..., tmdb:..., tvdb:...)

        Returns:
            Poster URL, or None if no provider has one
        """
        external_id = parse_external_id(id)
        if external_id is None:
            logger.debug("poster_id_unparseable", id=id)
            return None

        attempts: list[Attempt] = []
        rpdb, fanart = self._rpdb, self._fanart
        if rpdb is not None:
            attempts.append(
                ("rpdb", lambda: rpdb.get_poster_url(content_type, external_id))
            )
        if fanart is not None:
            attempts.append(
                ("fanart", lambda: fanart.get_poster_url(content_type, external_id))
            )

        found = await first_available(attempts)
        if found.value is None:
            logger.debug(
                "poster_not_found",
                id=id,
                content_type=content_type,
                failed=list(found.failed),
            )
            return None

        logger.debug("poster_found", id=id, provider=found.provider)
        return found.value

    async def validate_api_keys(self) -> dict[str, bool | None]:
        """Validate every configured provider key (cached per key)."""
        return {
            name: await provider.validate_api_key()
            for name, provider in self._providers().items()
        }

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ArtworkProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
