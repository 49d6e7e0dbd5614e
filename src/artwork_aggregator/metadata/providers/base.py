"""Base provider interface shared by the artwork backends.

SECURITY REQUIREMENTS:
- API keys come from the caller or from environment variables, never code
- API keys MUST NEVER appear in logs or error messages
- Rate limits are enforced client-side to avoid bans

Every backend answers the same three questions:
- can I serve this (content type, id kind)?  -> build_request()
- which candidates are in this payload?       -> extract_candidates()
- is my key valid?                            -> validate_api_key()
"""

import os
import re
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
import structlog

from artwork_aggregator.cache.provider_cache import ProviderCache
from artwork_aggregator.core.config import DEFAULT_KEY_VALIDITY_TTL
from artwork_aggregator.core.errors import ArtworkError
from artwork_aggregator.core.ids import ExternalId
from artwork_aggregator.core.ranking import ArtworkCandidate

logger = structlog.get_logger(__name__)

ArtworkType = Literal["logo", "poster"]

# Keys end up in URL paths and query strings.
_URL_SAFE_KEY_RE = re.compile(r"[A-Za-z0-9._-]+")


class ProviderError(ArtworkError):
    """Base error for provider-related failures."""

    pass


class RateLimitError(ProviderError):
    """Raised when the client-side rate limit is exceeded."""

    pass


class ProviderUnavailableError(ProviderError):
    """Raised when a provider cannot be reached (timeout, transport error)."""

    pass


@dataclass(frozen=True)
class Endpoint:
    """Request descriptor produced by `BaseProvider.build_request`."""

    url: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)

    def full_url(self) -> str:
        """URL including query parameters."""
        return str(httpx.URL(self.url, params=self.params or None))


class BaseProvider(ABC):
    """Base class for artwork providers.

    Features:
    - Explicit or environment-sourced API key, validated for format
    - Rate limiting per provider
    - JSON fetch with uniform error mapping (keys never exposed)
    - Cached API key validation
    """

    #: Cache namespace holding key-validation results.
    VALIDATION_NAMESPACE = "apiKey"

    def __init__(
        self,
        provider_name: str,
        api_key: str | None = None,
        api_key_env_var: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cache: ProviderCache | None = None,
        rate_limit_per_minute: int = 40,
        request_timeout: float = 10.0,
        validation_timeout: float = 5.0,
        key_validity_ttl: int = DEFAULT_KEY_VALIDITY_TTL,
    ):
        """Initialize provider with secure configuration.

        Args:
            provider_name: Name of the provider (for logging)
            api_key: Explicit API key; falls back to `api_key_env_var`
            api_key_env_var: Environment variable consulted when no key is given
            client: Shared httpx client; one is created (and owned) if omitted
            cache: Cache handle for key validation results
            rate_limit_per_minute: Max requests per minute (conservative)
            request_timeout: Timeout for artwork requests, in seconds
            validation_timeout: Timeout for key validation probes, in seconds
            key_validity_ttl: Seconds a validation result is reused

        Raises:
            ValueError: If the key is missing or not URL-safe
        """
        self.provider_name = provider_name
        self.rate_limit_per_minute = rate_limit_per_minute
        self.request_timeout = request_timeout
        self.validation_timeout = validation_timeout
        self.key_validity_ttl = key_validity_ttl

        if not api_key and api_key_env_var:
            api_key = os.getenv(api_key_env_var)
        if not api_key:
            source = (
                f"environment variable '{api_key_env_var}'"
                if api_key_env_var
                else "arguments"
            )
            raise ValueError(f"{provider_name} API key not found in {source}.")
        if not _URL_SAFE_KEY_RE.fullmatch(api_key):
            raise ValueError(f"{provider_name} API key has an invalid format.")
        self._api_key = api_key

        self._owns_client = client is None
        self._client = (
            client if client is not None else httpx.AsyncClient(timeout=request_timeout)
        )
        self._cache = cache

        # Rate limiting: track request timestamps
        self._request_times: deque[float] = deque()

    def __str__(self) -> str:
        """String representation with API key MASKED for security."""
        return f"{self.provider_name}Provider(api_key=***)"

    def __repr__(self) -> str:
        return self.__str__()

    @property
    def api_key(self) -> str:
        """Get API key (for internal use only - never log this!)."""
        return self._api_key

    def check_rate_limit(self) -> bool:
        """Record a request if within the per-minute budget.

        Returns:
            True if request allowed, False if rate limited
        """
        now = time.time()
        minute_ago = now - 60

        while self._request_times and self._request_times[0] < minute_ago:
            self._request_times.popleft()

        if len(self._request_times) >= self.rate_limit_per_minute:
            return False

        self._request_times.append(now)
        return True

    def _mask(self, text: str) -> str:
        return text.replace(self._api_key, "***")

    async def fetch_json(
        self, endpoint: Endpoint, operation_name: str = "request"
    ) -> Any:
        """GET an endpoint and decode its JSON body.

        Returns:
            Decoded JSON, or None when the provider answers 404

        Raises:
            RateLimitError: If the client-side budget is exhausted
            ProviderUnavailableError: On timeouts and transport errors
            ProviderError: On other HTTP errors or an undecodable body
        """
        if not self.check_rate_limit():
            raise RateLimitError(f"{self.provider_name} rate limit exceeded")

        try:
            response = await self._client.get(
                endpoint.url,
                params=endpoint.params or None,
                headers=endpoint.headers or None,
                timeout=self.request_timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(
                f"{self.provider_name} {operation_name} timed out"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(
                f"{self.provider_name} {operation_name} failed: {self._mask(str(e))}"
            ) from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise ProviderError(
                f"{self.provider_name} {operation_name} failed with HTTP "
                f"{response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.provider_name} {operation_name} returned invalid JSON"
            ) from e

    async def validate_api_key(self) -> bool | None:
        """Check the key against the provider, reusing cached answers.

        A 401 means invalid and a 2xx means valid; both are cached for
        `key_validity_ttl`. Any other status, or a failed request, is
        "unknown" and is not cached.

        Returns:
            True/False when the provider answered definitively, else None
        """
        cache_key = ProviderCache.make_key(
            self.VALIDATION_NAMESPACE, {"api_key": self._api_key}
        )
        if self._cache is not None:
            cached = await self._cache.get(self.VALIDATION_NAMESPACE, cache_key)
            if cached is not None:
                return bool(cached.value)

        if not self.check_rate_limit():
            logger.debug("api_key_validation_skipped", provider=self.provider_name)
            return None

        endpoint = self.validation_endpoint()
        try:
            response = await self._client.get(
                endpoint.url,
                params=endpoint.params or None,
                headers=endpoint.headers or None,
                timeout=self.validation_timeout,
            )
        except httpx.HTTPError as exc:
            logger.debug(
                "api_key_validation_failed",
                provider=self.provider_name,
                error=type(exc).__name__,
            )
            return None

        if response.status_code == 401:
            is_valid = False
        elif response.is_success:
            is_valid = True
        else:
            logger.debug(
                "api_key_validation_inconclusive",
                provider=self.provider_name,
                status=response.status_code,
            )
            return None

        if self._cache is not None:
            await self._cache.set(
                self.VALIDATION_NAMESPACE,
                cache_key,
                is_valid,
                ttl=self.key_validity_ttl,
            )
        return is_valid

    @abstractmethod
    def build_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        """Describe the request for an id, or None if this provider can't serve it."""
        pass

    @abstractmethod
    def extract_candidates(
        self, payload: Any, content_type: str, artwork: ArtworkType = "logo"
    ) -> list[ArtworkCandidate]:
        """Map a provider payload onto uniform artwork candidates."""
        pass

    @abstractmethod
    def validation_endpoint(self) -> Endpoint:
        """Endpoint whose status code reveals whether the key is valid."""
        pass

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BaseProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
