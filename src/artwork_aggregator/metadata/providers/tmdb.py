"""TMDB (The Movie Database) provider for logos and id translation.

Security:
- Supports both v3 API key (query param) and v4 read token (Bearer header)
- Auto-detects auth method by token format
- Never exposes keys in logs/errors

Features:
- Logos from /{movie|tv}/{id}/images, ranked by language then vote_average
- IMDb/TVDB -> TMDB id translation via /find
"""

from typing import Any

import structlog

from artwork_aggregator.core.ids import ExternalId, normalize_content_type
from artwork_aggregator.core.ranking import ArtworkCandidate, parse_score, select_best
from artwork_aggregator.metadata.providers.base import (
    ArtworkType,
    BaseProvider,
    Endpoint,
    ProviderError,
    ProviderUnavailableError,
    RateLimitError,
)

logger = structlog.get_logger(__name__)


class TMDBProvider(BaseProvider):
    """TMDB provider with dual authentication support."""

    BASE_URL = "https://api.themoviedb.org/3"
    IMAGE_BASE = "https://image.tmdb.org/t/p/original"
    VALIDATION_NAMESPACE = "tmdbAccessToken"

    def __init__(self, access_token: str | None = None, **kwargs: Any) -> None:
        """Initialize TMDB provider with auto-detected auth method.

        Args:
            access_token: v4 read token or v3 key; falls back to TMDB_ACCESS_TOKEN
            **kwargs: Forwarded to `BaseProvider`
        """
        super().__init__(
            provider_name="TMDB",
            api_key=access_token,
            api_key_env_var="TMDB_ACCESS_TOKEN",
            rate_limit_per_minute=40,  # Conservative: 40 req/10s = 40 req/min
            **kwargs,
        )
        self._resolved_ids: dict[tuple[str, str, str], str] = {}

    def _get_auth(self) -> tuple[dict[str, str], dict[str, str]]:
        """Get auth headers and params based on key format.

        Returns:
            (headers, params) tuple for httpx request
        """
        # v4 read tokens are JWTs: start with "eyJ" and are long
        if self.api_key.startswith("eyJ") and len(self.api_key) > 100:
            return {"Authorization": f"Bearer {self.api_key}"}, {}
        return {}, {"api_key": self.api_key}

    def build_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        normalized = normalize_content_type(content_type)
        if normalized is None or external_id.kind != "tmdb":
            return None

        media = "movie" if normalized == "movie" else "tv"
        headers, params = self._get_auth()
        return Endpoint(
            url=f"{self.BASE_URL}/{media}/{external_id.value}/images",
            params=params,
            headers=headers,
        )

    async def resolve_tmdb_id(
        self, external_id: ExternalId, content_type: str
    ) -> str | None:
        """Translate an IMDb or TVDB id into a TMDB id.

        No match, an unexpected shape or an HTTP error status return None:
        the caller treats that as "cannot answer", not as an error.

        Raises:
            RateLimitError: If the client-side budget is exhausted
            ProviderUnavailableError: On timeouts and transport errors
        """
        if external_id.kind == "tmdb":
            return external_id.value

        normalized = normalize_content_type(content_type)
        if normalized is None:
            return None

        memo_key = (external_id.kind, external_id.value, normalized)
        if memo_key in self._resolved_ids:
            return self._resolved_ids[memo_key]

        headers, params = self._get_auth()
        params["external_source"] = f"{external_id.kind}_id"
        try:
            payload = await self.fetch_json(
                Endpoint(
                    url=f"{self.BASE_URL}/find/{external_id.value}",
                    params=params,
                    headers=headers,
                ),
                "find",
            )
        except (RateLimitError, ProviderUnavailableError):
            raise
        except ProviderError as exc:
            logger.debug(
                "tmdb_id_conversion_failed", id=str(external_id), error=str(exc)
            )
            return None

        if not isinstance(payload, dict):
            return None
        results_key = "movie_results" if normalized == "movie" else "tv_results"
        results = payload.get(results_key)
        if not isinstance(results, list) or not results:
            return None
        first = results[0]
        tmdb_id = first.get("id") if isinstance(first, dict) else None
        if tmdb_id is None:
            return None

        self._resolved_ids[memo_key] = str(tmdb_id)
        return str(tmdb_id)

    async def resolve_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        """Like `build_request`, converting non-TMDB ids first."""
        tmdb_id = await self.resolve_tmdb_id(external_id, content_type)
        if tmdb_id is None:
            return None
        return self.build_request(content_type, ExternalId("tmdb", tmdb_id))

    def extract_candidates(
        self, payload: Any, content_type: str, artwork: ArtworkType = "logo"
    ) -> list[ArtworkCandidate]:
        """Read `{file_path, iso_639_1, vote_average}` images.

        Accepts both the bare /images response and a details response with
        `append_to_response=images`.
        """
        if not isinstance(payload, dict):
            return []
        container = payload.get("images")
        if not isinstance(container, dict):
            container = payload

        images = container.get("logos" if artwork == "logo" else "posters")
        if not isinstance(images, list):
            return []

        candidates: list[ArtworkCandidate] = []
        for image in images:
            if not isinstance(image, dict):
                continue
            file_path = image.get("file_path")
            if not isinstance(file_path, str) or not file_path:
                continue
            language = image.get("iso_639_1")
            candidates.append(
                ArtworkCandidate(
                    url=f"{self.IMAGE_BASE}{file_path}",
                    language=language if isinstance(language, str) else None,
                    score=parse_score(image.get("vote_average")),
                )
            )
        return candidates

    async def get_logo_url(
        self, content_type: str, external_id: ExternalId, language: str = "en"
    ) -> str | None:
        """Fetch logos for an id and return the best-ranked URL.

        Raises:
            ProviderError: If the images request fails
        """
        endpoint = await self.resolve_request(content_type, external_id)
        if endpoint is None:
            return None

        payload = await self.fetch_json(endpoint, "get_logo")
        if payload is None:
            return None

        best = select_best(self.extract_candidates(payload, content_type), language)
        return best.url if best else None

    def validation_endpoint(self) -> Endpoint:
        headers, params = self._get_auth()
        return Endpoint(
            url=f"{self.BASE_URL}/configuration", params=params, headers=headers
        )
