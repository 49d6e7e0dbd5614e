"""FanartTV provider for high-quality artwork (posters, logos).

FanartTV specifics:
- Requires API key (free tier available)
- Movies: https://webservice.fanart.tv/v3/movies/{tmdb_id}?api_key={key}
- TV: https://webservice.fanart.tv/v3/tv/{tvdb_id}?api_key={key}
- Fields used: movielogo, clearlogo, movieposter, tvposter
  (each element `{url, lang, likes}`; lang "00" ranks like any
  other non-preferred language)
- Conservative rate limit: 40 req/min (no official limit specified)

IMDb movie ids can be served when a TMDB provider is supplied as id
resolver. TV lookups always need a TVDB id.
"""

from typing import TYPE_CHECKING, Any

import structlog

from artwork_aggregator.core.ids import ExternalId, normalize_content_type
from artwork_aggregator.core.ranking import ArtworkCandidate, parse_score, select_best
from artwork_aggregator.metadata.providers.base import (
    ArtworkType,
    BaseProvider,
    Endpoint,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from artwork_aggregator.metadata.providers.tmdb import TMDBProvider

logger = structlog.get_logger(__name__)

ARTWORK_FIELDS: dict[tuple[str, str], str] = {
    ("movie", "logo"): "movielogo",
    ("series", "logo"): "clearlogo",
    ("movie", "poster"): "movieposter",
    ("series", "poster"): "tvposter",
}

class FanartTVProvider(BaseProvider):
    """FanartTV provider for posters and logos."""

    BASE_URL = "https://webservice.fanart.tv/v3"
    VALIDATION_NAMESPACE = "fanartApiKey"
    # Any id works; fanart.tv answers 401 for a bad key before looking it up.
    VALIDATION_PROBE_ID = "123456"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        id_resolver: "TMDBProvider | None" = None,
        **kwargs: Any,
    ) -> None:
        """Initialize FanartTV provider.

        Args:
            api_key: Fanart.tv key; falls back to FANART_API_KEY
            id_resolver: TMDB provider used to turn IMDb movie ids into TMDB ids
            **kwargs: Forwarded to `BaseProvider`
        """
        super().__init__(
            provider_name="FanartTV",
            api_key=api_key,
            api_key_env_var="FANART_API_KEY",
            rate_limit_per_minute=40,
            **kwargs,
        )
        self._id_resolver = id_resolver

    def build_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        normalized = normalize_content_type(content_type)
        if normalized == "movie" and external_id.kind == "tmdb":
            path = f"movies/{external_id.value}"
        elif normalized == "series" and external_id.kind == "tvdb":
            path = f"tv/{external_id.value}"
        else:
            return None

        return Endpoint(
            url=f"{self.BASE_URL}/{path}",
            params={"api_key": self.api_key},
        )

    async def resolve_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        """Like `build_request`, translating IMDb movie ids through TMDB."""
        endpoint = self.build_request(content_type, external_id)
        if endpoint is not None:
            return endpoint

        if (
            self._id_resolver is None
            or external_id.kind != "imdb"
            or normalize_content_type(content_type) != "movie"
        ):
            return None

        tmdb_id = await self._id_resolver.resolve_tmdb_id(external_id, content_type)
        if tmdb_id is None:
            return None
        return self.build_request(content_type, ExternalId("tmdb", tmdb_id))

    def extract_candidates(
        self, payload: Any, content_type: str, artwork: ArtworkType = "logo"
    ) -> list[ArtworkCandidate]:
        """Read `{url, lang, likes}` items from the field for this artwork."""
        normalized = normalize_content_type(content_type)
        if normalized is None or not isinstance(payload, dict):
            return []

        items = payload.get(ARTWORK_FIELDS[(normalized, artwork)])
        if not isinstance(items, list):
            return []

        candidates: list[ArtworkCandidate] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            url = item.get("url")
            if not isinstance(url, str) or not url:
                continue
            lang = item.get("lang")
            if not isinstance(lang, str) or not lang:
                lang = None
            candidates.append(
                ArtworkCandidate(
                    url=url, language=lang, score=parse_score(item.get("likes"))
                )
            )
        return candidates

    async def get_artwork_url(
        self,
        content_type: str,
        external_id: ExternalId,
        artwork: ArtworkType,
        language: str = "en",
    ) -> str | None:
        """Fetch artwork for an id and return the best-ranked URL.

        Raises:
            ProviderError: If the request fails (404 counts as "no artwork")
        """
        endpoint = await self.resolve_request(content_type, external_id)
        if endpoint is None:
            logger.debug(
                "fanart_unsupported_id", content_type=content_type, id=str(external_id)
            )
            return None

        payload = await self.fetch_json(endpoint, f"get_{artwork}")
        if payload is None:
            return None

        best = select_best(
            self.extract_candidates(payload, content_type, artwork), language
        )
        return best.url if best else None

    async def get_logo_url(
        self, content_type: str, external_id: ExternalId, language: str = "en"
    ) -> str | None:
        return await self.get_artwork_url(content_type, external_id, "logo", language)

    async def get_poster_url(
        self, content_type: str, external_id: ExternalId, language: str = "en"
    ) -> str | None:
        return await self.get_artwork_url(content_type, external_id, "poster", language)

    def validation_endpoint(self) -> Endpoint:
        return Endpoint(
            url=f"{self.BASE_URL}/movies/{self.VALIDATION_PROBE_ID}",
            params={"api_key": self.api_key},
        )
