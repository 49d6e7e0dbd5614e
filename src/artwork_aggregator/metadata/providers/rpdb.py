"""RPDB (RatingPosterDB) provider for rating-overlay posters.

RPDB specifics:
- Requires API key (tiered keys such as `t1-...`)
- Posters are rendered server-side, so a URL can be built without a request:
  https://api.ratingposterdb.com/{key}/{kind}/poster-default/{id}.jpg?fallback=true
- IMDb ids are used as-is, TMDB ids are prefixed with the media type
  (`movie-603`, `series-1399`), TVDB ids only exist for series
- Key validation: https://api.ratingposterdb.com/{key}/isValid
"""

from typing import Any

from artwork_aggregator.core.ids import ExternalId, normalize_content_type
from artwork_aggregator.core.ranking import ArtworkCandidate
from artwork_aggregator.metadata.providers.base import (
    ArtworkType,
    BaseProvider,
    Endpoint,
)


class RPDBProvider(BaseProvider):
    """RPDB provider: synchronous poster URL construction."""

    BASE_URL = "https://api.ratingposterdb.com"
    VALIDATION_NAMESPACE = "rpdbApiKey"

    def __init__(self, api_key: str | None = None, **kwargs: Any) -> None:
        """Initialize RPDB provider.

        Args:
            api_key: RPDB key; falls back to RPDB_API_KEY
            **kwargs: Forwarded to `BaseProvider`
        """
        super().__init__(
            provider_name="RPDB",
            api_key=api_key,
            api_key_env_var="RPDB_API_KEY",
            **kwargs,
        )

    def build_request(
        self, content_type: str, external_id: ExternalId
    ) -> Endpoint | None:
        normalized = normalize_content_type(content_type)
        if normalized is None:
            return None

        if external_id.kind == "imdb":
            value = external_id.value
        elif external_id.kind == "tmdb":
            value = f"{normalized}-{external_id.value}"
        elif external_id.kind == "tvdb" and normalized == "series":
            value = external_id.value
        else:
            return None

        return Endpoint(
            url=(
                f"{self.BASE_URL}/{self.api_key}/{external_id.kind}"
                f"/poster-default/{value}.jpg"
            ),
            params={"fallback": "true"},
        )

    def get_poster_url(self, content_type: str, external_id: ExternalId) -> str | None:
        """Build the poster URL for an id, or None if RPDB can't serve it."""
        endpoint = self.build_request(content_type, external_id)
        if endpoint is None:
            return None
        return endpoint.full_url()

    def extract_candidates(
        self, payload: Any, content_type: str, artwork: ArtworkType = "logo"
    ) -> list[ArtworkCandidate]:
        """RPDB returns images, not JSON.

        Raises:
            NotImplementedError: Always
        """
        raise NotImplementedError(
            "RPDB serves rendered posters directly and has no JSON payload. "
            "Use get_poster_url()."
        )

    def validation_endpoint(self) -> Endpoint:
        return Endpoint(url=f"{self.BASE_URL}/{self.api_key}/isValid")
