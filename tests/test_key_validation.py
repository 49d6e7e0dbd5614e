"""Tests for cached API key validation.

Rule shared by every provider:
- 401 -> invalid, cached
- 2xx -> valid, cached
- anything else (or no response) -> unknown, not cached
"""

import httpx
import pytest

RPDB_VALID_PATH = "/t1-key/isValid"


@pytest.mark.asyncio
async def test_validation_401_is_cached_as_invalid(stub_transport):
    """Test that a 401 answer is cached and reused without a request."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.rpdb import RPDBProvider

    stub_transport.add(RPDB_VALID_PATH, status=401)
    async with ProviderCache(":memory:") as cache:
        provider = RPDBProvider("t1-key", client=stub_transport.client(), cache=cache)

        assert await provider.validate_api_key() is False
        assert await provider.validate_api_key() is False

    assert stub_transport.calls(RPDB_VALID_PATH) == 1


@pytest.mark.asyncio
async def test_validation_success_is_cached_as_valid(stub_transport):
    """Test that a 2xx answer is cached and reused."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.fanarttv import FanartTVProvider

    stub_transport.add("/v3/movies/123456", json={"name": "probe"})
    async with ProviderCache(":memory:") as cache:
        provider = FanartTVProvider(
            "fanart-key", client=stub_transport.client(), cache=cache
        )

        assert await provider.validate_api_key() is True
        assert await provider.validate_api_key() is True

    assert stub_transport.calls("/v3/movies/123456") == 1
    assert stub_transport.requests[0].url.params["api_key"] == "fanart-key"


@pytest.mark.asyncio
async def test_validation_server_error_is_unknown_and_not_cached(stub_transport):
    """Test that a 5xx yields None and the next call asks again."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.tmdb import TMDBProvider

    stub_transport.add("/3/configuration", status=503)
    async with ProviderCache(":memory:") as cache:
        provider = TMDBProvider("v3key", client=stub_transport.client(), cache=cache)

        assert await provider.validate_api_key() is None
        assert await provider.validate_api_key() is None

    assert stub_transport.calls("/3/configuration") == 2


@pytest.mark.asyncio
async def test_validation_transport_error_is_unknown(stub_transport):
    """Test that an unreachable provider yields None."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.rpdb import RPDBProvider

    stub_transport.add(RPDB_VALID_PATH, raises=httpx.ConnectError("down"))
    async with ProviderCache(":memory:") as cache:
        provider = RPDBProvider("t1-key", client=stub_transport.client(), cache=cache)

        assert await provider.validate_api_key() is None

        stub_transport.add(RPDB_VALID_PATH, status=200, json={"valid": True})
        assert await provider.validate_api_key() is True


@pytest.mark.asyncio
async def test_validation_cache_never_stores_raw_key(stub_transport):
    """Test that the cached entry is keyed by a digest of the key."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.rpdb import RPDBProvider

    stub_transport.add(RPDB_VALID_PATH, json={"valid": True})
    async with ProviderCache(":memory:") as cache:
        provider = RPDBProvider("t1-key", client=stub_transport.client(), cache=cache)
        await provider.validate_api_key()

        db = await cache._get_connection()
        async with db.execute("SELECT namespace, cache_key FROM cache_entries") as cur:
            rows = await cur.fetchall()

    assert len(rows) == 1
    namespace, cache_key = rows[0]
    assert namespace == "rpdbApiKey"
    assert "t1-key" not in cache_key
    assert cache_key == ProviderCache.make_key("rpdbApiKey", {"api_key": "t1-key"})


@pytest.mark.asyncio
async def test_validation_cached_answer_makes_no_request(stub_transport):
    """Test that a pre-seeded answer short-circuits the probe."""
    from artwork_aggregator.cache.provider_cache import ProviderCache
    from artwork_aggregator.metadata.providers.rpdb import RPDBProvider

    async with ProviderCache(":memory:") as cache:
        await cache.set(
            "rpdbApiKey",
            ProviderCache.make_key("rpdbApiKey", {"api_key": "t1-key"}),
            False,
        )
        provider = RPDBProvider("t1-key", client=stub_transport.client(), cache=cache)

        assert await provider.validate_api_key() is False

    assert stub_transport.calls() == 0


@pytest.mark.asyncio
async def test_validation_without_cache_always_probes(stub_transport):
    """Test that a provider without a cache handle still validates."""
    from artwork_aggregator.metadata.providers.rpdb import RPDBProvider

    stub_transport.add(RPDB_VALID_PATH, status=401)
    provider = RPDBProvider("t1-key", client=stub_transport.client())

    assert await provider.validate_api_key() is False
    assert await provider.validate_api_key() is False
    assert stub_transport.calls(RPDB_VALID_PATH) == 2
