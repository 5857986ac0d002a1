"""Tests for the asset catalog."""

import asyncio

import httpx
import pytest

from intentswap.assets.catalog import AssetCatalog, CatalogCache, parse_token, parse_token_list
from intentswap.assets.fallback import FALLBACK_ASSETS

TOKENS_URL = "https://tokens.test/api/tokens"

TOKEN_LIST = {
    "items": [
        {
            "defuse_asset_id": "nep141:wrap.near",
            "symbol": "NEAR",
            "blockchain": "near",
            "decimals": 24,
        },
        {
            "defuse_asset_id": "nep141:zec.omft.near",
            "symbol": "ZEC",
            "blockchain": "zec",
            "decimals": 8,
        },
        {
            "defuse_asset_id": "nep141:eth-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.omft.near",
            "symbol": "USDC",
            "blockchain": "eth",
            "decimals": 6,
            "contract_address": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        },
        {
            "defuse_asset_id": "nep141:aave.omft.near",
            "symbol": "AAVE",
            "blockchain": "eth",
            "decimals": 18,
            "contract_address": "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9",
        },
        {
            "defuse_asset_id": "nep141:btc.omft.near",
            "symbol": "BTC",
            "blockchain": "btc",
            "decimals": 8,
        },
        {"symbol": "BROKEN"},
    ]
}


class CountingHandler:
    """httpx MockTransport handler that counts requests."""

    def __init__(self, response=None, status_code: int = 200, exc: Exception = None):
        self.calls = 0
        self.response = TOKEN_LIST if response is None else response
        self.status_code = status_code
        self.exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, json=self.response)


def make_catalog(handler, clock, **kwargs) -> AssetCatalog:
    return AssetCatalog(
        tokens_url=TOKENS_URL,
        cache=CatalogCache(ttl_seconds=300, clock=clock),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestParseTokenList:
    """Tests for token list parsing."""

    def test_identifiers(self):
        """Test composite identifier synthesis."""
        assets = {a.symbol: a for a in parse_token_list(TOKEN_LIST)}

        assert assets["NEAR"].identifier == "NEAR.NEAR"
        assert assets["USDC"].identifier == "ETH.USDC-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
        assert assets["USDC"].decimals == 6
        assert assets["USDC"].provider_asset_id.startswith("nep141:eth-")
        assert assets["BTC"].chain == "BTC"

    def test_excludes_home_asset_and_malformed(self):
        """Test ZEC and incomplete entries are skipped."""
        symbols = [a.symbol for a in parse_token_list(TOKEN_LIST)]

        assert "ZEC" not in symbols
        assert "BROKEN" not in symbols

    def test_popular_first_then_alphabetical(self):
        """Test ordering."""
        symbols = [a.symbol for a in parse_token_list(TOKEN_LIST)]

        assert symbols == ["BTC", "USDC", "NEAR", "AAVE"]

    def test_native_contract_marker(self):
        """Test "native" contract does not become part of the identifier."""
        asset = parse_token(
            {"symbol": "ETH", "blockchain": "arbitrum", "decimals": 18, "contract_address": "native"}
        )
        assert asset.identifier == "ARB.ETH"

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError):
            parse_token_list({"items": []})
        with pytest.raises(ValueError):
            parse_token_list({"unexpected": True})


class TestCatalogCache:
    """Tests for the cache slot."""

    @pytest.mark.asyncio
    async def test_get_or_fetch(self, clock):
        """Test fetch on miss, cached within the window, refetch after."""
        cache = CatalogCache(ttl_seconds=300, clock=clock)
        calls = []

        async def fetch():
            calls.append(clock())
            return list(FALLBACK_ASSETS[:2])

        await cache.get_or_fetch(fetch)
        clock.advance(299)
        await cache.get_or_fetch(fetch)
        assert len(calls) == 1

        clock.advance(1)
        await cache.get_or_fetch(fetch)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_fetch_error_leaves_cache_untouched(self, clock):
        """Test failed fetches are not stored."""
        cache = CatalogCache(clock=clock)

        async def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch(fail)
        assert cache.fetched_at is None
        assert cache.get() is None


class TestAssetCatalog:
    """Tests for AssetCatalog."""

    @pytest.mark.asyncio
    async def test_fetch_and_cache(self, clock):
        """Test a second call within five minutes makes no request."""
        handler = CountingHandler()
        catalog = make_catalog(handler, clock)

        first = await catalog.list_assets()
        clock.advance(60)
        second = await catalog.list_assets()

        assert handler.calls == 1
        assert first == second
        assert [a.symbol for a in first] == ["BTC", "USDC", "NEAR", "AAVE"]

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self, clock):
        """Test the cache expires after five minutes."""
        handler = CountingHandler()
        catalog = make_catalog(handler, clock)

        await catalog.list_assets()
        clock.advance(301)
        await catalog.list_assets()

        assert handler.calls == 2

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self, clock):
        """Test a server error yields the static list."""
        handler = CountingHandler(status_code=503, response={"error": "down"})
        catalog = make_catalog(handler, clock)

        assets = await catalog.list_assets()

        assert assets == list(FALLBACK_ASSETS)

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self, clock):
        """Test a transport failure yields the static list."""
        handler = CountingHandler(exc=httpx.ConnectError("unreachable"))
        catalog = make_catalog(handler, clock)

        assert await catalog.list_assets() == list(FALLBACK_ASSETS)

    @pytest.mark.asyncio
    async def test_empty_list_falls_back(self, clock):
        """Test an empty token list is treated as a failure."""
        handler = CountingHandler(response={"items": []})
        catalog = make_catalog(handler, clock)

        assert await catalog.list_assets() == list(FALLBACK_ASSETS)

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, clock):
        """Test the next call retries after a failure."""
        handler = CountingHandler(status_code=500, response={})
        catalog = make_catalog(handler, clock)

        await catalog.list_assets()
        await catalog.list_assets()

        assert handler.calls == 2

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, clock):
        """Test a slow upstream is abandoned after the timeout."""

        class SlowTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                await asyncio.sleep(5)
                return httpx.Response(200, json=TOKEN_LIST)

        catalog = AssetCatalog(
            tokens_url=TOKENS_URL,
            timeout_seconds=0.05,
            cache=CatalogCache(clock=clock),
            transport=SlowTransport(),
        )

        assert await catalog.list_assets() == list(FALLBACK_ASSETS)

    @pytest.mark.asyncio
    async def test_offline_makes_no_request(self, clock):
        """Test mock mode serves the static list."""
        handler = CountingHandler()
        catalog = make_catalog(handler, clock, offline=True)

        assert await catalog.list_assets() == list(FALLBACK_ASSETS)
        assert handler.calls == 0

    @pytest.mark.asyncio
    async def test_api_key_sent(self, clock):
        """Test the bearer token is attached when configured."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json=TOKEN_LIST)

        catalog = make_catalog(handler, clock, api_key="secret")
        await catalog.list_assets()

        assert seen["auth"] == "Bearer secret"
