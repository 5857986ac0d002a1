"""Asset catalog: the set of assets that can be swapped against ZEC.

The token list is fetched with a short timeout and cached for a fixed
window. Any failure falls back to a static list, so callers always get a
usable set of assets.
"""

import asyncio
import logging
import time
from functools import lru_cache
from typing import Awaitable, Callable, Optional

import httpx

from intentswap.assets.fallback import (
    FALLBACK_ASSETS,
    HOME_ASSET,
    chain_for_blockchain,
    popularity_key,
)
from intentswap.models import Asset

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class CatalogCache:
    """Single cached asset list with bounded staleness.

    Concurrent misses may both fetch; the last write wins. Entries are
    immutable so only freshness is at stake.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._assets: Optional[tuple[Asset, ...]] = None
        self._fetched_at: Optional[float] = None

    @property
    def fetched_at(self) -> Optional[float]:
        return self._fetched_at

    def get(self, now: Optional[float] = None) -> Optional[list[Asset]]:
        """Return cached assets if still fresh."""
        if self._assets is None or self._fetched_at is None:
            return None
        now = self._clock() if now is None else now
        if now - self._fetched_at >= self.ttl_seconds:
            return None
        return list(self._assets)

    def store(self, assets: list[Asset], now: Optional[float] = None) -> None:
        self._assets = tuple(assets)
        self._fetched_at = self._clock() if now is None else now

    def clear(self) -> None:
        self._assets = None
        self._fetched_at = None

    async def get_or_fetch(
        self,
        fetch: Callable[[], Awaitable[list[Asset]]],
        now: Optional[float] = None,
    ) -> list[Asset]:
        """Return the cached list, fetching and storing it on a miss.

        Errors raised by ``fetch`` propagate and leave the cache untouched.
        """
        cached = self.get(now)
        if cached is not None:
            logger.debug(f"Returning {len(cached)} cached assets")
            return cached

        assets = await fetch()
        self.store(assets, now)
        return list(assets)


@lru_cache
def get_catalog_cache() -> CatalogCache:
    """Process-wide catalog cache."""
    return CatalogCache()


def parse_token(token: dict) -> Optional[Asset]:
    """Build an Asset from a token list entry, or None if unusable."""
    symbol = token.get("symbol")
    blockchain = token.get("blockchain")
    decimals = token.get("decimals")
    if not symbol or not blockchain or decimals is None:
        return None

    try:
        decimals = int(decimals)
    except (TypeError, ValueError):
        return None

    chain = chain_for_blockchain(str(blockchain))
    identifier = f"{chain}.{symbol}"
    contract = token.get("contract_address")
    if contract and contract != "native":
        identifier = f"{chain}.{symbol}-{contract}"

    return Asset(
        chain=chain,
        symbol=symbol,
        identifier=identifier,
        name=token.get("name") or symbol,
        decimals=decimals,
        provider_asset_id=token.get("defuse_asset_id"),
    )


def parse_token_list(data: dict) -> list[Asset]:
    """Convert a token list response to sorted assets, excluding ZEC."""
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise ValueError("Token list response has no items")

    assets = []
    for token in items:
        if not isinstance(token, dict):
            continue
        asset = parse_token(token)
        if asset is None:
            logger.debug(f"Skipping malformed token entry: {token}")
            continue
        if asset.symbol.upper() == HOME_ASSET.symbol:
            continue
        assets.append(asset)

    if not assets:
        raise ValueError("Token list contained no usable assets")

    assets.sort(key=popularity_key)
    return assets


class AssetCatalog:
    """Lists assets eligible to swap against the home asset."""

    def __init__(
        self,
        tokens_url: str,
        api_key: str = "",
        timeout_seconds: float = 3.0,
        cache: Optional[CatalogCache] = None,
        offline: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize catalog.

        Args:
            tokens_url: Token list endpoint
            api_key: Optional bearer token
            timeout_seconds: Bound on the whole fetch
            cache: Cache slot (defaults to the process-wide one)
            offline: Serve the static list only (mock mode)
            transport: httpx transport override
        """
        self.tokens_url = tokens_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.cache = cache if cache is not None else get_catalog_cache()
        self.offline = offline
        self._transport = transport

    async def list_assets(self) -> list[Asset]:
        """Get swappable assets. Never raises."""
        if self.offline:
            logger.debug(f"Offline catalog: returning {len(FALLBACK_ASSETS)} fallback assets")
            return list(FALLBACK_ASSETS)

        try:
            return await self.cache.get_or_fetch(self._fetch_with_timeout)
        except Exception as e:
            logger.warning(
                f"Token list unavailable ({type(e).__name__}: {e}), using fallback assets"
            )
            return list(FALLBACK_ASSETS)

    async def _fetch_with_timeout(self) -> list[Asset]:
        return await asyncio.wait_for(self._fetch(), timeout=self.timeout_seconds)

    async def _fetch(self) -> list[Asset]:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport
        ) as client:
            response = await client.get(self.tokens_url, headers=headers)

        response.raise_for_status()
        assets = parse_token_list(response.json())
        logger.info(f"Loaded {len(assets)} assets from token list")
        return assets
