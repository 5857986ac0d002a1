"""Mapping from composite identifiers to NEAR Intents asset ids."""

from typing import Optional

# Provider-native ids carry one of these namespace prefixes
PROVIDER_ID_PREFIXES = ("nep141:", "nep245:")

NEAR_INTENTS_ASSET_IDS: dict[str, str] = {
    # Native coins
    "BTC.BTC": "nep141:btc.omft.near",
    "ETH.ETH": "nep141:eth.omft.near",
    "SOL.SOL": "nep141:sol.omft.near",
    "NEAR.NEAR": "nep141:wrap.near",
    "ZEC.ZEC": "nep141:zec.omft.near",
    "DOGE.DOGE": "nep141:doge.omft.near",
    "LTC.LTC": "nep141:ltc.omft.near",
    "AVAX.AVAX": "nep245:v2_1.omni.hot.tg:43114_11111111111111111111",
    "ARB.ARB": "nep141:arb-0x912ce59144191c1204e64559fe8253a0e49e6548.omft.near",
    # Ethereum stablecoins
    "ETH.USDC-0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48": (
        "nep141:eth-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.omft.near"
    ),
    "ETH.USDT-0xdAC17F958D2ee523a2206206994597C13D831ec7": (
        "nep141:eth-0xdac17f958d2ee523a2206206994597c13d831ec7.omft.near"
    ),
    # NEAR native USDC
    "NEAR.USDC": "nep141:17208628f84f5d6ad33f0da3bbbeb27ffcb398eac501a31bd6ad2011e36133a1",
    # Solana
    "SOL.USDC": "nep141:sol-5ce3bf3a31af18be40ba30f721101b4341690186.omft.near",
    # Base
    "BASE.ETH": "nep141:base.omft.near",
    "BASE.USDC": "nep141:base-0x833589fcd6edb6e08f4c7c32d4f71b54bda02913.omft.near",
    # Arbitrum
    "ARB.ETH": "nep141:arb.omft.near",
    "ARB.USDC": "nep141:arb-0xaf88d065e77c8cc2239327c5edb3a432268e5831.omft.near",
}


def is_provider_asset_id(value: str) -> bool:
    """Check if a string is already a provider-native asset id."""
    return value.startswith(PROVIDER_ID_PREFIXES)


class AssetIdentityResolver:
    """Resolves composite identifiers to provider asset ids.

    Never fails: unknown identifiers come back unchanged and the provider
    reports the invalid id itself.
    """

    def __init__(self, table: Optional[dict[str, str]] = None):
        self._table = dict(NEAR_INTENTS_ASSET_IDS if table is None else table)
        # contract addresses are case-insensitive
        self._folded = {key.upper(): value for key, value in self._table.items()}

    def resolve(self, identifier: str, known_provider_id: Optional[str] = None) -> str:
        """Resolve an identifier to the provider's asset id.

        Args:
            identifier: Composite identifier such as "BTC.BTC"
            known_provider_id: Id captured at catalog fetch time, if any

        Returns:
            Provider asset id, or the identifier unchanged
        """
        if known_provider_id:
            return known_provider_id

        if is_provider_asset_id(identifier):
            return identifier

        if identifier in self._table:
            return self._table[identifier]

        return self._folded.get(identifier.upper(), identifier)


_default_resolver = AssetIdentityResolver()


def resolve_provider_asset_id(identifier: str, known_provider_id: Optional[str] = None) -> str:
    """Resolve using the built-in NEAR Intents table."""
    return _default_resolver.resolve(identifier, known_provider_id)
