"""Static asset data used when the token list cannot be fetched."""

from intentswap.models import Asset

HOME_ASSET = Asset(
    chain="ZEC",
    symbol="ZEC",
    identifier="ZEC.ZEC",
    name="Zcash",
    decimals=8,
    provider_asset_id="nep141:zec.omft.near",
)

# Hand-curated list with NEAR Intents asset ids
FALLBACK_ASSETS: tuple[Asset, ...] = (
    Asset("BTC", "BTC", "BTC.BTC", "Bitcoin", 8, "nep141:btc.omft.near"),
    Asset("ETH", "ETH", "ETH.ETH", "Ethereum", 18, "nep141:eth.omft.near"),
    Asset("SOL", "SOL", "SOL.SOL", "Solana", 9, "nep141:sol.omft.near"),
    Asset("NEAR", "NEAR", "NEAR.NEAR", "NEAR Protocol", 24, "nep141:wrap.near"),
    Asset(
        "ETH",
        "USDC",
        "ETH.USDC-0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        "USD Coin",
        6,
        "nep141:eth-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.omft.near",
    ),
    Asset(
        "ETH",
        "USDT",
        "ETH.USDT-0xdAC17F958D2ee523a2206206994597C13D831ec7",
        "Tether",
        6,
        "nep141:eth-0xdac17f958d2ee523a2206206994597c13d831ec7.omft.near",
    ),
    Asset("DOGE", "DOGE", "DOGE.DOGE", "Dogecoin", 8, "nep141:doge.omft.near"),
    Asset("LTC", "LTC", "LTC.LTC", "Litecoin", 8, "nep141:ltc.omft.near"),
    Asset("ARB", "ETH", "ARB.ETH", "Arbitrum ETH", 18, "nep141:arb.omft.near"),
    Asset("BASE", "ETH", "BASE.ETH", "Base ETH", 18, "nep141:base.omft.near"),
)

# Symbols listed first, in this order; the rest alphabetically
POPULAR_SYMBOLS: tuple[str, ...] = (
    "BTC", "ETH", "SOL", "USDC", "USDT", "NEAR", "ARB", "MATIC", "AVAX", "DOT",
)

# Token list blockchain names -> catalog chain codes
BLOCKCHAIN_CHAINS: dict[str, str] = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "eth": "ETH",
    "solana": "SOL",
    "sol": "SOL",
    "near": "NEAR",
    "arbitrum": "ARB",
    "arb": "ARB",
    "base": "BASE",
    "polygon": "MATIC",
    "pol": "MATIC",
    "bsc": "BSC",
    "avalanche": "AVAX",
    "avax": "AVAX",
    "optimism": "OP",
    "op": "OP",
    "sui": "SUI",
    "dogecoin": "DOGE",
    "doge": "DOGE",
    "litecoin": "LTC",
    "ltc": "LTC",
    "xrp": "XRP",
    "zcash": "ZEC",
    "zec": "ZEC",
    "aurora": "AURORA",
    "turbochain": "TURBO",
}


def chain_for_blockchain(blockchain: str) -> str:
    """Map a token list blockchain name to a chain code."""
    return BLOCKCHAIN_CHAINS.get(blockchain.lower(), blockchain.upper())


def popularity_key(asset: Asset) -> tuple[int, str]:
    """Sort key: popular symbols first, then alphabetical by symbol."""
    try:
        rank = POPULAR_SYMBOLS.index(asset.symbol)
    except ValueError:
        rank = len(POPULAR_SYMBOLS)
    return rank, asset.symbol
