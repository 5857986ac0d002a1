"""Address classification for the chains the swap engine deals with.

Address formats overlap (legacy Bitcoin and Solana are both base58), so the
rules below are tried strictly in order and the first match wins:

1. Zcash (home chain): unified, sapling and transparent prefixes
2. Bitcoin: bech32 and legacy base58 prefixes
3. EVM: 0x-prefixed, exactly 40 hex digits
4. Solana: any remaining base58 string of 32-44 characters
5. NEAR: named accounts (.near) or 64-hex implicit accounts
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class ChainTag(str, Enum):
    """Chain an address belongs to."""

    ZCASH = "zcash"
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    SOLANA = "solana"
    NEAR = "near"


BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
EVM_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
NEAR_IMPLICIT_RE = re.compile(r"^[a-f0-9]{64}$")
ZEC_TRANSPARENT_MAINNET_RE = re.compile(r"^t[13][1-9A-HJ-NP-Za-km-z]{33}$")

ZCASH_PREFIXES = ("u1", "utest1", "zs", "ztestsapling", "t1", "t3", "tm", "t2")
BITCOIN_PREFIXES = ("bc1", "1", "3")


@dataclass(frozen=True)
class AddressRule:
    """One classification rule."""

    chain: ChainTag
    matches: Callable[[str], bool]
    description: str


# Order is load-bearing: looser rules must come after stricter ones.
ADDRESS_RULES: list[AddressRule] = [
    AddressRule(
        ChainTag.ZCASH,
        lambda a: a.startswith(ZCASH_PREFIXES),
        "unified / sapling / transparent prefixes",
    ),
    AddressRule(
        ChainTag.BITCOIN,
        lambda a: a.startswith(BITCOIN_PREFIXES),
        "bech32 or legacy P2PKH/P2SH",
    ),
    AddressRule(
        ChainTag.ETHEREUM,
        lambda a: bool(EVM_RE.match(a)),
        "0x + 40 hex",
    ),
    AddressRule(
        ChainTag.SOLANA,
        lambda a: bool(BASE58_RE.match(a)),
        "base58, 32-44 chars",
    ),
    AddressRule(
        ChainTag.NEAR,
        lambda a: a.endswith(".near") or bool(NEAR_IMPLICIT_RE.match(a)),
        "named or implicit account",
    ),
]

# Catalog chain codes served by each address family
CHAIN_CODES: dict[ChainTag, frozenset[str]] = {
    ChainTag.ZCASH: frozenset({"ZEC"}),
    ChainTag.BITCOIN: frozenset({"BTC"}),
    ChainTag.ETHEREUM: frozenset({"ETH", "ARB", "BASE", "BSC", "MATIC", "AVAX", "OP", "AURORA", "TURBO"}),
    ChainTag.SOLANA: frozenset({"SOL"}),
    ChainTag.NEAR: frozenset({"NEAR"}),
}


def classify_address(address: str) -> Optional[ChainTag]:
    """Detect which chain an address belongs to.

    Args:
        address: Address string as entered by the user

    Returns:
        ChainTag of the first matching rule, or None
    """
    if not address:
        return None
    address = address.strip()
    for rule in ADDRESS_RULES:
        if rule.matches(address):
            return rule.chain
    return None


def is_zcash_address(address: str) -> bool:
    """Check if an address is a Zcash address."""
    return classify_address(address) == ChainTag.ZCASH


def is_transparent_mainnet_address(address: str) -> bool:
    """Mainnet transparent Zcash address (t1/t3, 35 chars)."""
    return bool(address) and bool(ZEC_TRANSPARENT_MAINNET_RE.match(address.strip()))


def is_evm_address(address: str) -> bool:
    return bool(address) and bool(EVM_RE.match(address.strip()))


def address_matches_chain(address: str, chain_code: str) -> bool:
    """Check whether an address plausibly belongs to a catalog chain code."""
    tag = classify_address(address)
    if tag is None:
        return False
    return chain_code.upper() in CHAIN_CODES.get(tag, frozenset())
