"""Tests for address classification."""

import pytest

from intentswap.chains import (
    ChainTag,
    address_matches_chain,
    classify_address,
    is_evm_address,
    is_transparent_mainnet_address,
    is_zcash_address,
)

ZEC_T1 = "t1VpYecBW4UudbGcy4ufh61eWxQCoFaUrPs"
EVM = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
SOLANA = "7EcDhSYGxXyscszYEp35KHN8vvw3svAuLKTzXwCFLtV"


class TestClassifyAddress:
    """Tests for classify_address."""

    @pytest.mark.parametrize(
        "address,expected",
        [
            (ZEC_T1, ChainTag.ZCASH),
            ("t3Vz22vK5z2LcKEdg16Yv4FFneEL1zg9ojd", ChainTag.ZCASH),
            ("u1qw2e3r4t5y6u7i8o9p0", ChainTag.ZCASH),
            ("zs1z7rejlpsa98s2rrrfkwmaxu53e4ue0ulcrw0h4x5g8jl04tak0d3mm47vdtahatqrlkngh9sly", ChainTag.ZCASH),
            ("tmEZhbWHTpdKMw5it8YDspUXSMGQyFwovpU", ChainTag.ZCASH),
            ("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq", ChainTag.BITCOIN),
            ("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa", ChainTag.BITCOIN),
            ("3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy", ChainTag.BITCOIN),
            (EVM, ChainTag.ETHEREUM),
            (SOLANA, ChainTag.SOLANA),
            ("alice.near", ChainTag.NEAR),
            ("a" * 64, ChainTag.NEAR),
        ],
    )
    def test_supported_formats(self, address, expected):
        """Test each supported address family."""
        assert classify_address(address) == expected

    @pytest.mark.parametrize(
        "address,expected",
        [
            # base58 strings starting with 1 or 3 are valid Solana lengths too
            ("1" + "A" * 40, ChainTag.BITCOIN),
            ("3" + "B" * 43, ChainTag.BITCOIN),
            # t1 base58 string of Solana length still belongs to Zcash
            ("t1" + "C" * 40, ChainTag.ZCASH),
            # generic base58 without a specific prefix falls through to Solana
            ("2" + "D" * 40, ChainTag.SOLANA),
        ],
    )
    def test_precedence_order(self, address, expected):
        """Test overlapping formats resolve to the earlier rule."""
        assert classify_address(address) == expected

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "not an address",
            "0x123",  # too short for EVM
            "0x" + "g" * 40,  # not hex
            "abc",
        ],
    )
    def test_unrecognized(self, address):
        """Test unmatched input returns None."""
        assert classify_address(address) is None

    def test_surrounding_whitespace_ignored(self):
        """Test whitespace is stripped before matching."""
        assert classify_address(f"  {EVM}\n") == ChainTag.ETHEREUM


class TestAddressHelpers:
    """Tests for address predicates."""

    def test_transparent_mainnet(self):
        """Test mainnet transparent detection."""
        assert is_transparent_mainnet_address(ZEC_T1) is True
        assert is_transparent_mainnet_address("tmEZhbWHTpdKMw5it8YDspUXSMGQyFwovpU") is False
        assert is_transparent_mainnet_address("u1qw2e3r4t5y6u7i8o9p0") is False
        assert is_transparent_mainnet_address("") is False

    def test_zcash(self):
        """Test any Zcash family counts."""
        assert is_zcash_address(ZEC_T1) is True
        assert is_zcash_address("u1qw2e3r4t5y6u7i8o9p0") is True
        assert is_zcash_address(EVM) is False

    def test_evm(self):
        """Test EVM detection."""
        assert is_evm_address(EVM) is True
        assert is_evm_address(EVM.lower()) is True
        assert is_evm_address(SOLANA) is False

    @pytest.mark.parametrize(
        "address,chain_code,expected",
        [
            (EVM, "ETH", True),
            (EVM, "arb", True),
            (EVM, "BASE", True),
            (EVM, "BTC", False),
            ("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq", "BTC", True),
            (ZEC_T1, "ZEC", True),
            (SOLANA, "SOL", True),
            ("alice.near", "NEAR", True),
            ("nonsense", "ETH", False),
        ],
    )
    def test_address_matches_chain(self, address, chain_code, expected):
        """Test chain code compatibility."""
        assert address_matches_chain(address, chain_code) is expected
