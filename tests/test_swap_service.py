"""End-to-end tests for the swap service in mock mode."""

from decimal import Decimal

import pytest

from intentswap.assets.catalog import AssetCatalog, CatalogCache
from intentswap.chains import is_transparent_mainnet_address
from intentswap.errors import ConfigurationError, StaleQuoteError
from intentswap.models import ExecutionParams, SwapDirection, SwapStatus
from intentswap.routing.dry_run import SimulatedIntentsProvider, SimulationStore
from intentswap.services.swap_service import SwapService
from intentswap.swap_engine.executor import IntentExecutor
from intentswap.swap_engine.quotes import QuoteEngine
from intentswap.swap_engine.tracker import StatusTracker

ZEC_T1 = "t1VpYecBW4UudbGcy4ufh61eWxQCoFaUrPs"
BTC_REFUND = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"
EVM = "0x742d35cc6634c0532925a3b844bc454e4438f44e"


def make_service(clock, session_factory=None) -> SwapService:
    providers = [SimulatedIntentsProvider(store=SimulationStore(clock=clock))]
    return SwapService(
        catalog=AssetCatalog("https://tokens.invalid", cache=CatalogCache(), offline=True),
        quote_engine=QuoteEngine(providers),
        executor=IntentExecutor(providers, clock=clock.as_datetime),
        tracker=StatusTracker(providers),
        session_factory=session_factory,
        clock=clock.as_datetime,
    )


class TestAssets:
    """Tests for asset lookup."""

    @pytest.mark.asyncio
    async def test_list_assets_offline(self, clock):
        service = make_service(clock)

        assets = await service.list_assets()

        assert "BTC.BTC" in [a.identifier for a in assets]
        assert "ZEC.ZEC" not in [a.identifier for a in assets]

    @pytest.mark.asyncio
    async def test_find_asset(self, clock, btc):
        service = make_service(clock)

        assert await service.find_asset("btc.btc") == btc
        assert await service.find_asset("BTC") == btc

    @pytest.mark.asyncio
    async def test_find_asset_ambiguous_or_unknown(self, clock):
        service = make_service(clock)

        with pytest.raises(ConfigurationError):
            await service.find_asset("ETH")  # ETH.ETH, ARB.ETH, BASE.ETH
        with pytest.raises(ConfigurationError):
            await service.find_asset("NOPE")


class TestMockLifecycle:
    """Quote, execute and track a swap against the simulators."""

    @pytest.mark.asyncio
    async def test_inbound_quote(self, clock, btc):
        """Test 1.0 BTC at 42000 quotes about 1680 ZEC."""
        service = make_service(clock)

        quotes = await service.get_inbound_quotes(btc, "1.0", ZEC_T1, BTC_REFUND)

        assert len(quotes) == 1
        assert Decimal(quotes[0].to_amount) == pytest.approx(Decimal("1680"))
        assert quotes[0].to_amount == "1680.00000000"
        assert quotes[0].direction == SwapDirection.INBOUND

    @pytest.mark.asyncio
    async def test_inbound_requires_refund(self, clock, btc):
        service = make_service(clock)

        with pytest.raises(ConfigurationError):
            await service.get_inbound_quotes(btc, "1.0", ZEC_T1, None)

    @pytest.mark.asyncio
    async def test_outbound_quote(self, clock, eth):
        """Test ZEC -> ETH uses the home asset as the sell side."""
        service = make_service(clock)

        quotes = await service.get_outbound_quotes(eth, "10", EVM, home_refund_address=ZEC_T1)

        # 10 * 25 / 2200
        assert quotes[0].to_amount == "0.11363636"
        assert quotes[0].from_asset.identifier == "ZEC.ZEC"

    @pytest.mark.asyncio
    async def test_full_progression(self, clock, btc):
        """Test accepted swaps progress monotonically to completed."""
        service = make_service(clock)
        quote = (await service.get_inbound_quotes(btc, "1.0", ZEC_T1, BTC_REFUND))[0]

        swap = await service.accept_quote(
            quote, ExecutionParams(ZEC_T1, source_chain_refund_address=BTC_REFUND)
        )

        assert swap.status == SwapStatus.AWAITING_DEPOSIT
        assert is_transparent_mainnet_address(swap.deposit_address)
        assert swap.refund_address == BTC_REFUND
        assert swap.recipient_address == ZEC_T1

        await service.refresh(swap)
        assert swap.status == SwapStatus.AWAITING_DEPOSIT

        seen = [swap.status]
        for _ in range(12):
            clock.advance(5)
            await service.refresh(swap)
            seen.append(swap.status)

        ranks = [status.rank for status in seen]
        assert ranks == sorted(ranks)
        assert seen[-1] == SwapStatus.COMPLETED
        for status in (
            SwapStatus.DEPOSIT_DETECTED,
            SwapStatus.CONFIRMING,
            SwapStatus.SWAPPING,
            SwapStatus.COMPLETING,
        ):
            assert status in seen
        assert swap.completed_at is not None
        assert swap.settlement_tx_ref.startswith("mock-output-tx-")

    @pytest.mark.asyncio
    async def test_refresh_terminal_is_noop(self, clock, btc):
        service = make_service(clock)
        quote = (await service.get_inbound_quotes(btc, "1.0", ZEC_T1, BTC_REFUND))[0]
        swap = await service.accept_quote(quote, ExecutionParams(ZEC_T1))
        clock.advance(100)
        await service.refresh(swap)
        completed_at = swap.completed_at

        clock.advance(100)
        await service.refresh(swap)

        assert swap.status == SwapStatus.COMPLETED
        assert swap.completed_at == completed_at

    @pytest.mark.asyncio
    async def test_stale_quote(self, clock, btc):
        """Test quotes cannot be accepted after their window."""
        service = make_service(clock)
        quote = (await service.get_inbound_quotes(btc, "1.0", ZEC_T1, BTC_REFUND))[0]

        clock.advance(61)

        with pytest.raises(StaleQuoteError):
            await service.accept_quote(quote, ExecutionParams(ZEC_T1))
        assert await service.history() == []


class TestHistory:
    """Tests for recorded swaps."""

    @pytest.mark.asyncio
    async def test_in_memory_history(self, clock, btc):
        service = make_service(clock)
        quote = (await service.get_inbound_quotes(btc, "1.0", ZEC_T1, BTC_REFUND))[0]
        swap = await service.accept_quote(quote, ExecutionParams(ZEC_T1))

        assert await service.get_swap(swap.id) is swap
        assert [s.id for s in await service.active_swaps()] == [swap.id]

    @pytest.mark.asyncio
    async def test_persisted_history(self, clock, btc, session_factory):
        """Test accepted swaps and status changes reach the database."""
        service = make_service(clock, session_factory=session_factory)
        quote = (await service.get_inbound_quotes(btc, "0.5", ZEC_T1, BTC_REFUND))[0]
        swap = await service.accept_quote(quote, ExecutionParams(ZEC_T1))

        stored = await service.get_swap(swap.id)
        assert stored.status == SwapStatus.AWAITING_DEPOSIT
        assert stored.deposit_address == swap.deposit_address
        assert [s.id for s in await service.active_swaps()] == [swap.id]

        clock.advance(60)
        await service.refresh(swap)

        stored = await service.get_swap(swap.id)
        assert stored.status == SwapStatus.COMPLETED
        assert stored.completed_at is not None
        assert await service.active_swaps() == []
        assert [s.id for s in await service.history()] == [swap.id]

    @pytest.mark.asyncio
    async def test_resume_from_database(self, clock, btc, session_factory):
        """Test a stored swap can be refreshed by a new service instance."""
        first = make_service(clock, session_factory=session_factory)
        quote = (await first.get_inbound_quotes(btc, "0.5", ZEC_T1, BTC_REFUND))[0]
        swap = await first.accept_quote(quote, ExecutionParams(ZEC_T1))

        second = make_service(clock, session_factory=session_factory)
        clock.advance(25)
        stored = await second.get_swap(swap.id)
        await second.refresh(stored)

        assert stored.status == SwapStatus.SWAPPING
