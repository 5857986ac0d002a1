"""Swap service.

Composes the asset catalog, quote engine, executor and status tracker into
the operations a wallet front-end needs, and records executed swaps.

This service does NOT hold keys, sign or broadcast anything. Funding the
returned deposit address is the wallet's job.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intentswap.assets.catalog import AssetCatalog
from intentswap.config import Settings, get_settings
from intentswap.errors import ConfigurationError
from intentswap.ledger.database import session_scope
from intentswap.ledger.repository import SwapRepository
from intentswap.models import (
    ActiveSwap,
    Asset,
    ExecutionParams,
    RefundContext,
    SwapDirection,
    SwapQuote,
    SwapStatus,
    utcnow,
)
from intentswap.routing.factory import create_catalog, create_provider
from intentswap.swap_engine.executor import IntentExecutor
from intentswap.swap_engine.quotes import QuoteEngine
from intentswap.swap_engine.tracker import StatusTracker

logger = logging.getLogger(__name__)


class SwapService:
    """Quote, accept and follow swaps against the home asset."""

    def __init__(
        self,
        catalog: AssetCatalog,
        quote_engine: QuoteEngine,
        executor: IntentExecutor,
        tracker: StatusTracker,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.quote_engine = quote_engine
        self.executor = executor
        self.tracker = tracker
        self.session_factory = session_factory
        self._clock = clock
        # used when no database is configured
        self._swaps: dict[str, ActiveSwap] = {}

    @property
    def persistent(self) -> bool:
        return self.session_factory is not None

    # Assets

    async def list_assets(self) -> list[Asset]:
        return await self.catalog.list_assets()

    async def find_asset(self, query: str) -> Asset:
        """Find an asset by composite identifier, or by symbol if unambiguous."""
        query = query.strip()
        assets = await self.list_assets()

        for asset in assets:
            if asset.identifier.upper() == query.upper():
                return asset

        by_symbol = [asset for asset in assets if asset.symbol.upper() == query.upper()]
        if len(by_symbol) == 1:
            return by_symbol[0]
        if by_symbol:
            choices = ", ".join(asset.identifier for asset in by_symbol)
            raise ConfigurationError(f"Ambiguous asset {query!r}, use one of: {choices}")
        raise ConfigurationError(f"Unknown asset: {query!r}")

    # Quotes

    async def get_inbound_quotes(
        self,
        asset: Asset,
        amount: str,
        recipient: str,
        source_chain_refund_address: Optional[str],
    ) -> list[SwapQuote]:
        """Quotes for swapping ``amount`` of ``asset`` into the home asset."""
        return await self.quote_engine.get_quotes(
            SwapDirection.INBOUND,
            asset,
            amount,
            recipient,
            RefundContext(source_chain_refund_address=source_chain_refund_address),
        )

    async def get_outbound_quotes(
        self,
        asset: Asset,
        amount: str,
        recipient: str,
        home_refund_address: Optional[str] = None,
    ) -> list[SwapQuote]:
        """Quotes for paying ``recipient`` in ``asset`` from ``amount`` of the home asset."""
        return await self.quote_engine.get_quotes(
            SwapDirection.OUTBOUND,
            asset,
            amount,
            recipient,
            RefundContext(home_refund_address=home_refund_address),
        )

    # Execution

    async def accept_quote(self, quote: SwapQuote, params: ExecutionParams) -> ActiveSwap:
        """
        Execute a quote and start tracking the swap.

        Returns:
            ActiveSwap awaiting its deposit
        """
        result = await self.executor.execute(quote, params)

        if quote.direction == SwapDirection.INBOUND:
            refund_address = params.source_chain_refund_address
        else:
            refund_address = params.home_refund_address

        swap = ActiveSwap(
            direction=quote.direction,
            status=SwapStatus.AWAITING_DEPOSIT,
            from_asset=quote.from_asset,
            from_amount=quote.from_amount,
            to_asset=quote.to_asset,
            to_amount=quote.to_amount,
            quote_id=quote.quote_id,
            provider=quote.provider,
            expires_at=quote.expires_at,
            deposit_address=result.deposit_address,
            refund_address=refund_address,
            recipient_address=params.destination_address,
            intent_id=result.intent_id,
            created_at=self._clock(),
        )
        await self._save(swap)
        logger.info(f"Swap {swap.id} awaiting deposit to {swap.deposit_address}")
        return swap

    # Tracking

    async def refresh(self, swap: ActiveSwap) -> ActiveSwap:
        """Poll the provider once and merge the result into ``swap``."""
        if swap.is_terminal:
            return swap

        snapshot = await self.tracker.poll(swap.provider, swap.intent_id, swap.deposit_address)
        if swap.apply_status(snapshot, now=self._clock()):
            await self._save(swap)
        return swap

    async def get_swap(self, swap_id: str) -> Optional[ActiveSwap]:
        if not self.persistent:
            return self._swaps.get(swap_id)
        async with session_scope(self.session_factory) as session:
            return await SwapRepository(session).get_swap(swap_id)

    async def history(self, limit: int = 50) -> list[ActiveSwap]:
        """All recorded swaps, newest first."""
        if not self.persistent:
            swaps = sorted(self._swaps.values(), key=lambda s: s.created_at, reverse=True)
            return swaps[:limit]
        async with session_scope(self.session_factory) as session:
            return await SwapRepository(session).get_swap_history(limit=limit)

    async def active_swaps(self) -> list[ActiveSwap]:
        """Swaps still in progress, newest first."""
        if not self.persistent:
            swaps = [s for s in self._swaps.values() if not s.is_terminal]
            return sorted(swaps, key=lambda s: s.created_at, reverse=True)
        async with session_scope(self.session_factory) as session:
            return await SwapRepository(session).get_active_swaps()

    async def _save(self, swap: ActiveSwap) -> None:
        if not self.persistent:
            self._swaps[swap.id] = swap
            return
        async with session_scope(self.session_factory) as session:
            await SwapRepository(session).save_swap(swap)


def create_swap_service(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SwapService:
    """Build a service for the configured mode (mock or live)."""
    settings = settings or get_settings()
    provider = create_provider(settings, transport=transport)
    providers = [provider]

    return SwapService(
        catalog=create_catalog(settings, transport=transport),
        quote_engine=QuoteEngine(providers),
        executor=IntentExecutor(providers),
        tracker=StatusTracker(providers),
        session_factory=session_factory,
    )
