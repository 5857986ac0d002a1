"""Simulated intent provider for mock mode.

Quotes come from a fixed rate table; swap progress is a pure function of
the time elapsed since the intent was created.
"""

import asyncio
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Callable, Optional

from intentswap.amounts import AMOUNT_PRECISION, parse_positive_amount
from intentswap.errors import ConfigurationError, ProviderError
from intentswap.models import (
    Asset,
    ExecutionParams,
    ExecutionResult,
    QuoteRequest,
    SimulatedPayload,
    SwapQuote,
)
from intentswap.routing.base import IntentProvider, ProviderStatus

logger = logging.getLogger(__name__)

# Simulated USD prices
SIMULATED_RATES: dict[str, Decimal] = {
    "BTC.BTC": Decimal("42000"),
    "ETH.ETH": Decimal("2200"),
    "SOL.SOL": Decimal("100"),
    "ZEC.ZEC": Decimal("25"),
    "USDC": Decimal("1"),
    "USDT": Decimal("1"),
}
DEFAULT_RATE = Decimal("100")

MOCK_DEPOSIT_ADDRESS = "t1MockDepositAddress123456789abcdef"
MOCK_INTENT_RE = re.compile(r"^mock-intent-(\d+)-[0-9a-f]+$")

# (seconds elapsed upper bound, simulated status); COMPLETED afterwards
STATUS_SCHEDULE: tuple[tuple[float, str], ...] = (
    (10, "PENDING"),
    (15, "DEPOSIT_DETECTED"),
    (20, "CONFIRMING"),
    (35, "SWAPPING"),
    (45, "COMPLETING"),
)
FINAL_STATUS = "COMPLETED"


def simulated_status(elapsed_seconds: float) -> str:
    """Simulated provider status after ``elapsed_seconds``."""
    for upper_bound, status in STATUS_SCHEDULE:
        if elapsed_seconds < upper_bound:
            return status
    return FINAL_STATUS


def started_from_intent_id(intent_id: str) -> Optional[float]:
    """Start time encoded in a simulated intent id, if any."""
    match = MOCK_INTENT_RE.match(intent_id)
    if match is None:
        return None
    return int(match.group(1)) / 1000


class SimulationStore:
    """Start times of simulated intents."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._started: dict[str, float] = {}

    def now(self) -> float:
        return self._clock()

    def start(self, intent_id: str, started_at: Optional[float] = None) -> None:
        self._started[intent_id] = self._clock() if started_at is None else started_at

    def started_at(self, intent_id: str) -> Optional[float]:
        return self._started.get(intent_id)

    def clear(self) -> None:
        self._started.clear()


class SimulatedIntentsProvider(IntentProvider):
    """
    Deterministic stand-in for a live intents provider.

    Satisfies the same contracts as the live provider without network
    access.
    """

    def __init__(
        self,
        store: Optional[SimulationStore] = None,
        rates: Optional[dict[str, Decimal]] = None,
        fee_fraction: float = 0.003,
        quote_ttl_seconds: int = 60,
        estimated_seconds: int = 120,
        latency_seconds: float = 0.0,
    ):
        self.store = store or SimulationStore()
        self._rates = dict(SIMULATED_RATES if rates is None else rates)
        self.fee_fraction = fee_fraction
        self.quote_ttl_seconds = quote_ttl_seconds
        self.estimated_seconds = estimated_seconds
        self.latency_seconds = latency_seconds

    @property
    def name(self) -> str:
        return SimulatedPayload.provider

    @property
    def is_simulated(self) -> bool:
        return True

    def set_rate(self, key: str, rate: Decimal) -> None:
        """Set simulated price for an identifier or symbol."""
        self._rates[key] = rate

    def rate_for(self, asset: Asset) -> Decimal:
        return self._rates.get(asset.identifier) or self._rates.get(asset.symbol) or DEFAULT_RATE

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

    async def get_quotes(self, request: QuoteRequest) -> list[SwapQuote]:
        """Generate a simulated quote."""
        await self._simulate_latency()

        amount = parse_positive_amount(request.amount)
        if amount is None:
            raise ConfigurationError(f"Invalid amount: {request.amount!r}")

        sell_rate = self.rate_for(request.from_asset)
        buy_rate = self.rate_for(request.to_asset)
        places = Decimal(1).scaleb(-min(request.to_asset.decimals, 8))
        try:
            with localcontext() as ctx:
                ctx.prec = AMOUNT_PRECISION
                buy_amount = (amount * sell_rate / buy_rate).quantize(places, rounding=ROUND_FLOOR)
        except ArithmeticError as e:
            raise ConfigurationError(f"Amount out of range: {request.amount!r}") from e

        now = self.store.now()
        quote = SwapQuote(
            quote_id=f"mock-{uuid.uuid4().hex[:12]}",
            provider=self.name,
            direction=request.direction,
            from_asset=request.from_asset,
            to_asset=request.to_asset,
            from_amount=request.amount,
            to_amount=format(buy_amount, "f"),
            fee_fraction=self.fee_fraction,
            expires_at=datetime.fromtimestamp(now + self.quote_ttl_seconds, tz=timezone.utc),
            estimated_seconds=self.estimated_seconds,
            payload=SimulatedPayload(
                sell_asset=request.from_asset.identifier,
                buy_asset=request.to_asset.identifier,
                sell_amount=request.amount,
                buy_amount=format(buy_amount, "f"),
                rate=format(sell_rate / buy_rate, "f"),
            ),
        )
        logger.debug(f"Simulated quote {quote.quote_id}: {quote.from_amount} -> {quote.to_amount}")
        return [quote]

    async def execute(self, quote: SwapQuote, params: ExecutionParams) -> ExecutionResult:
        """Simulate publishing an intent."""
        if not isinstance(quote.payload, SimulatedPayload):
            raise ConfigurationError(
                f"Quote from {quote.provider} cannot be executed by {self.name}"
            )
        await self._simulate_latency()

        started = self.store.now()
        intent_id = f"mock-intent-{int(started * 1000)}-{uuid.uuid4().hex[:8]}"
        self.store.start(intent_id, started)
        logger.info(f"Simulated intent {intent_id} for quote {quote.quote_id}")
        return ExecutionResult(intent_id=intent_id, deposit_address=MOCK_DEPOSIT_ADDRESS)

    async def poll(
        self, intent_id: Optional[str], deposit_address: Optional[str] = None
    ) -> ProviderStatus:
        """Simulated status as a function of elapsed time."""
        started = None
        if intent_id:
            # intents from another process carry their start time in the id
            started = self.store.started_at(intent_id)
            if started is None:
                started = started_from_intent_id(intent_id)
        if started is None:
            raise ProviderError("Unknown simulated intent", provider=self.name, text=str(intent_id))

        status = simulated_status(self.store.now() - started)
        suffix = intent_id[-8:]
        tx_ref = None
        if status in ("DEPOSIT_DETECTED", "CONFIRMING", "SWAPPING"):
            tx_ref = f"mock-deposit-tx-{suffix}"
        elif status in ("COMPLETING", FINAL_STATUS):
            tx_ref = f"mock-output-tx-{suffix}"

        return ProviderStatus(raw_status=status, tx_ref=tx_ref)
