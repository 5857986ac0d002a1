"""Intent execution.

Checks the quote is still valid, then hands it to the provider that issued
it. Nothing is persisted here.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable

from intentswap.errors import ConfigurationError, StaleQuoteError
from intentswap.models import ExecutionParams, ExecutionResult, SwapQuote, utcnow
from intentswap.routing.base import IntentProvider, index_providers

logger = logging.getLogger(__name__)


class IntentExecutor:
    """Publishes intents for accepted quotes."""

    def __init__(
        self,
        providers: Iterable[IntentProvider],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.providers = index_providers(providers)
        self._clock = clock

    async def execute(self, quote: SwapQuote, params: ExecutionParams) -> ExecutionResult:
        """
        Execute a quote.

        Args:
            quote: Quote returned by the quote engine
            params: Caller-confirmed destination and refund addresses

        Returns:
            Intent id and the address to fund

        Raises:
            StaleQuoteError: quote expired, no network call made
            ConfigurationError: no provider for the quote, or bad addresses
            ExecutionError: provider rejected the request
        """
        now = self._clock()
        if quote.is_expired(now):
            logger.warning(f"Quote {quote.quote_id} expired at {quote.expires_at.isoformat()}")
            raise StaleQuoteError(quote.quote_id, quote.expires_at)

        if not (params.destination_address or "").strip():
            raise ConfigurationError("Destination address is required")

        provider = self.providers.get(quote.provider)
        if provider is None:
            raise ConfigurationError(f"No provider {quote.provider!r} configured to execute quote")

        logger.info(
            f"Executing quote {quote.quote_id} via {quote.provider} "
            f"({quote.seconds_until_expiry(now):.0f}s left)"
        )
        result = await provider.execute(quote, params)
        logger.info(
            f"Intent {result.intent_id}: deposit {quote.from_amount} "
            f"{quote.from_asset.identifier} to {result.deposit_address}"
        )
        return result
