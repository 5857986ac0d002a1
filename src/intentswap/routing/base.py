"""Abstract provider interface for swap intent networks.

Live and simulated providers implement the same three calls. Generic code
never looks inside a quote's payload; only the provider that produced it
does.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from intentswap.models import ExecutionParams, ExecutionResult, QuoteRequest, SwapQuote


@dataclass(frozen=True)
class ProviderStatus:
    """Raw tracking result in the provider's own vocabulary.

    ``found`` is False when the tracker has no activity for the intent yet.
    """

    raw_status: Optional[str] = None
    found: bool = True
    tx_ref: Optional[str] = None
    error: Optional[str] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None


class IntentProvider(ABC):
    """Abstract base class for intent providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        pass

    @property
    def is_simulated(self) -> bool:
        return False

    @abstractmethod
    async def get_quotes(self, request: QuoteRequest) -> list[SwapQuote]:
        """
        Request dry-run quotes.

        Args:
            request: Normalized request, amount in display units

        Returns:
            Quotes with display-unit amounts

        Raises:
            QuoteError: provider rejected the request or answered garbage
            NetworkError: transport failure
        """
        pass

    @abstractmethod
    async def execute(self, quote: SwapQuote, params: ExecutionParams) -> ExecutionResult:
        """
        Publish the intent for a quote this provider produced.

        Raises:
            ExecutionError: provider rejected the request
            DepositAddressMissingError: no deposit address in the response
            NetworkError: transport failure
        """
        pass

    @abstractmethod
    async def poll(
        self, intent_id: Optional[str], deposit_address: Optional[str] = None
    ) -> ProviderStatus:
        """
        Look up an intent's progress. Must not change provider state.

        Raises:
            IntentSwapError: lookup failed or was inconclusive
        """
        pass


def index_providers(providers: Iterable[IntentProvider]) -> dict[str, IntentProvider]:
    """Key providers by name."""
    indexed: dict[str, IntentProvider] = {}
    for provider in providers:
        if provider.name in indexed:
            raise ValueError(f"Duplicate provider name: {provider.name}")
        indexed[provider.name] = provider
    return indexed
