"""Quote engine.

Validates a swap request, builds the normalized provider request and
collects quotes from every configured provider, best first.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from intentswap.amounts import parse_positive_amount
from intentswap.assets.fallback import HOME_ASSET
from intentswap.chains import address_matches_chain
from intentswap.errors import ConfigurationError, IntentSwapError
from intentswap.models import (
    Asset,
    QuoteRequest,
    RefundContext,
    SwapDirection,
    SwapQuote,
)
from intentswap.routing.base import IntentProvider, index_providers

logger = logging.getLogger(__name__)


def build_quote_request(
    direction: SwapDirection,
    asset: Asset,
    amount: str,
    recipient: str,
    refund: Optional[RefundContext] = None,
    home_asset: Asset = HOME_ASSET,
) -> QuoteRequest:
    """
    Validate inputs and build the provider-facing request.

    Args:
        direction: inbound (asset -> home) or outbound (home -> asset)
        asset: The external asset
        amount: Display-unit amount of the asset being sold
        recipient: Address receiving the bought asset
        refund: Refund addresses

    Raises:
        ConfigurationError: invalid or missing input
    """
    refund = refund or RefundContext()

    if parse_positive_amount(amount) is None:
        raise ConfigurationError(f"Amount must be a positive decimal, got {amount!r}")

    recipient = (recipient or "").strip()
    if not recipient:
        raise ConfigurationError("Recipient address is required")

    if direction == SwapDirection.INBOUND:
        refund_to = (refund.source_chain_refund_address or "").strip()
        if not refund_to:
            raise ConfigurationError(
                f"A {asset.chain} refund address is required for inbound swaps"
            )
        if not address_matches_chain(refund_to, asset.chain):
            logger.warning(f"Refund address {refund_to!r} does not look like a {asset.chain} address")
        if not address_matches_chain(recipient, home_asset.chain):
            logger.warning(f"Recipient {recipient!r} does not look like a {home_asset.chain} address")

        return QuoteRequest(
            direction=direction,
            from_asset=asset,
            to_asset=home_asset,
            amount=amount.strip(),
            recipient=recipient,
            refund_to=refund_to,
            refund_on_origin=True,
        )

    if not address_matches_chain(recipient, asset.chain):
        logger.warning(f"Recipient {recipient!r} does not look like a {asset.chain} address")

    # refunds go back to the wallet when known, else to the recipient
    home_refund = (refund.home_refund_address or "").strip()
    return QuoteRequest(
        direction=direction,
        from_asset=home_asset,
        to_asset=asset,
        amount=amount.strip(),
        recipient=recipient,
        refund_to=home_refund or recipient,
        refund_on_origin=bool(home_refund),
    )


class QuoteEngine:
    """Collects quotes across providers."""

    def __init__(self, providers: Iterable[IntentProvider], home_asset: Asset = HOME_ASSET):
        self.providers = index_providers(providers)
        self.home_asset = home_asset

    async def get_quotes(
        self,
        direction: SwapDirection,
        asset: Asset,
        amount: str,
        recipient: str,
        refund: Optional[RefundContext] = None,
    ) -> list[SwapQuote]:
        """
        Get quotes ordered best-first.

        Returns:
            Quotes from every provider that answered

        Raises:
            ConfigurationError: invalid input, before any network call
            IntentSwapError: every provider failed (first error re-raised)
        """
        request = build_quote_request(
            direction, asset, amount, recipient, refund, home_asset=self.home_asset
        )
        if not self.providers:
            raise ConfigurationError("No quote providers configured")

        quotes: list[SwapQuote] = []
        first_error: Optional[IntentSwapError] = None

        for name, provider in self.providers.items():
            try:
                provider_quotes = await provider.get_quotes(request)
            except ConfigurationError:
                raise
            except IntentSwapError as e:
                logger.error(f"Quote from {name} failed: {e}")
                if first_error is None:
                    first_error = e
                continue
            quotes.extend(provider_quotes)

        if not quotes:
            if first_error is not None:
                raise first_error
            raise ConfigurationError(
                f"No provider can quote {request.from_asset.identifier} -> "
                f"{request.to_asset.identifier}"
            )

        quotes.sort(key=lambda q: Decimal(q.to_amount), reverse=True)
        logger.info(
            f"{len(quotes)} quote(s) for {request.amount} {request.from_asset.identifier} -> "
            f"{request.to_asset.identifier}, best {quotes[0].to_amount} via {quotes[0].provider}"
        )
        return quotes
