"""Status tracking for published intents.

Maps provider status vocabularies onto the canonical ``SwapStatus`` set.
A lookup that fails is reported as ``unknown``; it never raises.
"""

import logging
from typing import Iterable, Optional

from intentswap.errors import IntentSwapError
from intentswap.models import StatusSnapshot, SwapStatus
from intentswap.routing.base import IntentProvider, ProviderStatus, index_providers

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Swap failed"

# Provider status (upper-cased) -> canonical status
STATUS_MAP: dict[str, SwapStatus] = {
    # NEAR Intents explorer
    "PENDING_DEPOSIT": SwapStatus.AWAITING_DEPOSIT,
    "INCOMPLETE_DEPOSIT": SwapStatus.AWAITING_DEPOSIT,
    "KNOWN_DEPOSIT_TX": SwapStatus.DEPOSIT_DETECTED,
    "PROCESSING": SwapStatus.CONFIRMING,
    "SUCCESS": SwapStatus.COMPLETED,
    "REFUNDED": SwapStatus.REFUNDED,
    "FAILED": SwapStatus.FAILED,
    # Simulator
    "PENDING": SwapStatus.AWAITING_DEPOSIT,
    "DEPOSIT_DETECTED": SwapStatus.DEPOSIT_DETECTED,
    "CONFIRMING": SwapStatus.CONFIRMING,
    "SWAPPING": SwapStatus.SWAPPING,
    "COMPLETING": SwapStatus.COMPLETING,
    "COMPLETED": SwapStatus.COMPLETED,
}


def map_provider_status(raw_status: Optional[str]) -> SwapStatus:
    """Canonical status for a provider status string; ``unknown`` if unmapped."""
    if not isinstance(raw_status, str) or not raw_status.strip():
        return SwapStatus.UNKNOWN
    status = STATUS_MAP.get(raw_status.strip().upper())
    if status is None:
        logger.warning(f"Unmapped provider status: {raw_status!r}")
        return SwapStatus.UNKNOWN
    return status


def snapshot_from_provider(result: ProviderStatus) -> StatusSnapshot:
    """Build a canonical snapshot from a provider lookup result."""
    if not result.found:
        # nothing indexed yet for this intent
        return StatusSnapshot(status=SwapStatus.AWAITING_DEPOSIT)

    status = map_provider_status(result.raw_status)
    error = None
    if status == SwapStatus.FAILED:
        error = result.error or DEFAULT_FAILURE_MESSAGE

    return StatusSnapshot(
        status=status,
        settlement_tx_ref=result.tx_ref,
        error=error,
        from_amount=result.from_amount,
        to_amount=result.to_amount,
    )


class StatusTracker:
    """Poll intents through the provider that published them."""

    def __init__(self, providers: Iterable[IntentProvider]):
        self.providers = index_providers(providers)

    async def poll(
        self,
        provider_name: str,
        intent_id: Optional[str],
        deposit_address: Optional[str] = None,
    ) -> StatusSnapshot:
        """
        Get the current status of an intent.

        Args:
            provider_name: Provider that published the intent
            intent_id: Intent id returned at execution
            deposit_address: Deposit address, preferred lookup key

        Returns:
            Fresh snapshot; ``unknown`` when the lookup failed
        """
        provider = self.providers.get(provider_name)
        if provider is None:
            logger.warning(f"No provider {provider_name!r} to track intent {intent_id}")
            return StatusSnapshot(status=SwapStatus.UNKNOWN)

        try:
            result = await provider.poll(intent_id, deposit_address)
        except IntentSwapError as e:
            logger.warning(f"Status lookup for {intent_id} inconclusive: {e}")
            return StatusSnapshot(status=SwapStatus.UNKNOWN)
        except Exception as e:
            logger.warning(f"Status lookup for {intent_id} failed: {type(e).__name__}: {e}")
            return StatusSnapshot(status=SwapStatus.UNKNOWN)

        snapshot = snapshot_from_provider(result)
        logger.debug(f"Intent {intent_id} status: {result.raw_status} -> {snapshot.status.value}")
        return snapshot
