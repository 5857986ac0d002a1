"""Exception hierarchy for the swap intent engine.

Inconclusive status lookups are not errors: they surface as
``SwapStatus.UNKNOWN`` from the status tracker.
"""

from datetime import datetime
from typing import Any, Optional


class IntentSwapError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(IntentSwapError):
    """Missing mandatory context or invalid input. Raised before any network call."""


class NetworkError(IntentSwapError):
    """Transport failure or timeout talking to a provider."""


class ProviderError(IntentSwapError):
    """A provider rejected the request or answered with an error payload."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: Optional[int] = None,
        text: str = "",
    ):
        self.provider = provider
        self.status_code = status_code
        self.text = text
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.text:
            parts.append(f"text={self.text}")
        return " | ".join(parts)


class QuoteError(ProviderError):
    """Quote request failed."""


class ExecutionError(ProviderError):
    """Execution (non-dry) request failed."""


class MalformedResponseError(ProviderError):
    """Expected fields were missing after defensive probing."""

    def __init__(self, message: str, provider: str = "", raw: Any = None, **kwargs):
        self.raw = raw
        super().__init__(message, provider=provider, **kwargs)


class MalformedQuoteError(QuoteError, MalformedResponseError):
    """Quote response could not be interpreted."""


class DepositAddressMissingError(ExecutionError, MalformedResponseError):
    """Execution response carried no deposit address in any known shape."""


class StaleQuoteError(IntentSwapError):
    """The quote's validity window elapsed before execution."""

    def __init__(self, quote_id: str, expired_at: datetime):
        self.quote_id = quote_id
        self.expired_at = expired_at
        super().__init__(f"Quote {quote_id} expired at {expired_at.isoformat()}")
