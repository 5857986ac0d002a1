"""Ordered extraction rules for provider responses.

Providers do not keep a stable envelope, so each field is looked up under
several known shapes, in order. Each rule is a dotted path into the
response.
"""

from typing import Any, Optional, Sequence

DEPOSIT_ADDRESS_RULES: tuple[str, ...] = (
    "quote.depositAddress",
    "depositAddress",
    "deposit_address",
    "quote.deposit_address",
)

INTENT_ID_RULES: tuple[str, ...] = (
    "signature",
    "correlationId",
    "quote.correlationId",
)

QUOTE_ID_RULES: tuple[str, ...] = (
    "correlationId",
    "quoteHash",
    "quote.quoteHash",
)

AMOUNT_OUT_RULES: tuple[str, ...] = (
    "quote.amountOut",
    "amountOut",
    "quote.expectedOutput",
    "expectedOutput",
)

AMOUNT_OUT_FORMATTED_RULES: tuple[str, ...] = (
    "quote.amountOutFormatted",
    "amountOutFormatted",
)

# Explorer transaction entries
TX_REF_RULES: tuple[str, ...] = (
    "depositTxHash",
    "txHash",
)

TX_AMOUNT_IN_RULES: tuple[str, ...] = (
    "amountIn",
    "fromAmount",
    "amountInFormatted",
)

TX_AMOUNT_OUT_RULES: tuple[str, ...] = (
    "amountOut",
    "toAmount",
    "amountOutFormatted",
)


def lookup(data: Any, path: str) -> Any:
    """Walk a dotted path through nested dicts; None if any step is missing."""
    current = data
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_match(data: Any, rules: Sequence[str]) -> Optional[str]:
    """Return the first rule's value that is a non-empty string or number."""
    for path in rules:
        value = lookup(data, path)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def extract_deposit_address(data: Any) -> Optional[str]:
    return first_match(data, DEPOSIT_ADDRESS_RULES)


def extract_intent_id(data: Any) -> Optional[str]:
    return first_match(data, INTENT_ID_RULES)
