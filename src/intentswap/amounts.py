"""Conversion between display amounts and integer minor units."""

import logging
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Enough precision for 24-decimal assets with large balances
AMOUNT_PRECISION = 80

# Display amounts at or above 10**31 are rejected as input
MAX_AMOUNT_EXPONENT = 30

# Exact identifier -> decimals
ASSET_DECIMALS: dict[str, int] = {
    "BTC.BTC": 8,
    "ETH.ETH": 18,
    "SOL.SOL": 9,
    "NEAR.NEAR": 24,
    "ZEC.ZEC": 8,
    "DOGE.DOGE": 8,
    "LTC.LTC": 8,
}

# Substring heuristics for stable assets
STABLE_TICKERS = ("USDC", "USDT")
STABLE_DECIMALS = 6

DEFAULT_DECIMALS = 18  # most EVM tokens


def _parse(amount: Union[str, int, Decimal]) -> Optional[Decimal]:
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def to_minor_units(amount: Union[str, Decimal], decimals: int) -> str:
    """Convert a display amount to minor units, rounding down.

    Unparsable input yields "0" rather than raising; callers that need
    strict validation must check the amount themselves.

    Args:
        amount: Decimal string such as "1.5"
        decimals: Asset decimals

    Returns:
        Integer string, e.g. "150000000" for ("1.5", 8)
    """
    value = _parse(amount)
    if value is None:
        logger.debug(f"Unparsable amount {amount!r}, using 0")
        return "0"
    try:
        with localcontext() as ctx:
            ctx.prec = AMOUNT_PRECISION
            scaled = (value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR)
    except ArithmeticError:
        logger.warning(f"Amount {amount!r} out of range, using 0")
        return "0"
    try:
        return str(int(scaled))
    except ValueError:
        # beyond the interpreter's int-to-str digit limit
        return format(scaled, "f")


def from_minor_units(raw: Union[str, int], decimals: int) -> str:
    """Convert minor units back to a display string with ``decimals`` places.

    Raises:
        ValueError: if ``raw`` is not a number
    """
    value = _parse(raw)
    if value is None:
        raise ValueError(f"Invalid minor-unit amount: {raw!r}")
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        display = value.scaleb(-decimals)
        if decimals > 0:
            try:
                display = display.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_FLOOR)
            except InvalidOperation as e:
                raise ValueError(f"Minor-unit amount out of range: {raw!r}") from e
    return format(display, "f")


def decimals_for(identifier: str, authoritative: Optional[int] = None) -> int:
    """Get decimals for an asset identifier.

    Args:
        identifier: Composite identifier (e.g. "ETH.USDC-0x...")
        authoritative: Decimals reported by the catalog; wins when given

    Returns:
        Exact table value, else 6 for stable tickers, else 18
    """
    if authoritative is not None:
        return authoritative

    if identifier in ASSET_DECIMALS:
        return ASSET_DECIMALS[identifier]

    upper = identifier.upper()
    if any(ticker in upper for ticker in STABLE_TICKERS):
        return STABLE_DECIMALS

    return DEFAULT_DECIMALS


def parse_positive_amount(amount: str) -> Optional[Decimal]:
    """Strictly parse a display amount.

    Returns None unless it is > 0 and below 10 ** (MAX_AMOUNT_EXPONENT + 1).
    """
    value = _parse(amount)
    if value is None or value <= 0:
        return None
    if value.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return value
