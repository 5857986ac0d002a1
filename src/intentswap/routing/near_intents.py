"""NEAR Intents (1Click API) provider.

Quotes are requested with ``dry: true``; execution re-submits the same
request with ``dry: false`` and returns a deposit address. Progress comes
from the intents explorer.
API docs: https://docs.near-intents.org/
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

import httpx

from intentswap.amounts import decimals_for, from_minor_units, to_minor_units
from intentswap.assets.identity import AssetIdentityResolver
from intentswap.chains import is_evm_address, is_transparent_mainnet_address
from intentswap.errors import (
    ConfigurationError,
    DepositAddressMissingError,
    ExecutionError,
    MalformedQuoteError,
    MalformedResponseError,
    NetworkError,
    ProviderError,
    QuoteError,
)
from intentswap.models import (
    ExecutionParams,
    ExecutionResult,
    NearIntentsPayload,
    QuoteRequest,
    SwapDirection,
    SwapQuote,
    deadline_from_now,
    epoch_millis,
    utcnow,
)
from intentswap.routing.base import IntentProvider, ProviderStatus
from intentswap.routing.extract import (
    AMOUNT_OUT_FORMATTED_RULES,
    AMOUNT_OUT_RULES,
    QUOTE_ID_RULES,
    TX_AMOUNT_IN_RULES,
    TX_AMOUNT_OUT_RULES,
    TX_REF_RULES,
    extract_deposit_address,
    extract_intent_id,
    first_match,
)

logger = logging.getLogger(__name__)

ONECLICK_API = "https://1click.chaindefuser.com"
EXPLORER_API = "https://explorer.near-intents.org/api/v0"

QUOTE_PATH = "/v0/quote"
TRANSACTIONS_PATH = "/transactions"

DEFAULT_FEE_FRACTION = 0.003  # ~0.3%
DEFAULT_TIME_ESTIMATE = 120


def format_deadline(deadline: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and Z suffix."""
    return deadline.strftime("%Y-%m-%dT%H:%M:%S.") + f"{deadline.microsecond // 1000:03d}Z"


def normalize_refund_address(address: str) -> str:
    """EVM refund addresses must be lower-case; others are case-sensitive."""
    address = address.strip()
    return address.lower() if is_evm_address(address) else address


def extract_fee_fraction(quote_data: dict, amount_in_minor: str) -> float:
    """Fee as a fraction of the sell amount.

    Uses a provider-supplied fraction when present, otherwise sums an
    itemized fee list (minor units of the sell asset).
    """
    direct = quote_data.get("feeFraction")
    if isinstance(direct, (int, float)) and not isinstance(direct, bool):
        return _clamp_fraction(float(direct))

    fees = quote_data.get("fees")
    if isinstance(fees, list) and fees:
        try:
            total = sum(Decimal(str(fee.get("amount", "0"))) for fee in fees if isinstance(fee, dict))
            amount_in = Decimal(amount_in_minor)
        except (InvalidOperation, ValueError):
            return DEFAULT_FEE_FRACTION
        if amount_in > 0:
            return _clamp_fraction(float(total / amount_in))

    return DEFAULT_FEE_FRACTION


def _clamp_fraction(value: float) -> float:
    if value < 0:
        return 0.0
    if value >= 1:
        logger.warning(f"Fee fraction {value} out of range, clamping")
        return 0.9999
    return value


class NearIntentsProvider(IntentProvider):
    """Live NEAR Intents provider."""

    def __init__(
        self,
        api_url: str = ONECLICK_API,
        explorer_url: str = EXPLORER_API,
        api_key: str = "",
        resolver: Optional[AssetIdentityResolver] = None,
        slippage_bps: int = 300,
        deadline_seconds: int = 300,
        placeholder_recipient: str = "t1VpYecBW4UudbGcy4ufh61eWxQCoFaUrPs",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize NEAR Intents provider.

        Args:
            api_url: 1Click API base URL
            explorer_url: Explorer API base URL
            api_key: Bearer token
            resolver: Asset id resolver
            slippage_bps: Slippage tolerance in basis points
            deadline_seconds: Quote deadline horizon
            placeholder_recipient: Mainnet t-address used for dry quotes only
            timeout_seconds: Transport timeout
            transport: httpx transport override
            clock: Returns the current aware datetime
        """
        self.api_url = api_url.rstrip("/")
        self.explorer_url = explorer_url.rstrip("/")
        self.api_key = api_key
        self.resolver = resolver or AssetIdentityResolver()
        self.slippage_bps = slippage_bps
        self.deadline_seconds = deadline_seconds
        self.placeholder_recipient = placeholder_recipient
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock

    @property
    def name(self) -> str:
        return NearIntentsPayload.provider

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self, base_url: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url, timeout=self.timeout_seconds, transport=self._transport
        )

    async def _post_quote(
        self,
        body: dict,
        error_cls: type[ProviderError],
        malformed_cls: type[MalformedResponseError],
    ) -> dict:
        logger.debug(f"NEAR Intents request (dry={body.get('dry')}): {body}")
        try:
            async with self._client(self.api_url) as client:
                response = await client.post(QUOTE_PATH, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            raise NetworkError(f"NEAR Intents request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(f"NEAR Intents API error: {response.status_code} - {response.text}")
            raise error_cls(
                "NEAR Intents API error",
                provider=self.name,
                status_code=response.status_code,
                text=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise malformed_cls(
                "NEAR Intents returned invalid JSON", provider=self.name, raw=response.text
            ) from e

        if not isinstance(data, dict):
            raise malformed_cls("Unexpected NEAR Intents response", provider=self.name, raw=data)

        logger.debug(f"NEAR Intents response: {data}")
        return data

    def _quote_recipient(self, request: QuoteRequest) -> tuple[str, bool]:
        """Recipient to quote with, and whether it is the placeholder."""
        if request.direction == SwapDirection.OUTBOUND:
            return request.recipient, False

        if is_transparent_mainnet_address(request.recipient):
            return request.recipient, False

        # 1Click only accepts mainnet transparent ZEC recipients
        logger.warning(
            f"Recipient {request.recipient!r} is not a mainnet transparent address, "
            f"quoting with placeholder"
        )
        return self.placeholder_recipient, True

    async def get_quotes(self, request: QuoteRequest) -> list[SwapQuote]:
        """Get a dry-run quote from the 1Click API."""
        from_asset = request.from_asset
        to_asset = request.to_asset

        origin_asset = self.resolver.resolve(from_asset.identifier, from_asset.provider_asset_id)
        destination_asset = self.resolver.resolve(to_asset.identifier, to_asset.provider_asset_id)

        deadline = deadline_from_now(self.deadline_seconds, self._clock())
        recipient, used_placeholder = self._quote_recipient(request)

        decimals = decimals_for(from_asset.identifier, from_asset.decimals)
        amount_minor = to_minor_units(request.amount, decimals)

        body = {
            "dry": True,
            "swapType": "EXACT_INPUT",
            "slippageTolerance": self.slippage_bps,
            "originAsset": origin_asset,
            "destinationAsset": destination_asset,
            "amount": amount_minor,
            "recipient": recipient,
            "recipientType": "DESTINATION_CHAIN",
            "depositType": "ORIGIN_CHAIN",
            "refundTo": normalize_refund_address(request.refund_to),
            "refundType": "ORIGIN_CHAIN" if request.refund_on_origin else "DESTINATION_CHAIN",
            "deadline": format_deadline(deadline),
        }

        logger.info(
            f"Requesting NEAR Intents quote: {request.amount} {from_asset.identifier} -> "
            f"{to_asset.identifier}"
        )
        data = await self._post_quote(body, QuoteError, MalformedQuoteError)

        quote_data = data.get("quote") if isinstance(data.get("quote"), dict) else data
        to_amount = self._amount_out(data, to_asset.decimals, to_asset.identifier)
        if to_amount is None:
            raise MalformedQuoteError(
                "No output amount in quote response", provider=self.name, raw=data
            )

        try:
            estimated = int(quote_data.get("timeEstimate") or DEFAULT_TIME_ESTIMATE)
        except (TypeError, ValueError):
            estimated = DEFAULT_TIME_ESTIMATE

        quote = SwapQuote(
            quote_id=first_match(data, QUOTE_ID_RULES) or f"near-{epoch_millis()}",
            provider=self.name,
            direction=request.direction,
            from_asset=from_asset,
            to_asset=to_asset,
            from_amount=request.amount,
            to_amount=to_amount,
            fee_fraction=extract_fee_fraction(quote_data, amount_minor),
            expires_at=deadline,
            estimated_seconds=estimated,
            payload=NearIntentsPayload(
                quote_request=body,
                response=data,
                used_placeholder_recipient=used_placeholder,
            ),
        )
        logger.info(f"NEAR Intents quote {quote.quote_id}: {quote.to_amount} {to_asset.identifier}")
        return [quote]

    def _amount_out(self, data: dict, decimals: int, identifier: str) -> Optional[str]:
        raw = first_match(data, AMOUNT_OUT_RULES)
        if raw is not None:
            try:
                return from_minor_units(raw, decimals_for(identifier, decimals))
            except ValueError:
                logger.warning(f"Unparsable amountOut {raw!r}")

        formatted = first_match(data, AMOUNT_OUT_FORMATTED_RULES)
        if formatted is not None:
            try:
                return format(Decimal(formatted), "f")
            except InvalidOperation:
                return None
        return None

    async def execute(self, quote: SwapQuote, params: ExecutionParams) -> ExecutionResult:
        """Re-submit the quote with ``dry: false`` to obtain a deposit address."""
        payload = quote.payload
        if not isinstance(payload, NearIntentsPayload):
            raise ConfigurationError(
                f"Quote from {quote.provider} cannot be executed by {self.name}"
            )

        body = dict(payload.quote_request)
        body["dry"] = False
        body["deadline"] = format_deadline(deadline_from_now(self.deadline_seconds, self._clock()))

        if quote.direction == SwapDirection.INBOUND:
            destination = params.destination_address
            if not is_transparent_mainnet_address(destination):
                # never fall back to the quoted recipient (or the placeholder)
                raise ConfigurationError(
                    f"Destination {destination!r} is not a mainnet transparent ZEC address"
                )
            body["recipient"] = destination.strip()
            if params.source_chain_refund_address:
                body["refundTo"] = normalize_refund_address(params.source_chain_refund_address)
        else:
            if params.destination_address:
                body["recipient"] = params.destination_address.strip()
            if params.home_refund_address:
                body["refundTo"] = params.home_refund_address.strip()
                body["refundType"] = "ORIGIN_CHAIN"

        logger.info(f"Executing NEAR Intents quote {quote.quote_id}")
        data = await self._post_quote(body, ExecutionError, MalformedResponseError)

        deposit_address = extract_deposit_address(data)
        if not deposit_address:
            logger.error(f"No deposit address in execution response: {data}")
            raise DepositAddressMissingError(
                "No deposit address in execution response", provider=self.name, raw=data
            )

        intent_id = extract_intent_id(data) or quote.quote_id
        logger.info(f"Intent {intent_id} published, deposit to {deposit_address}")
        return ExecutionResult(intent_id=intent_id, deposit_address=deposit_address)

    async def poll(
        self, intent_id: Optional[str], deposit_address: Optional[str] = None
    ) -> ProviderStatus:
        """Query the explorer by deposit address (preferred) or intent id."""
        search = deposit_address or intent_id
        if not search:
            raise ConfigurationError("Need a deposit address or intent id to track a swap")

        try:
            async with self._client(self.explorer_url) as client:
                response = await client.get(
                    TRANSACTIONS_PATH, params={"search": search}, headers=self._headers()
                )
        except httpx.HTTPError as e:
            raise NetworkError(f"Explorer request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ProviderError(
                "Explorer API error",
                provider=self.name,
                status_code=response.status_code,
                text=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Explorer returned invalid JSON", provider=self.name, raw=response.text
            ) from e

        transactions = []
        if isinstance(data, dict):
            transactions = data.get("transactions") or data.get("items") or []
        if not isinstance(transactions, list):
            raise MalformedResponseError(
                "Explorer transactions is not a list", provider=self.name, raw=data
            )

        if not transactions:
            return ProviderStatus(found=False)

        # most recent first
        tx = transactions[0]
        if not isinstance(tx, dict):
            raise MalformedResponseError("Unexpected explorer entry", provider=self.name, raw=tx)

        return ProviderStatus(
            raw_status=tx.get("status"),
            tx_ref=first_match(tx, TX_REF_RULES),
            error=tx.get("errorMessage"),
            from_amount=first_match(tx, TX_AMOUNT_IN_RULES),
            to_amount=first_match(tx, TX_AMOUNT_OUT_RULES),
        )
