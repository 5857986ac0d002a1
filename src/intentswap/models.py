"""Value objects and the active swap record.

Assets and quotes are immutable. ``ActiveSwap`` is the only mutable record
and changes only through ``apply_status``.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class SwapDirection(str, Enum):
    """Direction of a swap relative to the home asset."""

    INBOUND = "inbound"  # external asset -> ZEC
    OUTBOUND = "outbound"  # ZEC -> external asset


class SwapStatus(str, Enum):
    """Canonical swap state machine."""

    QUOTING = "quoting"
    QUOTED = "quoted"
    AWAITING_DEPOSIT = "awaiting_deposit"
    DEPOSIT_DETECTED = "deposit_detected"
    CONFIRMING = "confirming"
    SWAPPING = "swapping"
    COMPLETING = "completing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    UNKNOWN = "unknown"  # lookup inconclusive

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def rank(self) -> int:
        """Position in the forward progression (-1 for unknown)."""
        return _STATUS_RANK.get(self, -1)


TERMINAL_STATUSES = frozenset({SwapStatus.COMPLETED, SwapStatus.FAILED, SwapStatus.REFUNDED})

_STATUS_RANK = {
    status: index
    for index, status in enumerate(
        [
            SwapStatus.QUOTING,
            SwapStatus.QUOTED,
            SwapStatus.AWAITING_DEPOSIT,
            SwapStatus.DEPOSIT_DETECTED,
            SwapStatus.CONFIRMING,
            SwapStatus.SWAPPING,
            SwapStatus.COMPLETING,
            SwapStatus.COMPLETED,
        ]
    )
}
_STATUS_RANK[SwapStatus.FAILED] = len(_STATUS_RANK)
_STATUS_RANK[SwapStatus.REFUNDED] = len(_STATUS_RANK)


@dataclass(frozen=True)
class Asset:
    """A swappable asset keyed by its composite identifier."""

    chain: str
    symbol: str
    identifier: str  # CHAIN.SYMBOL[-CONTRACT]
    name: str
    decimals: int
    provider_asset_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "chain": self.chain,
            "symbol": self.symbol,
            "identifier": self.identifier,
            "name": self.name,
            "decimals": self.decimals,
            "provider_asset_id": self.provider_asset_id,
        }


@dataclass(frozen=True)
class RefundContext:
    """Where funds go back if a swap cannot be fulfilled."""

    source_chain_refund_address: Optional[str] = None  # required for inbound
    home_refund_address: Optional[str] = None  # ZEC side, outbound


@dataclass(frozen=True)
class QuoteRequest:
    """Normalized quote request handed to providers.

    ``amount`` is a display-unit decimal string of ``from_asset``.
    """

    direction: SwapDirection
    from_asset: Asset
    to_asset: Asset
    amount: str
    recipient: str
    refund_to: str
    refund_on_origin: bool = True


# ======================
# Provider payloads
# ======================


@dataclass(frozen=True)
class NearIntentsPayload:
    """Fields needed to re-submit a 1Click quote for execution."""

    provider: ClassVar[str] = "near_intents"

    quote_request: dict
    response: dict
    used_placeholder_recipient: bool = False


@dataclass(frozen=True)
class SimulatedPayload:
    """Mock-mode quote details."""

    provider: ClassVar[str] = "simulated"

    sell_asset: str
    buy_asset: str
    sell_amount: str
    buy_amount: str
    rate: str


ProviderPayload = Union[NearIntentsPayload, SimulatedPayload]


@dataclass(frozen=True)
class SwapQuote:
    """A quote from one provider, amounts in display units."""

    quote_id: str
    provider: str
    direction: SwapDirection
    from_asset: Asset
    to_asset: Asset
    from_amount: str
    to_amount: str
    fee_fraction: float
    expires_at: datetime
    estimated_seconds: int
    payload: ProviderPayload
    created_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if quote has expired."""
        return (now or utcnow()) >= self.expires_at

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> float:
        """Seconds until quote expires (negative if expired)."""
        return (self.expires_at - (now or utcnow())).total_seconds()

    @property
    def effective_rate(self) -> Decimal:
        """Output units per input unit."""
        from_amount = Decimal(self.from_amount)
        if from_amount == 0:
            return Decimal("0")
        return Decimal(self.to_amount) / from_amount

    def to_dict(self) -> dict:
        return {
            "quote_id": self.quote_id,
            "provider": self.provider,
            "direction": self.direction.value,
            "from_asset": self.from_asset.identifier,
            "to_asset": self.to_asset.identifier,
            "from_amount": self.from_amount,
            "to_amount": self.to_amount,
            "fee_fraction": self.fee_fraction,
            "expires_at": self.expires_at.isoformat(),
            "estimated_seconds": self.estimated_seconds,
        }


@dataclass(frozen=True)
class ExecutionParams:
    """Addresses the caller confirms at execution time."""

    destination_address: str
    source_chain_refund_address: Optional[str] = None
    home_refund_address: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    """A published intent and where to fund it."""

    intent_id: str
    deposit_address: str


@dataclass(frozen=True)
class StatusSnapshot:
    """One poll result. Never mutates tracked state by itself."""

    status: SwapStatus
    settlement_tx_ref: Optional[str] = None
    error: Optional[str] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "settlement_tx_ref": self.settlement_tx_ref,
            "error": self.error,
            "from_amount": self.from_amount,
            "to_amount": self.to_amount,
        }


@dataclass
class ActiveSwap:
    """An executed intent being tracked to a terminal state."""

    direction: SwapDirection
    status: SwapStatus
    from_asset: Asset
    from_amount: str
    to_asset: Asset
    to_amount: str
    quote_id: str
    provider: str
    expires_at: datetime
    deposit_address: Optional[str] = None
    refund_address: Optional[str] = None
    recipient_address: Optional[str] = None
    intent_id: Optional[str] = None
    settlement_tx_ref: Optional[str] = None
    error: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def apply_status(self, snapshot: StatusSnapshot, now: Optional[datetime] = None) -> bool:
        """Merge a status snapshot into this record.

        Returns True if anything changed.
        """
        if self.is_terminal:
            return False

        changed = False
        new_status = snapshot.status

        if new_status != SwapStatus.UNKNOWN and new_status != self.status:
            # forward progress only, terminal alternates always win
            if new_status.is_terminal or new_status.rank > self.status.rank:
                self.status = new_status
                changed = True

        if snapshot.settlement_tx_ref and snapshot.settlement_tx_ref != self.settlement_tx_ref:
            self.settlement_tx_ref = snapshot.settlement_tx_ref
            changed = True
        if snapshot.to_amount and snapshot.to_amount != self.to_amount:
            self.to_amount = snapshot.to_amount
            changed = True
        if self.status == SwapStatus.FAILED and snapshot.error:
            self.error = snapshot.error
        if self.is_terminal and self.completed_at is None:
            self.completed_at = now or utcnow()

        return changed

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "direction": self.direction.value,
            "status": self.status.value,
            "provider": self.provider,
            "from_asset": self.from_asset.identifier,
            "from_amount": self.from_amount,
            "to_asset": self.to_asset.identifier,
            "to_amount": self.to_amount,
            "deposit_address": self.deposit_address,
            "refund_address": self.refund_address,
            "recipient_address": self.recipient_address,
            "quote_id": self.quote_id,
            "intent_id": self.intent_id,
            "settlement_tx_ref": self.settlement_tx_ref,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def deadline_from_now(seconds: float, now: Optional[datetime] = None) -> datetime:
    """Absolute deadline ``seconds`` from ``now``."""
    return (now or utcnow()) + timedelta(seconds=seconds)


def epoch_millis() -> int:
    return int(time.time() * 1000)
