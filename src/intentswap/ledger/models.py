"""SQLAlchemy models for swap history."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from intentswap.amounts import decimals_for
from intentswap.assets.fallback import FALLBACK_ASSETS, HOME_ASSET
from intentswap.models import ActiveSwap, Asset, SwapDirection, SwapStatus

_KNOWN_ASSETS = {asset.identifier: asset for asset in (HOME_ASSET, *FALLBACK_ASSETS)}


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def asset_from_identifier(identifier: str, decimals: Optional[int] = None) -> Asset:
    """Rebuild an Asset from its stored composite identifier."""
    known = _KNOWN_ASSETS.get(identifier)
    if known is not None and (decimals is None or known.decimals == decimals):
        return known

    chain, _, rest = identifier.partition(".")
    symbol = rest.split("-", 1)[0] or chain
    return Asset(
        chain=chain,
        symbol=symbol,
        identifier=identifier,
        name=symbol,
        decimals=decimals if decimals is not None else decimals_for(identifier),
    )


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SwapRecord(Base):
    """Record of an executed swap intent."""

    __tablename__ = "swaps"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    from_asset: Mapped[str] = mapped_column(String(128), nullable=False)
    from_decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    from_amount: Mapped[str] = mapped_column(String(80), nullable=False)
    to_asset: Mapped[str] = mapped_column(String(128), nullable=False)
    to_decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    to_amount: Mapped[str] = mapped_column(String(80), nullable=False)
    quote_id: Mapped[str] = mapped_column(String(128), nullable=False)
    deposit_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    refund_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recipient_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    settlement_tx_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_swaps_created_at", "created_at"),)

    @classmethod
    def from_active_swap(cls, swap: ActiveSwap) -> "SwapRecord":
        return cls(
            id=swap.id,
            direction=swap.direction.value,
            status=swap.status.value,
            provider=swap.provider,
            from_asset=swap.from_asset.identifier,
            from_decimals=swap.from_asset.decimals,
            from_amount=swap.from_amount,
            to_asset=swap.to_asset.identifier,
            to_decimals=swap.to_asset.decimals,
            to_amount=swap.to_amount,
            quote_id=swap.quote_id,
            deposit_address=swap.deposit_address,
            refund_address=swap.refund_address,
            recipient_address=swap.recipient_address,
            intent_id=swap.intent_id,
            settlement_tx_ref=swap.settlement_tx_ref,
            error_message=swap.error,
            created_at=swap.created_at,
            expires_at=swap.expires_at,
            completed_at=swap.completed_at,
        )

    def to_active_swap(self) -> ActiveSwap:
        return ActiveSwap(
            id=self.id,
            direction=SwapDirection(self.direction),
            status=SwapStatus(self.status),
            provider=self.provider,
            from_asset=asset_from_identifier(self.from_asset, self.from_decimals),
            from_amount=self.from_amount,
            to_asset=asset_from_identifier(self.to_asset, self.to_decimals),
            to_amount=self.to_amount,
            quote_id=self.quote_id,
            deposit_address=self.deposit_address,
            refund_address=self.refund_address,
            recipient_address=self.recipient_address,
            intent_id=self.intent_id,
            settlement_tx_ref=self.settlement_tx_ref,
            error=self.error_message,
            created_at=_aware(self.created_at),
            expires_at=_aware(self.expires_at),
            completed_at=_aware(self.completed_at),
        )
