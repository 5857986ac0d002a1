"""Repository for swap history."""

from datetime import datetime
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intentswap.ledger.models import SwapRecord
from intentswap.models import TERMINAL_STATUSES, ActiveSwap, SwapStatus, utcnow

_TERMINAL_VALUES = [status.value for status in TERMINAL_STATUSES]


class SwapRepository:
    """Stores active swaps and their status history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_swap(self, swap: ActiveSwap) -> ActiveSwap:
        """Insert or replace a swap."""
        await self.session.merge(SwapRecord.from_active_swap(swap))
        await self.session.flush()
        return swap

    async def update_swap_status(
        self,
        swap_id: str,
        status: Union[SwapStatus, str],
        intent_id: Optional[str] = None,
        settlement_tx_ref: Optional[str] = None,
        error: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[ActiveSwap]:
        """
        Update a swap's status.

        None arguments keep the stored value. Returns the updated swap, or
        None if no swap has that id.
        """
        record = await self._get_record(swap_id)
        if record is None:
            return None

        status = SwapStatus(status)
        record.status = status.value
        if intent_id is not None:
            record.intent_id = intent_id
        if settlement_tx_ref is not None:
            record.settlement_tx_ref = settlement_tx_ref
        if error is not None:
            record.error_message = error
        if status.is_terminal and record.completed_at is None:
            record.completed_at = now or utcnow()

        await self.session.flush()
        return record.to_active_swap()

    async def get_swap(self, swap_id: str) -> Optional[ActiveSwap]:
        """Get swap by ID."""
        record = await self._get_record(swap_id)
        return record.to_active_swap() if record else None

    async def get_swap_history(self, limit: int = 50, offset: int = 0) -> list[ActiveSwap]:
        """All swaps, newest first."""
        stmt = (
            select(SwapRecord)
            .order_by(SwapRecord.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [record.to_active_swap() for record in result.scalars().all()]

    async def get_active_swaps(self) -> list[ActiveSwap]:
        """Swaps not yet in a terminal state, newest first."""
        stmt = (
            select(SwapRecord)
            .where(SwapRecord.status.not_in(_TERMINAL_VALUES))
            .order_by(SwapRecord.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [record.to_active_swap() for record in result.scalars().all()]

    async def _get_record(self, swap_id: str) -> Optional[SwapRecord]:
        stmt = select(SwapRecord).where(SwapRecord.id == swap_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
