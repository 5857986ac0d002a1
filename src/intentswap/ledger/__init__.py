"""Swap history persistence."""

from intentswap.ledger.database import close_db, get_db, get_engine, get_session_factory, init_db
from intentswap.ledger.models import Base, SwapRecord
from intentswap.ledger.repository import SwapRepository

__all__ = [
    "Base",
    "SwapRecord",
    "SwapRepository",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "close_db",
]
