"""Application services."""

from intentswap.services.swap_service import SwapService, create_swap_service

__all__ = ["SwapService", "create_swap_service"]
