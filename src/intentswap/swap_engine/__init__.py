"""Swap intent lifecycle: quote, execute, track."""

from intentswap.swap_engine.executor import IntentExecutor
from intentswap.swap_engine.monitor import SwapMonitor
from intentswap.swap_engine.quotes import QuoteEngine, build_quote_request
from intentswap.swap_engine.tracker import STATUS_MAP, StatusTracker, map_provider_status

__all__ = [
    "QuoteEngine",
    "build_quote_request",
    "IntentExecutor",
    "StatusTracker",
    "STATUS_MAP",
    "map_provider_status",
    "SwapMonitor",
]
