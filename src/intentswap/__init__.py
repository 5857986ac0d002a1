"""Swap intent lifecycle engine for cross-chain swaps to and from ZEC."""

__version__ = "0.1.0"
