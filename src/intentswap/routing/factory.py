"""Factory for intent providers and the engine components built on them.

Creates the live NEAR Intents provider when an API key is configured and
mock mode is not forced, otherwise the simulated provider.
"""

import logging
from typing import Optional

import httpx

from intentswap.assets.catalog import AssetCatalog, CatalogCache, get_catalog_cache
from intentswap.config import Settings, get_settings
from intentswap.routing.base import IntentProvider
from intentswap.routing.dry_run import SimulatedIntentsProvider, SimulationStore

logger = logging.getLogger(__name__)

_simulation_store: Optional[SimulationStore] = None


def get_simulation_store() -> SimulationStore:
    """Process-wide simulation state so intents survive provider re-creation."""
    global _simulation_store
    if _simulation_store is None:
        _simulation_store = SimulationStore()
    return _simulation_store


def reset_simulation_store() -> None:
    global _simulation_store
    _simulation_store = None


def create_near_intents_provider(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> IntentProvider:
    """Create the live NEAR Intents provider from settings."""
    from intentswap.routing.near_intents import NearIntentsProvider

    settings = settings or get_settings()
    return NearIntentsProvider(
        api_url=settings.oneclick_api_url,
        explorer_url=settings.explorer_api_url,
        api_key=settings.near_intents_api_key,
        slippage_bps=settings.slippage_tolerance_bps,
        deadline_seconds=settings.quote_deadline_seconds,
        placeholder_recipient=settings.quote_placeholder_recipient,
        timeout_seconds=settings.request_timeout_seconds,
        transport=transport,
    )


def create_simulated_provider() -> IntentProvider:
    return SimulatedIntentsProvider(store=get_simulation_store())


def create_provider(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> IntentProvider:
    """Create the provider for the configured mode."""
    settings = settings or get_settings()

    if settings.mock_mode:
        if not settings.has_api_key:
            logger.info("No NEAR Intents API key configured, using simulated provider")
        else:
            logger.info("Mock mode forced, using simulated provider")
        return create_simulated_provider()

    logger.info("Using live NEAR Intents provider")
    return create_near_intents_provider(settings, transport=transport)


def create_catalog(
    settings: Optional[Settings] = None,
    cache: Optional[CatalogCache] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AssetCatalog:
    """Create the asset catalog; offline (static list) in mock mode."""
    settings = settings or get_settings()
    if cache is None:
        cache = get_catalog_cache()
        cache.ttl_seconds = settings.catalog_cache_ttl_seconds

    return AssetCatalog(
        tokens_url=settings.tokens_api_url,
        api_key=settings.near_intents_api_key,
        timeout_seconds=settings.catalog_timeout_seconds,
        cache=cache,
        offline=settings.mock_mode,
        transport=transport,
    )
