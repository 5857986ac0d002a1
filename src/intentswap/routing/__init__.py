"""Intent providers.

Providers:
- NEAR Intents: live 1Click API quotes, execution and explorer tracking
- Simulated: deterministic mock mode, no network access
"""

from intentswap.routing.base import IntentProvider, ProviderStatus, index_providers
from intentswap.routing.dry_run import SimulatedIntentsProvider, SimulationStore
from intentswap.routing.factory import (
    create_catalog,
    create_near_intents_provider,
    create_provider,
    create_simulated_provider,
    get_simulation_store,
)
from intentswap.routing.near_intents import NearIntentsProvider

__all__ = [
    # Base classes
    "IntentProvider",
    "ProviderStatus",
    "index_providers",
    # Providers
    "NearIntentsProvider",
    "SimulatedIntentsProvider",
    "SimulationStore",
    # Factory functions
    "create_provider",
    "create_near_intents_provider",
    "create_simulated_provider",
    "create_catalog",
    "get_simulation_store",
]
