"""Asset catalog, static fallback data and provider id resolution."""

from intentswap.assets.catalog import AssetCatalog, CatalogCache, get_catalog_cache
from intentswap.assets.fallback import FALLBACK_ASSETS, HOME_ASSET
from intentswap.assets.identity import AssetIdentityResolver, resolve_provider_asset_id

__all__ = [
    "AssetCatalog",
    "CatalogCache",
    "get_catalog_cache",
    "FALLBACK_ASSETS",
    "HOME_ASSET",
    "AssetIdentityResolver",
    "resolve_provider_asset_id",
]
