"""
Shared engine instance for the API routers.
"""
from typing import Optional

from ..config.settings import get_settings
from ..data.catalog_store import CatalogStore
from ..pricing_engine import PricingEngine

_catalog: Optional[CatalogStore] = None
_engine: Optional[PricingEngine] = None


def get_catalog() -> CatalogStore:
    global _catalog
    if _catalog is None:
        _catalog = CatalogStore.load(get_settings())
    return _catalog


def get_engine() -> PricingEngine:
    global _engine
    if _engine is None:
        _engine = PricingEngine.from_catalog(get_catalog(), get_settings())
    return _engine


def set_state(catalog: CatalogStore, engine: PricingEngine) -> None:
    """Install a catalog and engine (used by tests and reload)."""
    global _catalog, _engine
    _catalog, _engine = catalog, engine


def reset_state() -> None:
    global _catalog, _engine
    _catalog, _engine = None, None
