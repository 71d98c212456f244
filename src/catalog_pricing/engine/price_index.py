"""
Scope-bound memoization of price index entries and saleability checks.

Index rows and saleability can change between requests, so every cache here
lives for one resolution scope only. ResolutionScope clears them on exit.
"""
import logging
from typing import Callable, Optional

from .interfaces import PriceIndexStore
from .models import PriceIndexEntry, Product

logger = logging.getLogger(__name__)


class PriceIndexCache:
    """
    Memoized lookup of PriceIndexEntry per (product, customer group).

    A missing entry is memoized too (as None): it means "no discount
    computed" and callers fall back to the product's base price.
    """

    def __init__(self, store: PriceIndexStore):
        self.store = store
        self._entries: dict[tuple[int, int], Optional[PriceIndexEntry]] = {}

    def get(self, product_id: int, customer_group_id: int) -> Optional[PriceIndexEntry]:
        key = (product_id, customer_group_id)
        if key in self._entries:
            return self._entries[key]

        entry = None
        for row in self.store.for_product(product_id):
            if row.customer_group_id == customer_group_id:
                entry = row
                break

        if entry is None:
            logger.debug("No price index entry for product %s, group %s", product_id, customer_group_id)

        self._entries[key] = entry
        return entry

    def invalidate(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class SaleableCheckCache:
    """Memoizes the outcome of a saleability check per product id."""

    def __init__(self):
        self._checks: dict[int, bool] = {}

    def check(self, product: Product, callback: Callable[[Product], bool]) -> bool:
        if product.id not in self._checks:
            self._checks[product.id] = bool(callback(product))
        return self._checks[product.id]

    def invalidate(self):
        self._checks.clear()

    def __len__(self) -> int:
        return len(self._checks)


class ResolutionScope:
    """
    Owns the caches of one request and clears them when the request ends.

    Usage:
        with ResolutionScope(index_cache, saleable_cache, tier_resolver) as scope:
            ...
    """

    def __init__(self, *caches):
        self.caches = list(caches)

    def invalidate(self):
        for cache in self.caches:
            cache.invalidate()

    def __enter__(self) -> 'ResolutionScope':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.invalidate()
        return False
