"""Engine subpackage - core price resolution logic."""
from .models import (
    CartItemValidationResult, CartLine, OfferLine, PriceIndexEntry, PriceSummary,
    PriceTier, Product, ProductStatus, TierValueType,
)
from .price_facade import ProductPriceFacade
from .price_index import PriceIndexCache, ResolutionScope, SaleableCheckCache
from .tier_resolver import PriceTierResolver

__all__ = [
    'CartItemValidationResult', 'CartLine', 'OfferLine', 'PriceIndexEntry', 'PriceSummary',
    'PriceTier', 'Product', 'ProductStatus', 'TierValueType',
    'ProductPriceFacade', 'PriceIndexCache', 'ResolutionScope', 'SaleableCheckCache',
    'PriceTierResolver',
]
