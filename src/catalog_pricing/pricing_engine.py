"""
Pricing Engine - wires the catalog collaborators, the scope-bound caches, the
tier resolver, the price facade and the cart services together.

One engine serves many requests; each request runs inside `engine.scope()`
so price index rows, tier lists and saleability checks never leak from one
request (or customer group) into the next.
"""
import logging
from typing import Callable, Optional

from .cart.preparation import CartPreparer
from .cart.validator import CartItemValidator, InMemoryCartItemStore
from .config.settings import Settings, get_settings
from .engine.currency import FixedRateCurrencyConverter
from .engine.interfaces import (
    CartItemStore, CartLookup, CurrencyConverter, CustomerGroupProvider,
    InventoryChecker, PriceIndexStore, PriceTierStore, TaxCalculator,
)
from .engine.models import Address, CartItemValidationResult, CartLine, OfferLine, Product, TraceStep
from .engine.price_facade import ProductPriceFacade
from .engine.price_index import PriceIndexCache, ResolutionScope, SaleableCheckCache
from .engine.tax import TableTaxCalculator
from .engine.tier_resolver import PriceTierResolver

logger = logging.getLogger(__name__)


class RequestCustomerGroup(CustomerGroupProvider):
    """Customer group of the current request, falling back to a default group."""

    def __init__(self, default_group_id: int):
        self.default_group_id = default_group_id
        self.group_id: Optional[int] = None

    def current_group(self) -> int:
        return self.group_id if self.group_id is not None else self.default_group_id


class PricingEngine:
    """
    Core pricing engine that resolves prices using Customer Group → Tier → Price pipeline.

    Resolution order:
    1. Single units use the precomputed price index entry of the customer group
    2. Larger quantities walk the customer group price tiers
    3. Fall back to the product base price when neither applies
    4. Evaluate display prices through tax and currency collaborators
    """

    def __init__(
        self,
        tier_store: PriceTierStore,
        index_store: PriceIndexStore,
        tax: TaxCalculator,
        currency: CurrencyConverter,
        customer_groups: Optional[CustomerGroupProvider] = None,
        inventory: Optional[InventoryChecker] = None,
        cart_store: Optional[CartItemStore] = None,
        cart_lookup: Optional[CartLookup] = None,
        saleable_predicate: Optional[Callable[[Product], bool]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        if customer_groups is None:
            customer_groups = RequestCustomerGroup(self.settings.default_customer_group_id)
        self.customer_groups = customer_groups
        self.tax = tax
        self.currency = currency

        self.index_cache = PriceIndexCache(index_store)
        self.saleable_cache = SaleableCheckCache()
        self.tier_resolver = PriceTierResolver(tier_store)

        self.cart_store = cart_store if cart_store is not None else InMemoryCartItemStore()
        self.validator = CartItemValidator(
            self.price_for, currency, self.cart_store, precision=self.settings.cart_precision
        )
        self.preparer = CartPreparer(
            self.price_for,
            currency,
            inventory=inventory,
            saleable_cache=self.saleable_cache,
            cart_lookup=cart_lookup,
            saleable_predicate=saleable_predicate,
        )

    @classmethod
    def from_catalog(
        cls,
        catalog,
        settings: Optional[Settings] = None,
        customer_address: Optional[Address] = None,
        **kwargs
    ) -> 'PricingEngine':
        """Build an engine over a CatalogStore using settings for tax and currency."""
        settings = settings or get_settings()
        tax = TableTaxCalculator(
            catalog.tax_rates,
            inclusive=settings.tax_inclusive,
            customer_address=customer_address,
        )
        currency = FixedRateCurrencyConverter(
            rate=settings.currency_rate,
            symbol=settings.currency_symbol,
            precision=settings.display_precision,
        )
        return cls(
            tier_store=catalog.tiers,
            index_store=catalog.price_indices,
            tax=tax,
            currency=currency,
            inventory=catalog.inventory,
            settings=settings,
            **kwargs
        )

    def scope(self, customer_group_id: Optional[int] = None) -> ResolutionScope:
        """
        Start a resolution scope, optionally for a specific customer group.

        All caches are cleared when the scope exits.
        """
        self.invalidate()
        if isinstance(self.customer_groups, RequestCustomerGroup):
            self.customer_groups.group_id = customer_group_id
        return ResolutionScope(self.index_cache, self.saleable_cache, self.tier_resolver)

    def invalidate(self):
        self.index_cache.invalidate()
        self.saleable_cache.invalidate()
        self.tier_resolver.invalidate()

    def price_for(self, product: Product) -> ProductPriceFacade:
        return ProductPriceFacade(
            product,
            self.customer_groups,
            self.index_cache,
            self.tier_resolver,
            self.tax,
            self.currency,
        )

    def final_price(self, product: Product, quantity: Optional[int] = None) -> float:
        return self.price_for(product).final_price(quantity)

    def final_price_with_trace(self, product: Product, quantity: Optional[int] = None) -> tuple[float, list[TraceStep]]:
        return self.price_for(product).final_price_with_trace(quantity)

    def offer_lines(self, product: Product) -> list[OfferLine]:
        return self.price_for(product).offer_lines()

    def validate_cart_item(self, line: CartLine) -> CartItemValidationResult:
        return self.validator.validate(line)

    def prepare_for_cart(self, product: Product, data: dict) -> list[dict]:
        return self.preparer.prepare_for_cart(product, data)

    def is_saleable(self, product: Product) -> bool:
        return self.preparer.is_saleable(product)
