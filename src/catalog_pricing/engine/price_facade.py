"""
Product Price Facade - regular, final, minimal and maximal prices of one product.

Combines the price index cache, the tier resolver and tax evaluation for the
current customer group. Every quantity falls back to the product base price
when no price index entry exists for the group.
"""
import logging
from typing import Optional

from .interfaces import CurrencyConverter, CustomerGroupProvider, TaxCalculator
from .models import FormattedPrice, OfferLine, PriceIndexEntry, PriceSummary, Product, TraceStep
from .price_index import PriceIndexCache
from .tier_resolver import PriceTierResolver

logger = logging.getLogger(__name__)

OFFER_TEMPLATE = "Buy {qty} for {price} each and save {discount}%"


class ProductPriceFacade:
    """
    Price views of a single product for the requester's customer group.

    Args:
        product: Product being priced
        customer_groups: Provides the current customer group
        index_cache: Scope-bound price index lookup
        tier_resolver: Customer group tier resolution
        tax: Tax calculator used by evaluate_price
        currency: Display currency conversion and formatting
    """

    def __init__(
        self,
        product: Product,
        customer_groups: CustomerGroupProvider,
        index_cache: PriceIndexCache,
        tier_resolver: PriceTierResolver,
        tax: TaxCalculator,
        currency: CurrencyConverter,
    ):
        self.product = product
        self.customer_groups = customer_groups
        self.index_cache = index_cache
        self.tier_resolver = tier_resolver
        self.tax = tax
        self.currency = currency

    @property
    def customer_group_id(self) -> int:
        return self.customer_groups.current_group()

    def price_index(self) -> Optional[PriceIndexEntry]:
        return self.index_cache.get(self.product.id, self.customer_group_id)

    def minimal_price(self) -> float:
        entry = self.price_index()
        return entry.min_price if entry else self.product.price

    def regular_minimal_price(self) -> float:
        entry = self.price_index()
        return entry.regular_min_price if entry else self.product.price

    def maximal_price(self) -> float:
        entry = self.price_index()
        return entry.max_price if entry else self.product.price

    def regular_maximal_price(self) -> float:
        entry = self.price_index()
        return entry.regular_max_price if entry else self.product.price

    def final_price(self, quantity: Optional[int] = None) -> float:
        """Unit price at a quantity; a single unit costs the minimal price."""
        if quantity is None or quantity == 1:
            return self.minimal_price()

        return self.tier_resolver.resolve(self.product, quantity, self.customer_group_id)

    def final_price_with_trace(self, quantity: Optional[int] = None) -> tuple[float, list[TraceStep]]:
        if quantity is None or quantity == 1:
            entry = self.price_index()
            if entry is None:
                return self.product.price, [TraceStep("Fallback", "No price index entry, using base price", f"${self.product.price:.2f}")]
            return entry.min_price, [TraceStep("Price Index", f"Minimal price for group {self.customer_group_id}", f"${entry.min_price:.2f}")]

        return self.tier_resolver.resolve_with_trace(self.product, quantity, self.customer_group_id)

    def has_discount(self) -> bool:
        entry = self.price_index()
        if entry is None:
            return False
        return entry.min_price != entry.regular_min_price

    def is_on_sale(self) -> bool:
        return self.minimal_price() < self.product.price

    def offer_lines(self) -> list[OfferLine]:
        """
        Volume offers open to the current group, ascending by quantity.

        One offer per distinct threshold of 2 or more. Offers that do not beat
        the product's special price are left out, as are all offers of a
        product whose base price is not positive.
        """
        base_price = self.product.price
        if base_price <= 0:
            logger.debug("Product %s has base price %s, no offers shown", self.product.id, base_price)
            return []

        group_id = self.customer_group_id
        seen = set()
        offers = []

        for tier in self.tier_resolver.tiers_for(self.product, group_id):
            if tier.qty <= 1 or tier.qty in seen:
                continue
            seen.add(tier.qty)

            price = self.tier_resolver.resolve(self.product, tier.qty, group_id)

            if self.product.special_price is not None and price >= self.product.special_price:
                continue

            discount = round((base_price - price) * 100 / base_price, 2)
            offers.append(OfferLine(qty=tier.qty, price=price, discount=discount))

        return offers

    def offer_line_texts(self) -> list[str]:
        return [
            OFFER_TEMPLATE.format(
                qty=offer.qty,
                price=self.currency.format(offer.price),
                discount=f"{offer.discount:.2f}",
            )
            for offer in self.offer_lines()
        ]

    def tax_category(self) -> Optional[int]:
        """Tax category of the product, taken from the parent for variants."""
        if self.product.parent is not None:
            return self.product.parent.tax_category_id
        return self.product.tax_category_id

    def tax_inclusive_rate(self, total_price: float) -> float:
        """Add every applicable tax rate to a price, rounding each addend to 4 decimals."""
        tax_category_id = self.tax_category()
        if tax_category_id is None:
            return total_price

        address = self.tax.requester_address() or self.tax.default_address()

        for rate in self.tax.applicable_rates(tax_category_id, address):
            total_price = round(total_price, 4) + round((total_price * rate.tax_rate) / 100, 4)

        return total_price

    def evaluate_price(self, price: float) -> float:
        rounded_price = round(price, 2)

        if self.tax.is_inclusive_mode():
            return self.tax_inclusive_rate(rounded_price)
        return rounded_price

    def product_prices(self) -> PriceSummary:
        """Regular and final price in display currency, numeric and formatted."""
        regular = self.evaluate_price(self.product.price)
        final = self.evaluate_price(self.minimal_price())

        return PriceSummary(
            regular_price=FormattedPrice(self.currency.convert(regular), self.currency.format(regular)),
            final_price=FormattedPrice(self.currency.convert(final), self.currency.format(final)),
            on_sale=self.is_on_sale(),
        )
