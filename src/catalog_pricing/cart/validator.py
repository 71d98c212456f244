"""
Cart Item Validator - revalidates a cart line against current catalog state.

A line is either marked inactive (its product or a child product was
disabled) or re-priced. The line is written back only when its unit price
actually changed.
"""
import logging
from typing import Callable

from ..engine.interfaces import CartItemStore, CurrencyConverter
from ..engine.models import CartItemValidationResult, CartLine, Product
from ..engine.price_facade import ProductPriceFacade
from ..types.product_types import product_type_or_default

logger = logging.getLogger(__name__)


class InMemoryCartItemStore(CartItemStore):
    """Keeps saved lines in memory; used by the API and tests."""

    def __init__(self):
        self.saved: list[CartLine] = []

    def save(self, line: CartLine) -> None:
        self.saved.append(line)


class CartItemValidator:
    """
    Args:
        price_for: Builds the price facade of a product for the current requester
        currency: Converts base amounts to the display currency
        store: Persists re-priced lines
        precision: Decimal places the captured base price is compared at
    """

    def __init__(
        self,
        price_for: Callable[[Product], ProductPriceFacade],
        currency: CurrencyConverter,
        store: CartItemStore,
        precision: int = 4,
    ):
        self.price_for = price_for
        self.currency = currency
        self.store = store
        self.precision = precision

    def is_cart_item_inactive(self, line: CartLine) -> bool:
        """True if the line's product, a bundle child or the chosen variant is disabled."""
        if not line.product.is_active:
            return True

        product_type = product_type_or_default(line.product.type)

        if product_type.checks_children_status:
            for child in line.children:
                if not child.product.is_active:
                    return True

        if product_type.has_variants:
            if line.child is not None and not line.child.product.is_active:
                return True

        return False

    def validate(self, line: CartLine) -> CartItemValidationResult:
        result = CartItemValidationResult()

        if self.is_cart_item_inactive(line):
            logger.info("Cart line %s (product %s) is inactive", line.id, line.product.id)
            result.item_is_inactive()
            return result

        price = round(self.price_for(line.product).final_price(line.quantity), self.precision)

        if price == line.base_price:
            return result

        logger.info(
            "Re-pricing cart line %s (product %s): %s -> %s",
            line.id, line.product.id, line.base_price, price
        )

        base_total = price * line.quantity
        line.update_prices(
            base_price=price,
            price=self.currency.convert(price),
            base_total=base_total,
            total=self.currency.convert(base_total),
        )
        self.store.save(line)

        result.price_changed = True
        return result
