"""
Cart Preparation - turns an add-to-cart request into cart line data.
"""
import logging
from typing import Callable, Optional

from ..engine.interfaces import CartLookup, CurrencyConverter, InventoryChecker
from ..engine.models import CartLine, Product
from ..engine.price_facade import ProductPriceFacade
from ..engine.price_index import SaleableCheckCache
from ..exceptions import InsufficientQuantityError
from ..types.product_types import product_type_or_default

logger = logging.getLogger(__name__)


def handle_quantity(quantity: Optional[int]) -> int:
    """Empty or zero quantities mean one unit."""
    return quantity or 1


def compare_options(product: Product, options1: dict, options2: dict) -> bool:
    """
    True when two option sets describe the same cart line of `product`.

    Options must target the product and agree on parent_id: both absent or
    both present and equal.
    """
    if product.id != options2.get('product_id'):
        return False

    has_parent1 = options1.get('parent_id') is not None
    has_parent2 = options2.get('parent_id') is not None

    if has_parent1 and has_parent2:
        return options1['parent_id'] == options2['parent_id']

    return has_parent1 == has_parent2


class CartPreparer:
    """
    Prepares products for the cart and answers saleability questions.

    Args:
        price_for: Builds the price facade of a product for the current requester
        currency: Converts base amounts to the display currency
        inventory: Stock lookup for stockable product types
        saleable_cache: Scope-bound memo of saleability checks
        cart_lookup: Finds a line already in the cart, to merge quantities
        saleable_predicate: Extra saleability rule; returning False blocks the product
    """

    def __init__(
        self,
        price_for: Callable[[Product], ProductPriceFacade],
        currency: CurrencyConverter,
        inventory: Optional[InventoryChecker] = None,
        saleable_cache: Optional[SaleableCheckCache] = None,
        cart_lookup: Optional[CartLookup] = None,
        saleable_predicate: Optional[Callable[[Product], bool]] = None,
    ):
        self.price_for = price_for
        self.currency = currency
        self.inventory = inventory
        self.saleable_cache = saleable_cache if saleable_cache is not None else SaleableCheckCache()
        self.cart_lookup = cart_lookup
        self.saleable_predicate = saleable_predicate

    def is_saleable(self, product: Product) -> bool:
        return self.saleable_cache.check(product, self._check_saleable)

    def _check_saleable(self, product: Product) -> bool:
        if not product.is_active:
            return False

        if self.saleable_predicate is not None and self.saleable_predicate(product) is False:
            return False

        return True

    def total_quantity(self, product: Product) -> int:
        if self.inventory is None:
            return 0
        return self.inventory.total_available(product)

    def have_sufficient_quantity(self, product: Product, quantity: int) -> bool:
        if not product_type_or_default(product.type).is_stockable:
            return True

        if self.inventory is None:
            return True

        return quantity <= self.total_quantity(product)

    def is_item_have_quantity(self, line: CartLine) -> bool:
        return self.have_sufficient_quantity(line.product, line.quantity)

    def get_qty_request(self, data: dict) -> dict:
        """Add the quantity of a matching line already in the cart."""
        data = dict(data)
        if self.cart_lookup is not None:
            item = self.cart_lookup.find_item(data)
            if item is not None:
                data['quantity'] += item.quantity
        return data

    def prepare_for_cart(self, product: Product, data: dict) -> list[dict]:
        """
        Build cart line data for a product.

        Raises:
            InsufficientQuantityError: If the merged quantity exceeds stock
        """
        data = dict(data)
        data['quantity'] = handle_quantity(int(data.get('quantity') or 0))
        data.setdefault('product_id', product.id)

        data = self.get_qty_request(data)
        quantity = data['quantity']

        if not self.have_sufficient_quantity(product, quantity):
            logger.info("Insufficient quantity for product %s (requested %s)", product.id, quantity)
            raise InsufficientQuantityError(product.id, quantity)

        price = self.price_for(product).final_price()
        converted_price = self.currency.convert(price)
        weight = product.weight or 0

        return [
            {
                'product_id': product.id,
                'sku': product.sku,
                'quantity': quantity,
                'name': product.name,
                'price': converted_price,
                'base_price': price,
                'total': converted_price * quantity,
                'base_total': price * quantity,
                'weight': weight,
                'total_weight': weight * quantity,
                'base_total_weight': weight * quantity,
                'type': product.type,
                'additional': self.get_additional_options(data),
            }
        ]

    def get_additional_options(self, data: dict) -> dict:
        return data
