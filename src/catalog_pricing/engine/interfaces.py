"""
Contracts for the collaborators the pricing core consumes.

Persistence, tax-address resolution, currency handling and inventory all live
outside this package; the engine only talks to these abstract classes.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .models import Address, CartLine, PriceIndexEntry, PriceTier, Product, TaxRate


class CustomerGroupProvider(ABC):

    @abstractmethod
    def current_group(self) -> int:
        """Return the customer group id of the current requester."""


class PriceIndexStore(ABC):

    @abstractmethod
    def for_product(self, product_id: int) -> list[PriceIndexEntry]:
        """Return the price index rows of a product, one per customer group."""


class PriceTierStore(ABC):

    @abstractmethod
    def for_product(self, product_id: int) -> list[PriceTier]:
        """Return every customer group price tier of a product."""


class TaxCalculator(ABC):

    @abstractmethod
    def is_inclusive_mode(self) -> bool:
        """True when catalog prices are displayed with tax included."""

    @abstractmethod
    def default_address(self) -> Address:
        """Address used for tax evaluation when the requester has none."""

    @abstractmethod
    def applicable_rates(self, tax_category_id: int, address: Address) -> list[TaxRate]:
        """Return the tax rates of a category that apply at an address."""

    def requester_address(self) -> Optional[Address]:
        """Default address of the signed-in customer, if any."""
        return None


class CurrencyConverter(ABC):

    @abstractmethod
    def convert(self, price: float) -> float:
        """Convert a base-currency amount to the display currency."""

    @abstractmethod
    def format(self, price: float) -> str:
        """Convert and format an amount for display."""


class InventoryChecker(ABC):

    @abstractmethod
    def total_available(self, product: Product) -> int:
        """Quantity available for sale across the current channel's sources."""


class CartItemStore(ABC):

    @abstractmethod
    def save(self, line: CartLine) -> None:
        """Persist a mutated cart line."""


class CartLookup(ABC):

    @abstractmethod
    def find_item(self, options: dict) -> Optional[CartLine]:
        """Return the cart line already holding a product with these options."""
