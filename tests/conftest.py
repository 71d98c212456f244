import os
import sys
from pathlib import Path

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from catalog_pricing.config.settings import Settings
from catalog_pricing.engine.currency import FixedRateCurrencyConverter
from catalog_pricing.engine.interfaces import (
    CartItemStore, InventoryChecker, PriceIndexStore, PriceTierStore,
)
from catalog_pricing.engine.models import CartLine, Product
from catalog_pricing.engine.tax import TableTaxCalculator
from catalog_pricing.pricing_engine import PricingEngine

DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


class ListTierStore(PriceTierStore):
    def __init__(self, tiers=None):
        self.tiers = tiers or {}
        self.calls = 0

    def for_product(self, product_id):
        self.calls += 1
        return list(self.tiers.get(product_id, []))


class ListIndexStore(PriceIndexStore):
    def __init__(self, entries=None):
        self.entries = entries or {}
        self.calls = 0

    def for_product(self, product_id):
        self.calls += 1
        return list(self.entries.get(product_id, []))


class StaticInventory(InventoryChecker):
    def __init__(self, stock=None):
        self.stock = stock or {}

    def total_available(self, product):
        return self.stock.get(product.id, 0)


class SpyCartItemStore(CartItemStore):
    """Counts persistence writes."""

    def __init__(self):
        self.writes = 0
        self.saved = []

    def save(self, line):
        self.writes += 1
        self.saved.append(line)


@pytest.fixture
def settings(tmp_path):
    return Settings(project_root=tmp_path, data_dir=tmp_path)


@pytest.fixture
def tier_store():
    return ListTierStore()


@pytest.fixture
def index_store():
    return ListIndexStore()


@pytest.fixture
def cart_store():
    return SpyCartItemStore()


@pytest.fixture
def inventory():
    return StaticInventory()


@pytest.fixture
def engine(settings, tier_store, index_store, cart_store, inventory):
    return PricingEngine(
        tier_store=tier_store,
        index_store=index_store,
        tax=TableTaxCalculator([]),
        currency=FixedRateCurrencyConverter(),
        inventory=inventory,
        cart_store=cart_store,
        settings=settings,
    )


@pytest.fixture
def product():
    return Product(id=1, sku="TEE-001", name="Basic Tee", price=100.0, tax_category_id=1)


def make_line(product, quantity=1, base_price=None, **kwargs):
    base_price = product.price if base_price is None else base_price
    return CartLine(
        product=product,
        quantity=quantity,
        base_price=base_price,
        price=base_price,
        base_total=base_price * quantity,
        total=base_price * quantity,
        **kwargs
    )


@pytest.fixture
def line_factory():
    return make_line
