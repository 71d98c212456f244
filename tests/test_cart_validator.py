"""
Cart line revalidation tests.
"""
import pytest

from catalog_pricing.cart.validator import CartItemValidator
from catalog_pricing.engine.currency import FixedRateCurrencyConverter
from catalog_pricing.engine.models import PriceIndexEntry, PriceTier, Product, ProductStatus, TierValueType


@pytest.fixture
def bundle():
    return Product(id=20, sku="KIT", price=150.0, type="bundle")


@pytest.fixture
def configurable():
    return Product(id=30, sku="HOODIE", price=60.0, type="configurable")


def inactive(product_id, sku="OFF"):
    return Product(id=product_id, sku=sku, price=10.0, status=ProductStatus.INACTIVE)


def test_unchanged_price_does_not_write(engine, cart_store, product, line_factory):
    line = line_factory(product, quantity=1, base_price=100.0)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is False
    assert result.price_changed is False
    assert cart_store.writes == 0


def test_price_equal_to_four_decimals_does_not_write(engine, tier_store, cart_store, product, line_factory):
    tier_store.tiers[product.id] = [PriceTier(qty=2, value=33.33333, value_type=TierValueType.DISCOUNT)]
    line = line_factory(product, quantity=2, base_price=66.6667)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.price_changed is False
    assert cart_store.writes == 0
    assert line.base_price == 66.6667


def test_changed_price_rewrites_line_once(engine, tier_store, cart_store, product, line_factory):
    tier_store.tiers[product.id] = [PriceTier(qty=5, value=80)]
    line = line_factory(product, quantity=5, base_price=100.0)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is False
    assert result.price_changed is True
    assert cart_store.writes == 1
    assert cart_store.saved == [line]
    assert line.base_price == 80.0
    assert line.price == 80.0
    assert line.base_total == 400.0
    assert line.total == 400.0


def test_single_unit_line_is_repriced_from_index(engine, index_store, cart_store, product, line_factory):
    index_store.entries[product.id] = [PriceIndexEntry(
        product_id=product.id, customer_group_id=1,
        min_price=92.5, max_price=92.5, regular_min_price=100.0, regular_max_price=100.0,
    )]
    line = line_factory(product, quantity=1, base_price=100.0)

    with engine.scope(1):
        engine.validate_cart_item(line)

    assert line.base_price == 92.5
    assert cart_store.writes == 1


def test_changed_price_converts_display_fields(engine, tier_store, cart_store, product, line_factory):
    tier_store.tiers[product.id] = [PriceTier(qty=2, value=40)]
    validator = CartItemValidator(
        engine.price_for, FixedRateCurrencyConverter(rate=2.0), cart_store
    )
    line = line_factory(product, quantity=2, base_price=100.0)

    with engine.scope():
        validator.validate(line)

    assert line.base_price == 40.0
    assert line.price == 80.0
    assert line.base_total == 80.0
    assert line.total == 160.0
    assert cart_store.writes == 1


def test_inactive_product_is_not_repriced(engine, tier_store, cart_store, line_factory):
    product = Product(id=5, sku="OFF", price=100.0, status=ProductStatus.INACTIVE)
    tier_store.tiers[product.id] = [PriceTier(qty=2, value=40)]
    line = line_factory(product, quantity=2, base_price=100.0)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is True
    assert result.price_changed is False
    assert line.base_price == 100.0
    assert line.base_total == 200.0
    assert cart_store.writes == 0


def test_bundle_with_inactive_child_is_inactive(engine, tier_store, cart_store, bundle, line_factory):
    tier_store.tiers[bundle.id] = [PriceTier(qty=1, value=100)]
    children = [
        line_factory(Product(id=21, sku="A", price=50.0)),
        line_factory(inactive(22)),
    ]
    line = line_factory(bundle, quantity=1, base_price=150.0, children=children)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is True
    assert line.base_price == 150.0
    assert line.price == 150.0
    assert cart_store.writes == 0


def test_bundle_with_active_children_is_active(engine, cart_store, bundle, line_factory):
    children = [line_factory(Product(id=21, sku="A", price=50.0))]
    line = line_factory(bundle, quantity=1, base_price=150.0, children=children)

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is False
    assert cart_store.writes == 0


def test_configurable_with_inactive_variant_is_inactive(engine, cart_store, configurable, line_factory):
    line = line_factory(configurable, base_price=60.0, child=line_factory(inactive(31)))

    with engine.scope():
        assert engine.validate_cart_item(line).inactive is True
    assert cart_store.writes == 0


def test_configurable_with_active_variant_is_active(engine, cart_store, configurable, line_factory):
    variant = Product(id=31, sku="HOODIE-M", price=60.0, parent=configurable)
    line = line_factory(configurable, base_price=60.0, child=line_factory(variant))

    with engine.scope():
        assert engine.validate_cart_item(line).inactive is False


def test_simple_line_ignores_child_lines(engine, product, line_factory):
    line = line_factory(product, base_price=100.0, children=[line_factory(inactive(40))])

    with engine.scope():
        assert engine.validate_cart_item(line).inactive is False


def test_unknown_product_type_is_validated_like_simple(engine, tier_store, cart_store, line_factory):
    product = Product(id=50, sku="ROOM", price=80.0, type="booking")
    tier_store.tiers[product.id] = [PriceTier(qty=2, value=70)]
    line = line_factory(product, quantity=2, base_price=80.0, children=[line_factory(inactive(51))])

    with engine.scope():
        result = engine.validate_cart_item(line)

    assert result.inactive is False
    assert result.price_changed is True
    assert line.base_price == 70.0
    assert cart_store.writes == 1


def test_unknown_inactive_product_is_inactive(engine, line_factory):
    product = Product(id=52, sku="ROOM", price=80.0, type="booking", status=ProductStatus.INACTIVE)

    with engine.scope():
        assert engine.validate_cart_item(line_factory(product)).inactive is True


def test_grouped_line_ignores_child_status(engine, line_factory):
    grouped = Product(id=60, sku="SET", price=40.0, type="grouped")
    line = line_factory(grouped, base_price=40.0, children=[line_factory(inactive(61))])

    with engine.scope():
        assert engine.validate_cart_item(line).inactive is False
