"""
Customer group tier resolution tests.
"""
import pytest

from catalog_pricing.engine.models import PriceTier, Product, TierValueType
from catalog_pricing.engine.tier_resolver import PriceTierResolver, normalize_quantity

FIXED = TierValueType.FIXED
DISCOUNT = TierValueType.DISCOUNT


@pytest.fixture
def resolver(tier_store):
    return PriceTierResolver(tier_store)


def set_tiers(tier_store, product, *tiers):
    tier_store.tiers[product.id] = list(tiers)


def test_no_tiers_returns_base_price(resolver, product):
    assert resolver.resolve(product, 10, 1) == 100.0


@pytest.mark.parametrize("qty", [None, 0, 1])
def test_single_unit_returns_base_price(resolver, tier_store, product, qty):
    set_tiers(tier_store, product, PriceTier(qty=2, value=90))
    assert resolver.resolve(product, qty, 1) == 100.0


def test_threshold_one_tier_applies_to_single_unit(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=1, value=90))
    assert resolver.resolve(product, None, 1) == 90.0


def test_quantity_below_threshold_ignores_tier(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=5, value=80))
    assert resolver.resolve(product, 4, 1) == 100.0


def test_highest_met_threshold_wins(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=5, value=80), PriceTier(qty=3, value=90))

    assert resolver.resolve(product, 3, 1) == 90.0
    assert resolver.resolve(product, 4, 1) == 90.0
    assert resolver.resolve(product, 5, 1) == 80.0
    assert resolver.resolve(product, 50, 1) == 80.0


def test_percent_discount_bounds(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=2, value=0, value_type=DISCOUNT))
    assert resolver.resolve(product, 2, 1) == 100.0

    set_tiers(tier_store, product, PriceTier(qty=2, value=100, value_type=DISCOUNT))
    resolver.invalidate()
    assert resolver.resolve(product, 2, 1) == 0.0


def test_percent_discount_is_taken_off_base_price(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=2, value=25, value_type=DISCOUNT))
    assert resolver.resolve(product, 2, 1) == 75.0


@pytest.mark.parametrize("value", [-5, 100.5, 150])
def test_out_of_range_percent_is_skipped(resolver, tier_store, product, value):
    set_tiers(tier_store, product, PriceTier(qty=2, value=value, value_type=DISCOUNT))
    assert resolver.resolve(product, 2, 1) == 100.0


@pytest.mark.parametrize("value", [100, 120, -1])
def test_fixed_value_must_undercut_current_price(resolver, tier_store, product, value):
    set_tiers(tier_store, product, PriceTier(qty=2, value=value))
    assert resolver.resolve(product, 2, 1) == 100.0


def test_fixed_value_must_undercut_lower_threshold_price(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=2, value=50), PriceTier(qty=5, value=60))
    assert resolver.resolve(product, 10, 1) == 50.0


def test_percent_tier_at_higher_threshold_replaces_fixed_tier(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=2, value=50),
        PriceTier(qty=5, value=10, value_type=DISCOUNT),
    )
    assert resolver.resolve(product, 5, 1) == 90.0


@pytest.mark.parametrize("order", [0, 1])
def test_specific_group_beats_generic_at_equal_threshold(resolver, tier_store, product, order):
    generic = PriceTier(qty=5, value=80, customer_group_id=None)
    specific = PriceTier(qty=5, value=70, customer_group_id=7)
    tiers = [generic, specific] if order == 0 else [specific, generic]
    set_tiers(tier_store, product, *tiers)

    assert resolver.resolve(product, 5, 7) == 70.0


@pytest.mark.parametrize("order", [0, 1])
def test_specific_group_kept_over_cheaper_generic_at_equal_threshold(resolver, tier_store, product, order):
    generic = PriceTier(qty=5, value=60, customer_group_id=None)
    specific = PriceTier(qty=5, value=80, customer_group_id=7)
    tiers = [generic, specific] if order == 0 else [specific, generic]
    set_tiers(tier_store, product, *tiers)

    assert resolver.resolve(product, 5, 7) == 80.0


def test_generic_tier_applies_to_other_groups(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=5, value=80, customer_group_id=None),
        PriceTier(qty=5, value=70, customer_group_id=7),
    )
    assert resolver.resolve(product, 5, 3) == 80.0


def test_other_groups_tiers_are_ignored(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=3, value=50, customer_group_id=9))
    assert resolver.resolve(product, 3, 7) == 100.0


def test_generic_tier_at_higher_threshold_overrides_group_tier(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=3, value=70, customer_group_id=7),
        PriceTier(qty=5, value=60),
    )
    assert resolver.resolve(product, 5, 7) == 60.0


def test_malformed_tier_is_skipped(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=0, value=10),
        PriceTier(qty=-3, value=10),
        PriceTier(qty=2, value=float('nan')),
    )
    assert resolver.resolve(product, 5, 1) == 100.0


def test_tiers_without_quantity_or_value_are_skipped(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=None, value=10),
        PriceTier(qty=3, value=90),
        PriceTier(qty=4, value=None),
    )

    assert resolver.resolve(product, 5, 1) == 90.0
    assert [t.qty for t in resolver.tiers_for(product, 1)] == [3]


def test_result_never_exceeds_base_price(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=2, value=150),
        PriceTier(qty=3, value=-20, value_type=DISCOUNT),
        PriceTier(qty=4, value=99.99),
        PriceTier(qty=6, value=5, value_type=DISCOUNT),
    )
    for qty in range(1, 12):
        assert resolver.resolve(product, qty, 1) <= product.price


def test_ascending_discounts_are_monotonic(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=10, value=80),
        PriceTier(qty=2, value=95),
        PriceTier(qty=5, value=90),
    )
    prices = [resolver.resolve(product, qty, 1) for qty in range(1, 16)]
    assert prices == sorted(prices, reverse=True)
    assert prices[0] == 100.0
    assert prices[-1] == 80.0


def test_trace_records_applied_tiers(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=3, value=90), PriceTier(qty=4, value=150))

    price, trace = resolver.resolve_with_trace(product, 5, 1)

    assert price == 90.0
    steps = [t.step for t in trace]
    assert steps[0] == "Base Price"
    assert "Tier Applied" in steps
    assert "Tier Skipped" in steps


def test_tiers_are_memoized_until_invalidated(resolver, tier_store, product):
    set_tiers(tier_store, product, PriceTier(qty=3, value=90))

    resolver.resolve(product, 3, 1)
    resolver.resolve(product, 4, 1)
    assert tier_store.calls == 1

    resolver.invalidate()
    resolver.resolve(product, 3, 1)
    assert tier_store.calls == 2


def test_tiers_for_orders_specific_before_generic(resolver, tier_store, product):
    set_tiers(
        tier_store, product,
        PriceTier(qty=5, value=80),
        PriceTier(qty=2, value=95),
        PriceTier(qty=5, value=70, customer_group_id=7),
    )
    tiers = resolver.tiers_for(product, 7)
    assert [(t.qty, t.customer_group_id) for t in tiers] == [(2, None), (5, 7), (5, None)]


def test_candidate_price():
    product = Product(id=2, sku="X", price=200.0)
    assert PriceTierResolver.candidate_price(PriceTier(qty=2, value=10, value_type=DISCOUNT), product.price, 150.0) == 180.0
    assert PriceTierResolver.candidate_price(PriceTier(qty=2, value=150), product.price, 150.0) is None
    assert PriceTierResolver.candidate_price(PriceTier(qty=2, value=149), product.price, 150.0) == 149


def test_normalize_quantity():
    assert normalize_quantity(None) == 1
    assert normalize_quantity(0) == 1
    assert normalize_quantity(-2) == 1
    assert normalize_quantity(7) == 7
