"""
Product type capability tests.
"""
import pytest

from catalog_pricing.exceptions import UnknownProductTypeError
from catalog_pricing.types.product_types import PRODUCT_TYPES, SIMPLE, get_product_type, product_type_or_default


def test_registry_covers_catalog_types():
    assert set(PRODUCT_TYPES) == {"simple", "virtual", "downloadable", "configurable", "bundle", "grouped"}


def test_composite_and_variant_flags():
    assert get_product_type("bundle").is_composite is True
    assert get_product_type("grouped").is_composite is True
    assert get_product_type("configurable").has_variants is True
    assert get_product_type("simple").is_composite is False
    assert get_product_type("simple").has_variants is False


def test_stockable_flags():
    assert get_product_type("simple").is_stockable is True
    assert get_product_type("virtual").is_stockable is True
    assert get_product_type("downloadable").is_stockable is False
    assert get_product_type("bundle").is_stockable is False


def test_lookup_is_case_insensitive():
    assert get_product_type(" Bundle ") is PRODUCT_TYPES["bundle"]


def test_unknown_type_raises():
    with pytest.raises(UnknownProductTypeError) as exc_info:
        get_product_type("giftcard")
    assert exc_info.value.details == {'type': 'giftcard'}
    assert "giftcard" in str(exc_info.value)


def test_only_bundles_check_child_status():
    assert get_product_type("bundle").checks_children_status is True
    assert get_product_type("grouped").checks_children_status is False
    assert get_product_type("configurable").checks_children_status is False


def test_unknown_type_falls_back_to_simple(caplog):
    with caplog.at_level("WARNING"):
        assert product_type_or_default("booking") is SIMPLE
    assert "booking" in caplog.text

    assert product_type_or_default("bundle") is PRODUCT_TYPES["bundle"]
