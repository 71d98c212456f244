"""
Product types as capability sets.

Each type tag maps to an immutable set of flags. Cart and pricing code branch
on the flags (is_composite, has_variants, ...) rather than on the tag itself.
"""
import logging
from dataclasses import dataclass

from ..exceptions import UnknownProductTypeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductType:
    """Capabilities shared by every product of one type."""
    code: str
    is_composite: bool = False
    checks_children_status: bool = False  # inactive child disables the line
    has_variants: bool = False
    is_stockable: bool = True
    show_quantity_box: bool = False
    allow_multiple_qty: bool = True
    is_children_calculated: bool = False
    can_be_copied: bool = True
    can_be_moved_from_wishlist_to_cart: bool = True
    price_rule_can_be_applied: bool = True


SIMPLE = ProductType(code="simple", show_quantity_box=True)

VIRTUAL = ProductType(code="virtual", show_quantity_box=True)

DOWNLOADABLE = ProductType(
    code="downloadable",
    is_stockable=False,
    can_be_moved_from_wishlist_to_cart=False,
)

CONFIGURABLE = ProductType(
    code="configurable",
    has_variants=True,
    is_stockable=False,
    show_quantity_box=True,
    can_be_copied=False,
    can_be_moved_from_wishlist_to_cart=False,
)

BUNDLE = ProductType(
    code="bundle",
    is_composite=True,
    checks_children_status=True,
    is_stockable=False,
    show_quantity_box=True,
    is_children_calculated=True,
    can_be_moved_from_wishlist_to_cart=False,
    price_rule_can_be_applied=False,
)

GROUPED = ProductType(
    code="grouped",
    is_composite=True,
    is_stockable=False,
    is_children_calculated=True,
    can_be_moved_from_wishlist_to_cart=False,
    price_rule_can_be_applied=False,
)

PRODUCT_TYPES: dict[str, ProductType] = {
    t.code: t for t in (SIMPLE, VIRTUAL, DOWNLOADABLE, CONFIGURABLE, BUNDLE, GROUPED)
}


def get_product_type(code: str) -> ProductType:
    """Look up the capability set of a type tag."""
    try:
        return PRODUCT_TYPES[str(code).strip().lower()]
    except KeyError:
        raise UnknownProductTypeError(code) from None


def product_type_or_default(code: str, default: ProductType = SIMPLE) -> ProductType:
    """Like get_product_type, but unregistered tags get the default capabilities."""
    try:
        return get_product_type(code)
    except UnknownProductTypeError:
        logger.warning("Unknown product type %r, treating it as %s", code, default.code)
        return default
