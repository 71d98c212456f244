"""
Data models for the catalog pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TierValueType(str, Enum):
    """How a customer group price value is interpreted."""
    FIXED = "fixed"
    DISCOUNT = "discount"  # percent off the base price


@dataclass
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class Product:
    """A catalog product as seen by the pricing core."""
    id: int
    sku: str
    price: float
    type: str = "simple"
    name: str = ""
    status: ProductStatus = ProductStatus.ACTIVE
    parent: Optional['Product'] = None
    special_price: Optional[float] = None
    tax_category_id: Optional[int] = None
    weight: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE


@dataclass(frozen=True)
class PriceTier:
    """A customer group price rule lowering the unit price at a quantity threshold."""
    qty: int
    value: float
    value_type: TierValueType = TierValueType.FIXED
    customer_group_id: Optional[int] = None
    product_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.value_type, TierValueType):
            object.__setattr__(self, 'value_type', TierValueType(str(self.value_type).lower()))

    @property
    def is_group_agnostic(self) -> bool:
        return self.customer_group_id is None

    def applies_to(self, customer_group_id: Optional[int]) -> bool:
        """True for tiers of this group and for tiers open to all groups."""
        return self.customer_group_id is None or self.customer_group_id == customer_group_id


@dataclass(frozen=True)
class PriceIndexEntry:
    """Precomputed min/max price summary for one product and customer group."""
    product_id: int
    customer_group_id: int
    min_price: float
    max_price: float
    regular_min_price: float
    regular_max_price: float


@dataclass(frozen=True)
class Address:
    country: str
    state: Optional[str] = None
    postcode: Optional[str] = None


@dataclass(frozen=True)
class TaxRate:
    """A tax rate row attached to a tax category."""
    tax_category_id: int
    country: str
    tax_rate: float
    state: Optional[str] = None
    zip_from: Optional[str] = None
    zip_to: Optional[str] = None


@dataclass
class CartLine:
    """A cart line item with the prices captured when it was added."""
    product: Product
    quantity: int
    base_price: float
    price: float
    base_total: float
    total: float
    id: Optional[int] = None
    weight: float = 0.0
    total_weight: float = 0.0
    base_total_weight: float = 0.0
    child: Optional['CartLine'] = None  # single variant line (configurable)
    children: list['CartLine'] = field(default_factory=list)  # composite lines (bundle)
    additional: dict[str, Any] = field(default_factory=dict)

    def update_prices(self, base_price: float, price: float, base_total: float, total: float):
        """Overwrite all captured price fields together."""
        self.base_price, self.price, self.base_total, self.total = base_price, price, base_total, total


@dataclass
class CartItemValidationResult:
    """Outcome of revalidating a cart line against the catalog."""
    inactive: bool = False
    price_changed: bool = False

    def item_is_inactive(self):
        self.inactive = True


@dataclass(frozen=True)
class FormattedPrice:
    price: float
    formatted_price: str


@dataclass(frozen=True)
class PriceSummary:
    """Regular and final price of a product in display currency."""
    regular_price: FormattedPrice
    final_price: FormattedPrice
    on_sale: bool = False

    def to_dict(self) -> dict:
        return {
            "regular_price": {
                "price": self.regular_price.price,
                "formatted_price": self.regular_price.formatted_price,
            },
            "final_price": {
                "price": self.final_price.price,
                "formatted_price": self.final_price.formatted_price,
            },
            "on_sale": self.on_sale,
        }


@dataclass(frozen=True)
class OfferLine:
    """A volume offer: buy `qty` for `price` each and save `discount` percent."""
    qty: int
    price: float
    discount: float
