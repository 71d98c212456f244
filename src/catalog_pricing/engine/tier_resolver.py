"""
Tier Resolver - Resolves the unit price of a product from its customer group price tiers.

Used by the price facade and the cart validator whenever a quantity above one
is priced.
"""
import logging
import math
import numbers
from typing import Optional

from .interfaces import PriceTierStore
from .models import PriceTier, Product, TierValueType, TraceStep

logger = logging.getLogger(__name__)


def normalize_quantity(quantity: Optional[int]) -> int:
    """None and non-positive quantities price as a single unit."""
    if quantity is None or quantity < 1:
        return 1
    return int(quantity)


class PriceTierResolver:
    """
    Resolves the effective unit price for a quantity and customer group.

    Resolution order:
    1. Start from the product base price at threshold 1
    2. Walk the tiers open to the group (its own and group-agnostic ones)
    3. A tier is considered only when its threshold is met and is not lower
       than the best threshold so far
    4. At an equal threshold a group-agnostic tier never replaces a
       group-specific one
    5. Discount tiers take 0-100 percent off the base price; fixed tiers
       must undercut the best price so far

    Tier lists are memoized per (product, group) until invalidate() is called.
    """

    def __init__(self, store: PriceTierStore):
        self.store = store
        self._loaded: dict[tuple[int, Optional[int]], list[PriceTier]] = {}

    def tiers_for(self, product: Product, customer_group_id: Optional[int]) -> list[PriceTier]:
        """
        Tiers of a product open to a customer group.

        Malformed tiers are dropped. The rest are sorted by threshold ascending
        with group-specific tiers ahead of group-agnostic ones at the same
        threshold.
        """
        key = (product.id, customer_group_id)
        if key not in self._loaded:
            tiers = []
            for tier in self.store.for_product(product.id):
                if not tier.applies_to(customer_group_id):
                    continue
                if not self._is_well_formed(tier):
                    logger.debug("Skipping malformed tier %s for product %s", tier, product.id)
                    continue
                tiers.append(tier)
            tiers.sort(key=lambda t: (t.qty, t.is_group_agnostic))
            self._loaded[key] = tiers
        return self._loaded[key]

    def invalidate(self):
        self._loaded.clear()

    def resolve(self, product: Product, quantity: Optional[int], customer_group_id: Optional[int]) -> float:
        price, _ = self.resolve_with_trace(product, quantity, customer_group_id)
        return price

    def resolve_with_trace(
        self,
        product: Product,
        quantity: Optional[int],
        customer_group_id: Optional[int]
    ) -> tuple[float, list[TraceStep]]:
        """
        Resolve the unit price with a trace of the tiers that shaped it.

        Returns (unit_price, trace_steps).
        """
        qty = normalize_quantity(quantity)
        trace = [TraceStep("Base Price", f"Product {product.sku} at quantity {qty}", f"${product.price:.2f}")]

        best_qty = 1
        best_price = product.price
        best_group_id = None

        tiers = self.tiers_for(product, customer_group_id)
        if not tiers:
            trace.append(TraceStep("Tiers", "No customer group prices, using base price"))
            return best_price, trace

        for tier in tiers:
            if qty < tier.qty:
                continue

            if tier.qty < best_qty:
                continue

            if tier.qty == best_qty and best_group_id is not None and tier.is_group_agnostic:
                continue

            candidate = self.candidate_price(tier, product.price, best_price)
            if candidate is None:
                logger.debug(
                    "Tier value %s (%s) out of range for product %s",
                    tier.value, tier.value_type.value, product.id
                )
                trace.append(TraceStep(
                    "Tier Skipped",
                    f"{tier.value_type.value} value {tier.value} out of range at qty {tier.qty}"
                ))
                continue

            best_price = candidate
            best_qty = tier.qty
            best_group_id = tier.customer_group_id

            scope = f"group {tier.customer_group_id}" if tier.customer_group_id is not None else "all groups"
            trace.append(TraceStep("Tier Applied", f"qty >= {tier.qty} for {scope}", f"${best_price:.2f}"))

        return best_price, trace

    @staticmethod
    def candidate_price(tier: PriceTier, base_price: float, current_price: float) -> Optional[float]:
        """
        Price a tier would set, or None when its value is out of range.

        Discount tiers are percentages of the base price in [0, 100]; fixed
        tiers must lie in [0, current_price).
        """
        if tier.value_type == TierValueType.DISCOUNT:
            if 0 <= tier.value <= 100:
                return base_price - (base_price * tier.value) / 100
            return None

        if 0 <= tier.value < current_price:
            return tier.value
        return None

    @staticmethod
    def _is_well_formed(tier: PriceTier) -> bool:
        if not isinstance(tier.qty, numbers.Integral) or isinstance(tier.qty, bool) or tier.qty < 1:
            return False
        if not isinstance(tier.value, numbers.Real) or math.isnan(tier.value):
            return False
        return True
