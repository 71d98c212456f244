"""
Table-driven tax calculator.

A reference TaxCalculator over a list of TaxRate rows. Real deployments plug
in their own address resolution; the pricing facade only needs the contract.
"""
from typing import Iterable, Optional

from .interfaces import TaxCalculator
from .models import Address, TaxRate


class TableTaxCalculator(TaxCalculator):
    """
    Matches tax rates by category, country, optional state and optional zip range.

    Args:
        rates: TaxRate rows
        inclusive: Whether catalog prices are shown with tax included
        default_address: Address used when the requester has none
        customer_address: Default address of the signed-in customer, if any
    """

    def __init__(
        self,
        rates: Iterable[TaxRate],
        inclusive: bool = False,
        default_address: Optional[Address] = None,
        customer_address: Optional[Address] = None,
    ):
        self.rates = list(rates)
        self.inclusive = inclusive
        self._default_address = default_address or Address(country="US")
        self.customer_address = customer_address

    def is_inclusive_mode(self) -> bool:
        return self.inclusive

    def default_address(self) -> Address:
        return self._default_address

    def requester_address(self) -> Optional[Address]:
        return self.customer_address

    def applicable_rates(self, tax_category_id: int, address: Address) -> list[TaxRate]:
        return [
            rate for rate in self.rates
            if rate.tax_category_id == tax_category_id and self._matches(rate, address)
        ]

    @staticmethod
    def _matches(rate: TaxRate, address: Address) -> bool:
        if rate.country != address.country:
            return False

        if rate.state and rate.state != '*' and rate.state != address.state:
            return False

        if rate.zip_from and rate.zip_from != '*':
            if not address.postcode:
                return False
            zip_to = rate.zip_to or rate.zip_from
            if not (rate.zip_from <= address.postcode <= zip_to):
                return False

        return True
