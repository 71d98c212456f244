"""
Fixed-rate currency converter for display prices.
"""
from .interfaces import CurrencyConverter


class FixedRateCurrencyConverter(CurrencyConverter):
    """Converts base amounts with a constant exchange rate."""

    def __init__(self, rate: float = 1.0, symbol: str = "$", precision: int = 2):
        self.rate = rate
        self.symbol = symbol
        self.precision = precision

    def convert(self, price: float) -> float:
        return price * self.rate

    def format(self, price: float) -> str:
        amount = self.convert(price)
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.symbol}{abs(amount):,.{self.precision}f}"
