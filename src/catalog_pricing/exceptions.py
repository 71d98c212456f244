"""
Exception classes for the catalog pricing package.

Tier value problems, missing price index entries and inactive products are
not errors: they resolve to a fallback price or a validation outcome.
"""


class CatalogPricingError(Exception):
    """
    Base exception for all catalog pricing errors.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (product ids, quantities, ...)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class ProductNotFoundError(CatalogPricingError):
    """Raised when a product id is not present in the catalog."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class UnknownProductTypeError(CatalogPricingError):
    """Raised when a product carries a type tag with no registered capabilities."""

    def __init__(self, type_tag: str):
        super().__init__(
            f"Unknown product type '{type_tag}'",
            details={'type': type_tag}
        )
        self.type_tag = type_tag


class InsufficientQuantityError(CatalogPricingError):
    """Raised when a product cannot be added to the cart in the requested quantity."""

    def __init__(self, product_id: int, requested: int):
        super().__init__(
            f"The requested quantity is not available for product {product_id}",
            details={'product_id': product_id, 'requested': requested}
        )
        self.product_id = product_id
        self.requested = requested


class DataSourceError(CatalogPricingError):
    """Raised when catalog data files are missing or malformed."""
    pass


class InvalidAttributeValueError(CatalogPricingError):
    """Raised when a product update carries a value its attribute cannot hold."""

    def __init__(self, code: str, value):
        super().__init__(
            f"Invalid value {value!r} for attribute '{code}'",
            details={'attribute': code, 'value': value}
        )
        self.code = code
        self.value = value
