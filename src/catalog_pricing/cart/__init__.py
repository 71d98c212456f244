"""Cart subpackage - cart line preparation and revalidation."""
from .preparation import CartPreparer, compare_options, handle_quantity
from .validator import CartItemValidator

__all__ = ['CartPreparer', 'CartItemValidator', 'compare_options', 'handle_quantity']
