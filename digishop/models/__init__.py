from .base import Record, TimeStampedModel
from .profile import Profile
from .category import Category
from .product import Product
from .order import Order, OrderItem, OrderStatus

__all__ = [
    'Record',
    'TimeStampedModel',
    'Profile',
    'Category',
    'Product',
    'Order',
    'OrderItem',
    'OrderStatus',
]
