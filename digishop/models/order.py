# digishop/models/order.py
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID
from .base import Record, TimeStampedModel
from .product import Product

class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"

class OrderItem(Record):
    """Single purchased product inside an order"""
    order_id: UUID
    # Null once the product itself has been deleted
    product_id: Optional[UUID] = None
    # Copied at purchase time, never follows later price edits
    price: Decimal

    product: Optional[Product] = None

class Order(TimeStampedModel):
    """Order model for purchases"""
    user_id: UUID
    total_amount: Decimal
    status: OrderStatus
    items: List[OrderItem] = []

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]
