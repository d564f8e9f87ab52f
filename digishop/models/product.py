# digishop/models/product.py
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import Field
from .base import TimeStampedModel
from .category import Category

class Product(TimeStampedModel):
    """Product model for digital goods"""
    title: str
    slug: str
    description: str
    price: Decimal = Field(ge=0)
    image_url: str
    download_url: str
    category_id: Optional[UUID] = None
    is_featured: bool = False
    is_active: bool = True
    tags: List[str] = []

    # Not stored on the row, joined when needed
    category: Optional[Category] = None
