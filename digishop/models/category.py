# digishop/models/category.py
from typing import Optional
from .base import Record

class Category(Record):
    """Product category; slug is unique"""
    name: str
    slug: str
    description: Optional[str] = None
