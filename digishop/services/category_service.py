# digishop/services/category_service.py
import logging
import re
from typing import Any, Dict, List, Optional
from uuid import UUID
from ..errors import NotFoundError, ValidationError
from ..models.category import Category

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
CATEGORY_FORM_FIELDS = ('name', 'slug', 'description')

class CategoryService:
    """Category management for the admin console"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def add_category(self, category_data: Dict[str, Any]) -> Category:
        """Create a category"""
        name = (category_data.get('name') or '').strip()
        slug = (category_data.get('slug') or '').strip()
        if not name:
            raise ValidationError("Category name is required")
        if not SLUG_RE.match(slug):
            raise ValidationError("Slug may only contain lowercase letters, digits and dashes")

        row = await self.db.fetchrow("""
            INSERT INTO categories (name, slug, description)
            VALUES ($1, $2, $3)
            RETURNING *
        """,
            name,
            slug,
            (category_data.get('description') or '').strip() or None
        )
        self.logger.info(f"Category {row['id']} created")
        return Category(**row)

    async def get_category(self, category_id: UUID) -> Optional[Category]:
        """Category by id"""
        row = await self.db.fetchrow("""
            SELECT * FROM categories WHERE id = $1
        """, category_id)
        return Category(**row) if row else None

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        """Category by slug"""
        row = await self.db.fetchrow("""
            SELECT * FROM categories WHERE slug = $1
        """, slug)
        return Category(**row) if row else None

    async def get_all_categories(self) -> List[Category]:
        """All categories ordered by name"""
        rows = await self.db.fetch("""
            SELECT * FROM categories ORDER BY name
        """)
        return [Category(**row) for row in rows]

    async def delete_category(self, category_id: UUID):
        """Delete a category; its products become uncategorized"""
        result = await self.db.execute("""
            DELETE FROM categories WHERE id = $1
        """, category_id)

        if result != "DELETE 1":
            raise NotFoundError("Category not found")
        self.logger.info(f"Category {category_id} deleted")

    async def get_products_count(self, category_id: UUID) -> int:
        """Number of products in a category"""
        count = await self.db.fetchval("""
            SELECT COUNT(*) FROM products WHERE category_id = $1
        """, category_id)
        return count or 0
