# digishop/services/catalog_service.py
import logging
from typing import Any, List, Optional, Tuple, Union
from uuid import UUID
from ..errors import ValidationError
from ..models.category import Category
from ..models.product import Product

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
DEFAULT_SORT = "newest"
SORT_ORDERS = {
    "newest": "p.created_at DESC",
    "price-low": "p.price ASC",
    "price-high": "p.price DESC",
}
FALLBACK_SLUGS = ["sample-product"]

PRODUCT_SELECT = """
    SELECT p.*,
        CASE WHEN c.id IS NULL THEN NULL ELSE to_jsonb(c) END AS category
    FROM products p
    LEFT JOIN categories c ON c.id = p.category_id
"""

def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally"""
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')

def build_catalog_query(category: Union[str, UUID] = ALL_CATEGORIES,
                        sort: str = DEFAULT_SORT) -> Tuple[str, List[Any]]:
    """SQL and parameters for the active products of a category, sorted"""
    if sort not in SORT_ORDERS:
        raise ValidationError(f"Unknown sort order: {sort}")

    query = PRODUCT_SELECT + " WHERE p.is_active = true"
    params: List[Any] = []

    if str(category) != ALL_CATEGORIES:
        try:
            category_id = category if isinstance(category, UUID) else UUID(category)
        except ValueError:
            raise ValidationError(f"Unknown category: {category}")
        params.append(category_id)
        query += f" AND p.category_id = ${len(params)}"

    query += f" ORDER BY {SORT_ORDERS[sort]}"
    return query, params

class CatalogService:
    """Customer-facing product queries; only active products are returned"""

    def __init__(self, db):
        self.db = db

    async def list_products(self, category: Union[str, UUID] = ALL_CATEGORIES,
                            sort: str = DEFAULT_SORT) -> List[Product]:
        """Active products filtered by category and sorted"""
        query, params = build_catalog_query(category, sort)
        rows = await self.db.fetch(query, *params)
        return [Product(**row) for row in rows]

    async def search_products(self, text: str) -> List[Product]:
        """Active products whose title or description contains the text"""
        text = text.strip()
        if not text:
            return []

        rows = await self.db.fetch(PRODUCT_SELECT + """
            WHERE p.is_active = true
              AND (p.title ILIKE '%' || $1::text || '%'
                   OR p.description ILIKE '%' || $1::text || '%')
            ORDER BY p.created_at DESC
        """, escape_like(text))
        return [Product(**row) for row in rows]

    async def get_featured_products(self, limit: int = 3) -> List[Product]:
        """Active products flagged for the landing screen"""
        rows = await self.db.fetch(PRODUCT_SELECT + """
            WHERE p.is_featured = true AND p.is_active = true
            ORDER BY p.created_at DESC
            LIMIT $1
        """, limit)
        return [Product(**row) for row in rows]

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        """Active product by slug, with its category"""
        row = await self.db.fetchrow(PRODUCT_SELECT + """
            WHERE p.slug = $1 AND p.is_active = true
        """, slug)
        return Product(**row) if row else None

    async def get_active_product(self, product_id: Union[str, UUID]) -> Optional[Product]:
        """Active product by id"""
        try:
            product_id = product_id if isinstance(product_id, UUID) else UUID(product_id)
        except ValueError:
            return None

        row = await self.db.fetchrow(PRODUCT_SELECT + """
            WHERE p.id = $1 AND p.is_active = true
        """, product_id)
        return Product(**row) if row else None

    async def list_categories(self) -> List[Category]:
        """All categories ordered by name"""
        rows = await self.db.fetch("""
            SELECT * FROM categories ORDER BY name
        """)
        return [Category(**row) for row in rows]

async def list_product_slugs(db=None) -> List[str]:
    """Slugs of active products, or a fixed fallback when none can be read"""
    if db is None:
        logger.warning("No database configured, using fallback slugs")
        return list(FALLBACK_SLUGS)

    try:
        rows = await db.fetch("""
            SELECT slug FROM products WHERE is_active = true ORDER BY created_at DESC
        """)
    except Exception as e:
        logger.error(f"Error fetching product slugs, using fallback: {e}")
        return list(FALLBACK_SLUGS)

    if not rows:
        logger.warning("No products found, using fallback slugs")
        return list(FALLBACK_SLUGS)

    logger.info(f"Found {len(rows)} product slugs")
    return [str(row['slug']) for row in rows]
