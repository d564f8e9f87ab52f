# digishop/services/admin_service.py
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple
from uuid import UUID
from pydantic import BaseModel
from ..errors import AuthenticationError, NotFoundError, PermissionDeniedError, ValidationError
from ..models.order import Order
from ..models.product import Product
from .account_service import ORDERS_WITH_ITEMS
from .catalog_service import PRODUCT_SELECT
from .category_service import SLUG_RE, CategoryService
from .session import Session

# Field order of the product form as shown to the admin
FORM_FIELDS = (
    'title', 'slug', 'description', 'price', 'image_url', 'download_url',
    'category', 'tags', 'is_featured', 'is_active',
)
REQUIRED_FIELDS = ('title', 'slug', 'description', 'price', 'image_url', 'download_url')
TRUE_VALUES = ('yes', 'true', '1', 'on', 'y')
FALSE_VALUES = ('no', 'false', '0', 'off', 'n')
# Telegram caps callback_data and /start parameters at 64 bytes; "product:" takes 8
MAX_SLUG_LENGTH = 56

class ProductForm(BaseModel):
    """Validated product form, ready to be written"""
    title: str
    slug: str
    description: str
    price: Decimal
    image_url: str
    download_url: str
    # Category slug, empty for no category
    category: str = ''
    tags: List[str] = []
    is_featured: bool = False
    is_active: bool = True

def require_admin(session: Optional[Session]) -> Session:
    """Return the session when it belongs to an admin"""
    if session is None:
        raise AuthenticationError("Please sign in first")
    if not session.is_admin:
        raise PermissionDeniedError("You do not have access to the admin panel")
    return session

def parse_tags(text: str) -> List[str]:
    """Split a comma separated list, trimming items and dropping empty ones"""
    return [tag.strip() for tag in text.split(',') if tag.strip()]

def parse_form_text(text: str, allowed: Tuple[str, ...] = FORM_FIELDS) -> Dict[str, str]:
    """Read 'field: value' lines; lines without a field continue the previous value"""
    fields: Dict[str, str] = {}
    current = None

    for line in text.splitlines():
        key, sep, value = line.partition(':')
        key = key.strip().lower()
        if sep and key in allowed:
            current = key
            fields[key] = value.strip()
        elif current is not None:
            fields[current] = f"{fields[current]}\n{line.strip()}".strip()
        elif line.strip():
            raise ValidationError(f"Unknown form line: {line.strip()}")

    return fields

def _parse_bool(name: str, value: str, default: bool) -> bool:
    value = value.strip().lower()
    if not value:
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValidationError(f"{name} must be yes or no")

def parse_product_form(fields: Dict[str, str]) -> ProductForm:
    """Validate raw form fields"""
    for name in REQUIRED_FIELDS:
        if not (fields.get(name) or '').strip():
            raise ValidationError(f"{name} is required")

    slug = fields['slug'].strip()
    if not SLUG_RE.match(slug):
        raise ValidationError("slug may only contain lowercase letters, digits and dashes")
    if len(slug) > MAX_SLUG_LENGTH:
        raise ValidationError(f"slug must be at most {MAX_SLUG_LENGTH} characters")

    try:
        price = Decimal(fields['price'].strip())
    except InvalidOperation:
        raise ValidationError("price must be a number")
    if not price.is_finite():
        raise ValidationError("price must be a number")
    if price < 0:
        raise ValidationError("price must not be negative")

    return ProductForm(
        title=fields['title'].strip(),
        slug=slug,
        description=fields['description'].strip(),
        price=price,
        image_url=fields['image_url'].strip(),
        download_url=fields['download_url'].strip(),
        category=(fields.get('category') or '').strip(),
        tags=parse_tags(fields.get('tags') or ''),
        is_featured=_parse_bool('is_featured', fields.get('is_featured') or '', False),
        is_active=_parse_bool('is_active', fields.get('is_active') or '', True),
    )

def form_from_product(product: Optional[Product] = None) -> Dict[str, str]:
    """Form fields pre-populated from a product, or blank"""
    if product is None:
        return {
            'title': '', 'slug': '', 'description': '', 'price': '',
            'image_url': '', 'download_url': '', 'category': '', 'tags': '',
            'is_featured': 'no', 'is_active': 'yes',
        }

    return {
        'title': product.title,
        'slug': product.slug,
        'description': product.description,
        'price': str(product.price),
        'image_url': product.image_url,
        'download_url': product.download_url,
        'category': product.category.slug if product.category else '',
        'tags': ', '.join(product.tags),
        'is_featured': 'yes' if product.is_featured else 'no',
        'is_active': 'yes' if product.is_active else 'no',
    }

def render_form(fields: Dict[str, str], order: Tuple[str, ...] = FORM_FIELDS) -> str:
    """Form fields as 'field: value' lines"""
    return "\n".join(f"{name}: {fields.get(name, '')}" for name in order)

class AdminService:
    """Admin console; every call checks the admin gate before touching data"""

    def __init__(self, db, categories: Optional[CategoryService] = None):
        self.db = db
        self.categories = categories or CategoryService(db)
        self.logger = logging.getLogger(__name__)

    async def list_products(self, session: Optional[Session]) -> List[Product]:
        """Every product, active or not, newest first"""
        require_admin(session)
        rows = await self.db.fetch(PRODUCT_SELECT + """
            ORDER BY p.created_at DESC
        """)
        return [Product(**row) for row in rows]

    async def get_product(self, session: Optional[Session], product_id: UUID) -> Product:
        """Any product by id"""
        require_admin(session)
        row = await self.db.fetchrow(PRODUCT_SELECT + """
            WHERE p.id = $1
        """, product_id)
        if not row:
            raise NotFoundError("Product not found")
        return Product(**row)

    async def _resolve_category(self, slug: str) -> Optional[UUID]:
        if not slug:
            return None
        category = await self.categories.get_category_by_slug(slug)
        if not category:
            raise ValidationError(f"Unknown category: {slug}")
        return category.id

    async def save_product(self, session: Optional[Session], form: ProductForm,
                           editing_id: Optional[UUID] = None) -> Product:
        """Insert a new product, or update the one being edited"""
        require_admin(session)
        category_id = await self._resolve_category(form.category)
        values = (
            form.title, form.slug, form.description, form.price,
            form.image_url, form.download_url, category_id,
            form.is_featured, form.is_active, form.tags,
        )

        if editing_id is None:
            row = await self.db.fetchrow("""
                INSERT INTO products (
                    title, slug, description, price, image_url,
                    download_url, category_id, is_featured, is_active, tags
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                RETURNING *
            """, *values)
            self.logger.info(f"Product {row['id']} created")
        else:
            row = await self.db.fetchrow("""
                UPDATE products
                SET title = $1, slug = $2, description = $3, price = $4,
                    image_url = $5, download_url = $6, category_id = $7,
                    is_featured = $8, is_active = $9, tags = $10,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = $11
                RETURNING *
            """, *values, editing_id)
            if not row:
                raise NotFoundError("Product not found")
            self.logger.info(f"Product {editing_id} updated")

        return Product(**row)

    async def delete_product(self, session: Optional[Session], product_id: UUID):
        """Delete a product for good"""
        require_admin(session)
        result = await self.db.execute("""
            DELETE FROM products WHERE id = $1
        """, product_id)

        if result != "DELETE 1":
            raise NotFoundError("Product not found")
        self.logger.info(f"Product {product_id} deleted")

    async def list_orders(self, session: Optional[Session]) -> List[Order]:
        """Orders of every user, newest first"""
        require_admin(session)
        rows = await self.db.fetch(ORDERS_WITH_ITEMS + """
            ORDER BY o.created_at DESC
        """)
        return [Order(**row) for row in rows]
