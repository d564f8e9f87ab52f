# digishop/services/account_service.py
import logging
from typing import List, Optional
from uuid import UUID
from ..errors import NotFoundError, ValidationError
from ..models.order import Order
from ..models.profile import Profile

# Orders with their items and each item's product, newest first
ORDERS_WITH_ITEMS = """
    SELECT o.*,
        COALESCE((
            SELECT json_agg(json_build_object(
                'id', oi.id,
                'order_id', oi.order_id,
                'product_id', oi.product_id,
                'price', oi.price,
                'created_at', oi.created_at,
                'product', CASE WHEN p.id IS NULL THEN NULL ELSE to_jsonb(p) END
            ) ORDER BY oi.created_at)
            FROM order_items oi
            LEFT JOIN products p ON p.id = oi.product_id
            WHERE oi.order_id = o.id
        ), '[]'::json) AS items
    FROM orders o
"""

class AccountService:
    """Order history and profile editing for the signed-in user"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def get_order_history(self, user_id: UUID) -> List[Order]:
        """All orders of a user, newest first"""
        rows = await self.db.fetch(ORDERS_WITH_ITEMS + """
            WHERE o.user_id = $1
            ORDER BY o.created_at DESC
        """, user_id)
        return [Order(**row) for row in rows]

    async def update_full_name(self, user_id: UUID, full_name: str) -> Profile:
        """Save a new display name and return the re-read profile"""
        full_name = full_name.strip()
        if len(full_name) > 200:
            raise ValidationError("Full name is too long")

        result = await self.db.execute("""
            UPDATE profiles
            SET full_name = $1,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = $2
        """, full_name or None, user_id)

        if result != "UPDATE 1":
            raise NotFoundError("Profile not found")

        self.logger.info(f"Profile {user_id} updated")
        profile = await self.db.fetchrow("""
            SELECT * FROM profiles WHERE id = $1
        """, user_id)
        return Profile(**profile)
