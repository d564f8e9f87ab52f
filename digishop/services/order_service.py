# digishop/services/order_service.py
import logging
from enum import Enum
from typing import List, Optional, Union
from uuid import UUID
from pydantic import BaseModel
from ..errors import AuthenticationError, BackendError, NotFoundError
from ..models.order import Order, OrderItem, OrderStatus
from ..models.product import Product
from .catalog_service import CatalogService
from .session import Session

class CheckoutState(str, Enum):
    IDLE = "idle"
    CREATING_ORDER = "creating_order"
    CREATING_ITEM = "creating_item"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

TERMINAL_STATES = (CheckoutState.SUCCEEDED, CheckoutState.FAILED)

FAILURE_MESSAGES = {
    CheckoutState.CREATING_ORDER: "Failed to create order",
    CheckoutState.CREATING_ITEM: "Failed to add product to order",
}

class CheckoutResult(BaseModel):
    """Outcome of one checkout attempt"""
    state: CheckoutState
    order: Optional[Order] = None
    error: Optional[str] = None
    # Stage that was running when the attempt failed
    failed_at: Optional[CheckoutState] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CheckoutState.SUCCEEDED

class OrderWorkflow:
    """Turns one purchase intent into an Order and its single OrderItem.

    Both inserts share a transaction: when the item insert fails the order
    insert is rolled back with it, so either both rows exist or neither does.
    A workflow runs once; retrying means building a new one.
    """

    def __init__(self, db, session: Session, product: Product):
        self.db = db
        self.session = session
        self.product = product
        self.state = CheckoutState.IDLE
        self.history: List[CheckoutState] = [CheckoutState.IDLE]
        self.logger = logging.getLogger(__name__)

    def _move(self, state: CheckoutState):
        self.state = state
        self.history.append(state)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    async def run(self) -> CheckoutResult:
        """Run the workflow from IDLE to a terminal state"""
        if self.state != CheckoutState.IDLE:
            raise RuntimeError(f"Checkout already ran and ended in {self.state.value}")

        self._move(CheckoutState.CREATING_ORDER)
        try:
            async with self.db.transaction() as tx:
                order = await tx.fetchrow("""
                    INSERT INTO orders (user_id, total_amount, status)
                    VALUES ($1, $2, $3)
                    RETURNING *
                """, self.session.user_id, self.product.price, OrderStatus.COMPLETED.value)

                self._move(CheckoutState.CREATING_ITEM)
                item = await tx.fetchrow("""
                    INSERT INTO order_items (order_id, product_id, price)
                    VALUES ($1, $2, $3)
                    RETURNING *
                """, order['id'], self.product.id, self.product.price)

        except BackendError as e:
            failed_at = self.state
            self._move(CheckoutState.FAILED)
            self.logger.error(
                f"Checkout of {self.product.id} for {self.session.user_id} "
                f"failed at {failed_at.value}: {e}"
            )
            return CheckoutResult(
                state=self.state,
                error=f"{FAILURE_MESSAGES[failed_at]}: {e}",
                failed_at=failed_at
            )

        self._move(CheckoutState.SUCCEEDED)
        self.logger.info(f"Order {order['id']} placed by {self.session.user_id}")
        return CheckoutResult(
            state=self.state,
            order=Order(**order, items=[OrderItem(**item, product=self.product)])
        )

class OrderService:
    def __init__(self, db, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog or CatalogService(db)

    async def load_checkout(self, session: Optional[Session],
                            product_id: Union[str, UUID]) -> Product:
        """Check the checkout preconditions and return the product to buy"""
        if session is None:
            raise AuthenticationError("Please sign in to complete your purchase")

        product = await self.catalog.get_active_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def place_order(self, session: Optional[Session],
                          product_id: Union[str, UUID]) -> CheckoutResult:
        """Re-check the product and run a fresh checkout workflow"""
        product = await self.load_checkout(session, product_id)
        return await OrderWorkflow(self.db, session, product).run()
