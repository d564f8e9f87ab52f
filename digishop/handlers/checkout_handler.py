# digishop/handlers/checkout_handler.py
import asyncio
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler
from ..config import Config
from ..errors import AuthenticationError, BackendError, NotFoundError
from ..services.account_service import AccountService
from ..services.catalog_service import CatalogService
from ..services.order_service import OrderService
from ..utils.formatters import fit_message

class CheckoutHandler(BaseHandler):
    """Single-product checkout"""
    def __init__(self, db, sessions):
        super().__init__(db, sessions)
        self.order_service = OrderService(db, CatalogService(db))
        self.account_service = AccountService(db)

    @staticmethod
    def _product_id(update: Update, context: ContextTypes.DEFAULT_TYPE) -> str:
        if update.callback_query:
            return update.callback_query.data.partition(':')[2]
        return context.args[0] if context.args else ''

    async def start_checkout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/buy <product id> or a buy:<id> button: show the order summary"""
        try:
            product = await self.order_service.load_checkout(
                self.current_session(update), self._product_id(update, context)
            )
        except AuthenticationError:
            await self.send_login_prompt(update)
            return
        except NotFoundError:
            await self.reply(update, self.messages.PRODUCT_NOT_FOUND,
                             reply_markup=self.keyboards.back_to("catalog", "🛍 Browse Products"))
            return
        except BackendError as e:
            await self.reply(update, f"❌ Could not load product: {e}")
            return

        await self.reply(update, self.messages.format_checkout(product),
                         reply_markup=self.keyboards.checkout_menu(product))

    async def confirm_purchase(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """confirm_buy:<id> button: place the order"""
        product_id = self._product_id(update, context)
        try:
            result = await self.order_service.place_order(
                self.current_session(update), product_id
            )
        except AuthenticationError:
            await self.send_login_prompt(update)
            return
        except NotFoundError:
            await self.reply(update, self.messages.PRODUCT_NOT_FOUND,
                             reply_markup=self.keyboards.back_to("catalog", "🛍 Browse Products"))
            return
        except BackendError as e:
            await self.reply(update, f"❌ Could not load product: {e}")
            return

        if not result.succeeded:
            await self.reply(
                update,
                f"❌ {result.error}\n\nNo order was created. You can try again.",
                reply_markup=self.keyboards.back_to(f"confirm_buy:{product_id}", "🔁 Try Again")
            )
            return

        await self.reply(
            update,
            "✅ Purchase successful!\n\n"
            "Your order has been completed. Redirecting to your account..."
        )
        context.application.create_task(
            self._redirect_to_account(update),
            update=update
        )

    async def _redirect_to_account(self, update: Update):
        """Send the order history after the confirmation has been read"""
        await asyncio.sleep(Config.CHECKOUT_REDIRECT_DELAY)
        session = self.current_session(update)
        if not session:
            return

        try:
            orders = await self.account_service.get_order_history(session.user_id)
        except BackendError as e:
            self.logger.error(f"Could not load orders after checkout: {e}")
            return

        await update.effective_message.reply_text(
            fit_message(self.messages.format_order_history(orders)),
            reply_markup=self.keyboards.account_menu()
        )
