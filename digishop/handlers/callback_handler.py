# digishop/handlers/callback_handler.py
from telegram import Update
from telegram.ext import ContextTypes
from .account_handler import AccountHandler
from .admin_handlers import AdminHandler
from .auth_handlers import AuthHandler
from .base_handler import BaseHandler
from .checkout_handler import CheckoutHandler
from .user_handlers import UserHandler

class CallbackHandler(BaseHandler):
    """Routes inline button presses that are not part of a conversation"""

    def __init__(self, db, sessions, user: UserHandler, checkout: CheckoutHandler,
                 account: AccountHandler, auth: AuthHandler, admin: AdminHandler):
        super().__init__(db, sessions)
        self.exact_routes = {
            "main_menu": user.main_menu,
            # Cancel pressed after its conversation already ended
            "cancel": user.main_menu,
            "catalog": user.show_catalog,
            "search": user.search,
            "about": user.about,
            "account": account.show_account,
            "logout": auth.logout,
            "admin": admin.admin_panel,
            "admin_products": admin.list_products,
            "admin_orders": admin.list_orders,
            "admin_categories": admin.list_categories,
            "admin_links": admin.show_links,
        }
        # Buttons carrying a value after the colon
        self.prefix_routes = {
            "filter": user.change_filter,
            "sort": user.change_filter,
            "product": user.show_product,
            "buy": checkout.start_checkout,
            "confirm_buy": checkout.confirm_purchase,
            "admin_delete": admin.confirm_delete_product,
            "admin_confirm_delete": admin.delete_product,
            "admin_delete_category": admin.confirm_delete_category,
            "admin_del_cat_ok": admin.delete_category,
        }

    async def handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Dispatch a callback query to its handler"""
        query = update.callback_query
        data = query.data or ""

        route = self.exact_routes.get(data)
        if route is None and ':' in data:
            route = self.prefix_routes.get(data.partition(':')[0])

        if route is None:
            self.logger.warning(f"Unknown callback data: {data}")
            await query.answer("⚠️ Unknown action")
            return

        await route(update, context)
