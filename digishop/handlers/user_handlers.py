# digishop/handlers/user_handlers.py
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler
from ..config import Config
from ..constants import CATALOG_FILTER
from ..errors import BackendError, ValidationError
from ..services.catalog_service import ALL_CATEGORIES, DEFAULT_SORT, SORT_ORDERS, CatalogService

class UserHandler(BaseHandler):
    """Storefront screens: home, catalog, product detail, search"""
    def __init__(self, db, sessions):
        super().__init__(db, sessions)
        self.catalog_service = CatalogService(db)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/start, or /start <slug> from a product link"""
        if context.args:
            await self.send_product(update, context.args[0])
            return
        await self.show_home(update, context)

    async def show_home(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Home screen with featured products"""
        try:
            featured = await self.catalog_service.get_featured_products(Config.FEATURED_LIMIT)
        except BackendError as e:
            await self.reply(update, f"❌ Could not load products: {e}",
                             reply_markup=self.main_menu_for(update))
            return

        text = self.messages.WELCOME
        if featured:
            text += "\n\n⭐ Featured Collection\n" + "\n".join(
                self.messages.format_product_card(p) for p in featured
            )
            markup = self.keyboards.product_list(featured)
            await self.reply(update, text, reply_markup=markup)
            # Featured products get their own buttons, the menu follows below
            await update.effective_message.reply_text(
                "What would you like to do?",
                reply_markup=self.main_menu_for(update)
            )
        else:
            await self.reply(update, text, reply_markup=self.main_menu_for(update))

    async def show_catalog(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Catalog with the current category filter and sort order"""
        state = context.user_data.setdefault(
            CATALOG_FILTER, {'category': ALL_CATEGORIES, 'sort': DEFAULT_SORT}
        )
        try:
            categories = await self.catalog_service.list_categories()
            products = await self.catalog_service.list_products(state['category'], state['sort'])
        except ValidationError:
            # Stale filter, e.g. a category that was deleted meanwhile
            context.user_data[CATALOG_FILTER] = {'category': ALL_CATEGORIES, 'sort': DEFAULT_SORT}
            await self.show_catalog(update, context)
            return
        except BackendError as e:
            await self.reply(update, f"❌ Could not load products: {e}",
                             reply_markup=self.main_menu_for(update))
            return

        text = self.messages.format_product_list(
            "🛍 Digital Products",
            products,
            "No products found. Try another category."
        )
        await self.reply(
            update,
            text,
            reply_markup=self.keyboards.catalog_menu(
                products, categories, state['category'], state['sort']
            )
        )

    async def change_filter(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Apply a filter:<category> or sort:<key> button and re-query"""
        kind, _, value = update.callback_query.data.partition(':')
        state = context.user_data.setdefault(
            CATALOG_FILTER, {'category': ALL_CATEGORIES, 'sort': DEFAULT_SORT}
        )

        if kind == 'sort' and value in SORT_ORDERS:
            state['sort'] = value
        elif kind == 'filter':
            state['category'] = value

        await self.show_catalog(update, context)

    async def send_product(self, update: Update, slug: str):
        """Product detail by slug"""
        try:
            product = await self.catalog_service.get_product_by_slug(slug)
        except BackendError as e:
            await self.reply(update, f"❌ Could not load product: {e}")
            return

        if not product:
            await self.reply(update, self.messages.PRODUCT_NOT_FOUND,
                             reply_markup=self.keyboards.back_to("catalog", "⬅️ Back to Products"))
            return

        await self.reply(update, self.messages.format_product(product),
                         reply_markup=self.keyboards.product_menu(product))

    async def show_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/product <slug> or a product:<slug> button"""
        if update.callback_query:
            slug = update.callback_query.data.partition(':')[2]
        elif context.args:
            slug = context.args[0]
        else:
            await self.reply(update, "Usage: /product <slug>")
            return
        await self.send_product(update, slug)

    async def search(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/search <text>; without text only the prompt is shown"""
        text = " ".join(context.args or []) if not update.callback_query else ""
        await self.send_search(update, text)

    async def send_search(self, update: Update, text: str):
        """Search results, or the prompt for an empty query"""
        if not text.strip():
            await self.reply(update, self.messages.SEARCH_PROMPT,
                             reply_markup=self.keyboards.back_to("main_menu", "🏠 Home"))
            return

        try:
            products = await self.catalog_service.search_products(text)
        except BackendError as e:
            await self.reply(update, f"❌ Search failed: {e}")
            return

        await self.reply(
            update,
            self.messages.format_product_list(
                f"🔎 Results for “{text.strip()}”",
                products,
                "No products found. Try different keywords."
            ),
            reply_markup=self.keyboards.product_list(products)
        )

    async def about(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """About screen"""
        await self.reply(update, self.messages.ABOUT,
                         reply_markup=self.keyboards.back_to("main_menu", "🏠 Home"))

    async def main_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Plain home menu without featured products"""
        await self.send_home(update)

    async def handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Free text outside a conversation is treated as a search"""
        await self.send_search(update, update.message.text)
