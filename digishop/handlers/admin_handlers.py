# digishop/handlers/admin_handlers.py
from typing import Optional
from uuid import UUID
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from .base_handler import BaseHandler
from ..config import Config
from ..constants import EDITING_PRODUCT_ID, WAITING_CATEGORY_FORM, WAITING_PRODUCT_FORM
from ..errors import (
    AuthenticationError, BackendError, NotFoundError,
    PermissionDeniedError, ValidationError,
)
from ..services.admin_service import (
    AdminService, form_from_product, parse_form_text,
    parse_product_form, render_form, require_admin,
)
from ..services.catalog_service import list_product_slugs
from ..services.category_service import CATEGORY_FORM_FIELDS, CategoryService
from ..services.session import Session

FORM_HELP = (
    "Edit the fields below and send them back as one message.\n"
    "tags: comma separated · is_featured/is_active: yes or no · "
    "category: a category slug or empty\n\n"
)

class AdminHandler(BaseHandler):
    """Admin console: products, categories and orders"""

    def __init__(self, db, sessions):
        super().__init__(db, sessions)
        self.category_service = CategoryService(db)
        self.admin_service = AdminService(db, self.category_service)

    async def _admin_session(self, update: Update) -> Optional[Session]:
        """The admin's session, or None after sending the user home"""
        try:
            return require_admin(self.current_session(update))
        except (AuthenticationError, PermissionDeniedError) as e:
            self.logger.warning(f"Admin access refused for chat user {update.effective_user.id}")
            await self.send_home(update, f"⛔️ {e}")
            return None

    @staticmethod
    def _target_id(update: Update) -> Optional[UUID]:
        try:
            return UUID(update.callback_query.data.partition(':')[2])
        except ValueError:
            return None

    async def admin_panel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Admin panel"""
        if not await self._admin_session(update):
            return

        await self.reply(update, "🔧 Admin Panel\n\nManage products, categories and orders.",
                         reply_markup=self.keyboards.admin_menu())

    async def list_products(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Every product with edit and delete buttons"""
        session = await self._admin_session(update)
        if not session:
            return

        try:
            products = await self.admin_service.list_products(session)
        except BackendError as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return

        text = self.messages.format_product_list(
            "📋 Products", products, "No products yet."
        )
        await self.reply(update, text,
                         reply_markup=self.keyboards.admin_product_list(products))

    async def _send_form(self, update: Update, title: str, fields):
        categories = await self.category_service.get_all_categories()
        slugs = ", ".join(c.slug for c in categories) or "none yet"
        await self.reply(
            update,
            f"{title}\n\n{FORM_HELP}Categories: {slugs}\n\n{render_form(fields)}",
            reply_markup=self.keyboards.cancel_keyboard()
        )

    async def start_add_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Blank product form"""
        if not await self._admin_session(update):
            return ConversationHandler.END

        context.user_data[EDITING_PRODUCT_ID] = None
        try:
            await self._send_form(update, "➕ Create a new digital product", form_from_product())
        except BackendError as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return ConversationHandler.END
        return WAITING_PRODUCT_FORM

    async def start_edit_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Product form pre-populated from the selected product"""
        session = await self._admin_session(update)
        if not session:
            return ConversationHandler.END

        product_id = self._target_id(update)
        try:
            if product_id is None:
                raise NotFoundError("Product not found")
            product = await self.admin_service.get_product(session, product_id)
            context.user_data[EDITING_PRODUCT_ID] = product.id
            await self._send_form(update, "✏️ Update product information", form_from_product(product))
        except (NotFoundError, BackendError) as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return ConversationHandler.END
        return WAITING_PRODUCT_FORM

    async def handle_product_form(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Validate the submitted form and insert or update"""
        session = await self._admin_session(update)
        if not session:
            return ConversationHandler.END

        editing_id = context.user_data.get(EDITING_PRODUCT_ID)
        try:
            form = parse_product_form(parse_form_text(update.message.text))
            product = await self.admin_service.save_product(session, form, editing_id)
        except (ValidationError, BackendError, NotFoundError) as e:
            await update.message.reply_text(
                f"❌ {e}\n\nFix the form and send it again, or /cancel.",
                reply_markup=self.keyboards.cancel_keyboard()
            )
            return WAITING_PRODUCT_FORM

        context.user_data.pop(EDITING_PRODUCT_ID, None)
        verb = "updated" if editing_id else "created"
        await update.message.reply_text(
            f"✅ Product “{product.title}” {verb} successfully",
            reply_markup=self.keyboards.back_to("admin_products", "📋 Products")
        )
        return ConversationHandler.END

    async def confirm_delete_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask before deleting a product"""
        session = await self._admin_session(update)
        if not session:
            return

        product_id = self._target_id(update)
        try:
            if product_id is None:
                raise NotFoundError("Product not found")
            product = await self.admin_service.get_product(session, product_id)
        except (NotFoundError, BackendError) as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return

        await self.reply(
            update,
            f"🗑 Are you sure you want to delete “{product.title}”? This cannot be undone.",
            reply_markup=self.keyboards.confirm(f"admin_confirm_delete:{product.id}", "admin_products")
        )

    async def delete_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Delete after confirmation, then re-list"""
        session = await self._admin_session(update)
        if not session:
            return

        product_id = self._target_id(update)
        try:
            if product_id is None:
                raise NotFoundError("Product not found")
            await self.admin_service.delete_product(session, product_id)
        except (NotFoundError, BackendError) as e:
            await self.reply(update, f"❌ {e}",
                             reply_markup=self.keyboards.back_to("admin_products", "📋 Products"))
            return

        await self.list_products(update, context)

    async def list_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Read-only listing of every order"""
        session = await self._admin_session(update)
        if not session:
            return

        try:
            orders = await self.admin_service.list_orders(session)
        except BackendError as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return

        await self.reply(update, self.messages.format_admin_orders(orders),
                         reply_markup=self.keyboards.back_to("admin", "🔙 Admin Panel"))

    async def list_categories(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Categories with delete buttons"""
        if not await self._admin_session(update):
            return

        try:
            categories = await self.category_service.get_all_categories()
        except BackendError as e:
            await self.reply(update, f"❌ {e}", reply_markup=self.keyboards.admin_menu())
            return

        if categories:
            text = "🗂 Categories\n\n" + "\n".join(
                f"{c.name} ({c.slug})" for c in categories
            )
        else:
            text = "🗂 No categories yet."
        await self.reply(update, text,
                         reply_markup=self.keyboards.admin_category_list(categories))

    async def start_add_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Blank category form"""
        if not await self._admin_session(update):
            return ConversationHandler.END

        blank = render_form({}, CATEGORY_FORM_FIELDS)
        await self.reply(
            update,
            f"➕ New category\n\nFill in the fields and send them back:\n\n{blank}",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_CATEGORY_FORM

    async def handle_category_form(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Create the category"""
        if not await self._admin_session(update):
            return ConversationHandler.END

        try:
            fields = parse_form_text(update.message.text, CATEGORY_FORM_FIELDS)
            category = await self.category_service.add_category(fields)
        except (ValidationError, BackendError) as e:
            await update.message.reply_text(
                f"❌ {e}\n\nFix the form and send it again, or /cancel.",
                reply_markup=self.keyboards.cancel_keyboard()
            )
            return WAITING_CATEGORY_FORM

        await update.message.reply_text(
            f"✅ Category “{category.name}” created",
            reply_markup=self.keyboards.back_to("admin_categories", "🗂 Categories")
        )
        return ConversationHandler.END

    async def confirm_delete_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask before deleting a category"""
        if not await self._admin_session(update):
            return

        category_id = self._target_id(update)
        try:
            category = await self.category_service.get_category(category_id) if category_id else None
            if not category:
                raise NotFoundError("Category not found")
            count = await self.category_service.get_products_count(category.id)
        except (NotFoundError, BackendError) as e:
            await self.reply(update, f"❌ {e}",
                             reply_markup=self.keyboards.back_to("admin_categories", "🗂 Categories"))
            return

        await self.reply(
            update,
            f"🗑 Delete category “{category.name}”? "
            f"Its {count} product(s) will become uncategorized.",
            reply_markup=self.keyboards.confirm(
                f"admin_del_cat_ok:{category.id}", "admin_categories"
            )
        )

    async def delete_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Delete a category after confirmation"""
        if not await self._admin_session(update):
            return

        category_id = self._target_id(update)
        try:
            if category_id is None:
                raise NotFoundError("Category not found")
            await self.category_service.delete_category(category_id)
        except (NotFoundError, BackendError) as e:
            await self.reply(update, f"❌ {e}",
                             reply_markup=self.keyboards.back_to("admin_categories", "🗂 Categories"))
            return

        await self.list_categories(update, context)

    async def show_links(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Shareable deep links for every active product"""
        if not await self._admin_session(update):
            return

        slugs = await list_product_slugs(self.db)
        username = Config.BOT_USERNAME or "your_bot"
        links = "\n".join(f"https://t.me/{username}?start={slug}" for slug in slugs)
        await self.reply(update, f"🔗 Product links\n\n{links}",
                         reply_markup=self.keyboards.back_to("admin", "🔙 Admin Panel"))
