# digishop/utils/keyboards.py
from typing import List, Optional
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..models.category import Category
from ..models.product import Product
from ..services.catalog_service import ALL_CATEGORIES, SORT_ORDERS

SORT_LABELS = {
    "newest": "Newest",
    "price-low": "Price: Low to High",
    "price-high": "Price: High to Low",
}

class Keyboards:
    @staticmethod
    def main_menu(signed_in: bool = False, is_admin: bool = False) -> InlineKeyboardMarkup:
        """Main menu keyboard"""
        keyboard = [
            [InlineKeyboardButton("🛍 Products", callback_data="catalog"),
             InlineKeyboardButton("🔎 Search", callback_data="search")],
        ]
        if signed_in:
            keyboard.append([InlineKeyboardButton("👤 My Account", callback_data="account")])
            if is_admin:
                keyboard.append([InlineKeyboardButton("🔧 Admin Panel", callback_data="admin")])
            keyboard.append([InlineKeyboardButton("🚪 Sign Out", callback_data="logout")])
        else:
            keyboard.append([InlineKeyboardButton("🔑 Sign In", callback_data="login"),
                             InlineKeyboardButton("📝 Sign Up", callback_data="register")])
        keyboard.append([InlineKeyboardButton("ℹ️ About", callback_data="about")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def catalog_menu(products: List[Product], categories: List[Category],
                     category: str = ALL_CATEGORIES, sort: str = "newest") -> InlineKeyboardMarkup:
        """Product list with category and sort controls"""
        keyboard = [
            [InlineKeyboardButton(product.title, callback_data=f"product:{product.slug}")]
            for product in products
        ]

        # Category filter, the selected one is marked
        filters = [(ALL_CATEGORIES, "All")] + [(str(c.id), c.name) for c in categories]
        row = []
        for value, label in filters:
            mark = "• " if value == category else ""
            row.append(InlineKeyboardButton(f"{mark}{label}", callback_data=f"filter:{value}"))
            if len(row) == 3:
                keyboard.append(row)
                row = []
        if row:
            keyboard.append(row)

        keyboard.append([
            InlineKeyboardButton(
                f"{'• ' if key == sort else ''}{SORT_LABELS[key]}",
                callback_data=f"sort:{key}"
            )
            for key in SORT_ORDERS
        ])
        keyboard.append([InlineKeyboardButton("🏠 Home", callback_data="main_menu")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_list(products: List[Product]) -> InlineKeyboardMarkup:
        """One button per product plus navigation"""
        keyboard = [
            [InlineKeyboardButton(product.title, callback_data=f"product:{product.slug}")]
            for product in products
        ]
        keyboard.append([InlineKeyboardButton("🛍 All Products", callback_data="catalog"),
                         InlineKeyboardButton("🏠 Home", callback_data="main_menu")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_menu(product: Product) -> InlineKeyboardMarkup:
        """Product detail keyboard"""
        keyboard = [
            [InlineKeyboardButton("🛒 Purchase Now", callback_data=f"buy:{product.id}")],
            [InlineKeyboardButton("⬅️ Back to Products", callback_data="catalog"),
             InlineKeyboardButton("🏠 Home", callback_data="main_menu")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def checkout_menu(product: Product) -> InlineKeyboardMarkup:
        """Confirmation keyboard for checkout"""
        keyboard = [
            [InlineKeyboardButton("✅ Complete Purchase", callback_data=f"confirm_buy:{product.id}")],
            [InlineKeyboardButton("⬅️ Back to Product", callback_data=f"product:{product.slug}")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def account_menu() -> InlineKeyboardMarkup:
        """Account keyboard"""
        keyboard = [
            [InlineKeyboardButton("📦 Orders", callback_data="account"),
             InlineKeyboardButton("✏️ Edit Name", callback_data="edit_profile")],
            [InlineKeyboardButton("🏠 Home", callback_data="main_menu")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def admin_menu() -> InlineKeyboardMarkup:
        """Admin panel keyboard"""
        keyboard = [
            [InlineKeyboardButton("📋 Products", callback_data="admin_products"),
             InlineKeyboardButton("➕ Add Product", callback_data="admin_add_product")],
            [InlineKeyboardButton("🗂 Categories", callback_data="admin_categories"),
             InlineKeyboardButton("🧾 Orders", callback_data="admin_orders")],
            [InlineKeyboardButton("🔗 Product Links", callback_data="admin_links"),
             InlineKeyboardButton("🏠 Home", callback_data="main_menu")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def admin_product_list(products: List[Product]) -> InlineKeyboardMarkup:
        """Admin product list, one row per product"""
        keyboard = []
        for product in products:
            label = product.title
            if product.is_featured:
                label = f"⭐ {label}"
            if not product.is_active:
                label = f"{label} (inactive)"
            keyboard.append([
                InlineKeyboardButton(label, callback_data=f"admin_edit:{product.id}"),
                InlineKeyboardButton("🗑", callback_data=f"admin_delete:{product.id}")
            ])
        keyboard.append([InlineKeyboardButton("➕ Add Product", callback_data="admin_add_product")])
        keyboard.append([InlineKeyboardButton("🔙 Admin Panel", callback_data="admin")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def admin_category_list(categories: List[Category]) -> InlineKeyboardMarkup:
        """Admin category list"""
        keyboard = [
            [InlineKeyboardButton(f"🗑 {category.name}",
                                  callback_data=f"admin_delete_category:{category.id}")]
            for category in categories
        ]
        keyboard.append([InlineKeyboardButton("➕ Add Category", callback_data="admin_add_category")])
        keyboard.append([InlineKeyboardButton("🔙 Admin Panel", callback_data="admin")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def confirm(yes_data: str, no_data: str) -> InlineKeyboardMarkup:
        """Yes/no confirmation"""
        return InlineKeyboardMarkup([[
            InlineKeyboardButton("✅ Yes, delete", callback_data=yes_data),
            InlineKeyboardButton("❌ Cancel", callback_data=no_data)
        ]])

    @staticmethod
    def cancel_keyboard() -> InlineKeyboardMarkup:
        """Single cancel button"""
        return InlineKeyboardMarkup([[InlineKeyboardButton("🔙 Cancel", callback_data="cancel")]])

    @staticmethod
    def back_to(callback_data: str, label: str = "🔙 Back") -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[InlineKeyboardButton(label, callback_data=callback_data)]])
