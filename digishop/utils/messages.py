# digishop/utils/messages.py
from typing import List, Optional
from ..models.order import Order, OrderStatus
from ..models.product import Product
from ..models.profile import Profile
from .formatters import format_date, format_datetime, format_price, truncate

STATUS_EMOJI = {
    OrderStatus.PENDING: "⏳",
    OrderStatus.COMPLETED: "✅",
    OrderStatus.REFUNDED: "↩️",
}

class Messages:
    WELCOME = (
        "✨ Premium Digital Marketplace\n\n"
        "Discover amazing digital products, from templates to courses.\n"
        "Everything you need to boost your creativity and productivity."
    )
    ABOUT = (
        "ℹ️ About DigiShop\n\n"
        "DigiShop sells premium digital goods with instant download and "
        "lifetime access. Browse the catalog, buy in one step and find every "
        "purchase in your account."
    )
    SEARCH_PROMPT = "🔎 Send /search followed by what you are looking for, e.g. /search template"
    LOGIN_REQUIRED = "🔑 Please sign in first. Use /login or /register."
    PRODUCT_NOT_FOUND = "❌ Product not found. It may have been removed."

    @staticmethod
    def format_product_card(product: Product) -> str:
        """One line per product in a list"""
        featured = "⭐ " if product.is_featured else ""
        category = f" · {product.category.name}" if product.category else ""
        return (
            f"{featured}{product.title} — {format_price(product.price)}{category}\n"
            f"   {truncate(product.description, 80)}"
        )

    @classmethod
    def format_product_list(cls, title: str, products: List[Product], empty: str) -> str:
        if not products:
            return f"{title}\n\n{empty}"
        return f"{title}\n\n" + "\n".join(cls.format_product_card(p) for p in products)

    @staticmethod
    def format_product(product: Product) -> str:
        """Product detail view"""
        lines = [f"🏷 {product.title}"]
        if product.is_featured:
            lines.append("⭐ Featured Product")
        if product.category:
            lines.append(f"🗂 {product.category.name}")
        lines.append("")
        lines.append(product.description)
        lines.append("")
        lines.append(f"💰 {format_price(product.price)}")
        if product.tags:
            lines.append("🏷 " + " ".join(f"#{tag}" for tag in product.tags))
        lines.append("")
        lines.append("What's included: instant digital download, lifetime access, regular updates.")
        return "\n".join(lines)

    @staticmethod
    def format_checkout(product: Product) -> str:
        """Order summary shown before confirmation"""
        return (
            "🛒 Order Summary\n"
            "------------------\n"
            f"{product.title}\n"
            f"{truncate(product.description)}\n"
            "------------------\n"
            f"Total: {format_price(product.price)}\n\n"
            "This is a demo checkout, no payment is taken."
        )

    @staticmethod
    def format_order(order: Order, with_downloads: bool = True) -> str:
        """Order with its items"""
        lines = [
            f"🛍 Order #{order.short_id} · {format_date(order.created_at)}",
            f"📊 {STATUS_EMOJI.get(order.status, '')} {order.status.value}",
        ]
        for item in order.items:
            title = item.product.title if item.product else "Removed product"
            lines.append(f"- {title}: {format_price(item.price)}")
            if with_downloads and order.is_completed and item.product:
                lines.append(f"  ⬇️ {item.product.download_url}")
        lines.append(f"💰 Total: {format_price(order.total_amount)}")
        return "\n".join(lines)

    @classmethod
    def format_order_history(cls, orders: List[Order]) -> str:
        if not orders:
            return "📦 No orders yet. Start shopping to see your orders here."
        return "📦 Your orders:\n\n" + "\n\n".join(cls.format_order(o) for o in orders)

    @classmethod
    def format_admin_orders(cls, orders: List[Order]) -> str:
        if not orders:
            return "🧾 No orders yet."
        blocks = []
        for order in orders:
            blocks.append(
                cls.format_order(order, with_downloads=False)
                + f"\n👤 {order.user_id} · {format_datetime(order.created_at)}"
            )
        return "🧾 All orders:\n\n" + "\n\n".join(blocks)

    @staticmethod
    def format_profile(profile: Optional[Profile], email: str) -> str:
        """Profile panel; email is shown but cannot be changed here"""
        full_name = profile.full_name if profile and profile.full_name else "—"
        return (
            "👤 Profile\n"
            f"Email: {email}\n"
            f"Full name: {full_name}"
        )
