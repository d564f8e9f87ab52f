"""Tests for price/date formatting and the rendered bot texts."""

from datetime import datetime
from decimal import Decimal

import pytest

from conftest import NOW, order_item_row, order_row, product_row
from digishop.config import Config
from digishop.models.order import Order
from digishop.models.product import Product
from digishop.utils.formatters import (
    MESSAGE_LIMIT,
    fit_message,
    format_date,
    format_datetime,
    format_price,
    truncate,
)
from digishop.utils.messages import Messages


@pytest.fixture(autouse=True)
def shop_locale(monkeypatch):
    monkeypatch.setattr(Config, "CURRENCY_SYMBOL", "$")
    monkeypatch.setattr(Config, "TIMEZONE", "UTC")


def make_order(status="completed", product=None, **overrides):
    order = order_row(status=status, **overrides)
    item = order_item_row(
        order_id=order["id"],
        product_id=product["id"] if product else None,
        product=product,
    )
    return Order(**order, items=[item])


class TestFormatters:
    @pytest.mark.parametrize("amount,expected", [
        (Decimal("19.99"), "$19.99"),
        (Decimal("0"), "$0.00"),
        (Decimal("1234.5"), "$1,234.50"),
    ])
    def test_format_price(self, amount, expected):
        assert format_price(amount) == expected

    def test_format_date(self):
        assert format_date(NOW) == "March 5, 2024"

    def test_naive_datetime_is_utc(self):
        assert format_datetime(datetime(2024, 3, 5, 12, 0)) == "2024-03-05 12:00"

    def test_timezone_applied(self, monkeypatch):
        monkeypatch.setattr(Config, "TIMEZONE", "Asia/Tokyo")
        assert format_datetime(NOW) == "2024-03-05 21:00"

    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("one two three four", 10) == "one two…"

    def test_fit_message(self):
        assert fit_message("hello") == "hello"
        long = fit_message("x" * (MESSAGE_LIMIT + 10))
        assert len(long) == MESSAGE_LIMIT
        assert long.endswith("…")


class TestMessages:
    def test_product_detail(self):
        product = Product(**product_row(is_featured=True))
        text = Messages.format_product(product)
        assert "Ebook 101" in text
        assert "$19.99" in text
        assert "Featured" in text
        assert "#ebook #guide" in text

    def test_product_list_empty(self):
        assert "Nothing here" in Messages.format_product_list("Products", [], "Nothing here")

    def test_checkout_summary(self):
        text = Messages.format_checkout(Product(**product_row()))
        assert "Total: $19.99" in text

    def test_completed_order_shows_downloads(self):
        product = product_row()
        text = Messages.format_order(make_order(product=product))
        assert product["download_url"] in text
        assert "Total: $19.99" in text
        assert "March 5, 2024" in text

    def test_pending_order_hides_downloads(self):
        product = product_row()
        text = Messages.format_order(make_order(status="pending", product=product))
        assert product["download_url"] not in text
        assert "pending" in text

    def test_deleted_product_keeps_price(self):
        text = Messages.format_order(make_order())
        assert "Removed product: $19.99" in text

    def test_order_history_empty(self):
        assert "No orders yet" in Messages.format_order_history([])

    def test_admin_orders_show_owner_without_downloads(self):
        product = product_row()
        order = make_order(product=product)
        text = Messages.format_admin_orders([order])
        assert str(order.user_id) in text
        assert product["download_url"] not in text

    def test_profile_without_name(self):
        text = Messages.format_profile(None, "u1@example.com")
        assert "Email: u1@example.com" in text
        assert "Full name: —" in text
