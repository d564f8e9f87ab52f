"""Tests for order history and profile editing."""

from uuid import uuid4

import pytest

from conftest import order_item_row, order_row, product_row, profile_row
from digishop.errors import NotFoundError, ValidationError
from digishop.models.order import OrderStatus
from digishop.services.account_service import AccountService


@pytest.mark.asyncio
async def test_order_history_for_user(db):
    user_id = uuid4()
    product = product_row()
    order = order_row(user_id=user_id)
    db.fetch.return_value = [
        dict(order, items=[order_item_row(order_id=order["id"], product_id=product["id"], product=product)])
    ]

    orders = await AccountService(db).get_order_history(user_id)

    query, param = db.fetch.await_args.args
    assert "o.user_id = $1" in query
    assert "ORDER BY o.created_at DESC" in query
    assert param == user_id
    assert orders[0].status is OrderStatus.COMPLETED
    assert orders[0].items[0].product.download_url == product["download_url"]


@pytest.mark.asyncio
async def test_order_history_empty(db):
    assert await AccountService(db).get_order_history(uuid4()) == []


class TestUpdateFullName:
    @pytest.mark.asyncio
    async def test_updates_and_rereads(self, db):
        user_id = uuid4()
        db.execute.return_value = "UPDATE 1"
        db.fetchrow.return_value = profile_row(id=user_id, full_name="Jane Doe")

        profile = await AccountService(db).update_full_name(user_id, "  Jane Doe ")

        assert db.execute.await_args.args[1:] == ("Jane Doe", user_id)
        assert profile.full_name == "Jane Doe"

    @pytest.mark.asyncio
    async def test_empty_name_clears(self, db):
        user_id = uuid4()
        db.execute.return_value = "UPDATE 1"
        db.fetchrow.return_value = profile_row(id=user_id, full_name=None)

        profile = await AccountService(db).update_full_name(user_id, "   ")

        assert db.execute.await_args.args[1] is None
        assert profile.display_name == profile.email

    @pytest.mark.asyncio
    async def test_too_long(self, db):
        with pytest.raises(ValidationError):
            await AccountService(db).update_full_name(uuid4(), "x" * 201)
        db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_profile(self, db):
        db.execute.return_value = "UPDATE 0"
        with pytest.raises(NotFoundError):
            await AccountService(db).update_full_name(uuid4(), "Jane")
        db.fetchrow.assert_not_awaited()
