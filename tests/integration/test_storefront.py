"""End-to-end storefront tests against a real Postgres.

Set TEST_DATABASE_URL to a disposable database to run them; every table is
truncated before each test.
"""

import os
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio

from conftest import product_row
from digishop.database import Database
from digishop.errors import AuthenticationError, BackendError
from digishop.models.order import OrderStatus
from digishop.models.product import Product
from digishop.services.account_service import AccountService
from digishop.services.admin_service import AdminService, form_from_product, parse_product_form
from digishop.services.auth_service import AuthService
from digishop.services.catalog_service import CatalogService, list_product_slugs
from digishop.services.order_service import CheckoutState, OrderService, OrderWorkflow

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set"),
]


@pytest_asyncio.fixture
async def database():
    db = Database(TEST_DATABASE_URL)
    await db.connect()
    await db.execute(
        "TRUNCATE order_items, orders, products, categories, profiles, auth_users CASCADE"
    )
    try:
        yield db
    finally:
        await db.close()


async def add_category(db, name, slug):
    return await db.fetchrow(
        "INSERT INTO categories (name, slug) VALUES ($1, $2) RETURNING *", name, slug
    )


async def add_product(db, **overrides):
    row = product_row(slug=f"product-{uuid4().hex[:8]}", **overrides)
    await db.execute("""
        INSERT INTO products (
            id, title, slug, description, price, image_url,
            download_url, category_id, is_featured, is_active, tags, created_at
        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
    """, row["id"], row["title"], row["slug"], row["description"], row["price"],
        row["image_url"], row["download_url"], row["category_id"],
        row["is_featured"], row["is_active"], row["tags"], row["created_at"])
    return row


async def sign_up(db, email="u1@example.com", is_admin=False):
    session = await AuthService(db).sign_up(email, "secret1", "User One")
    if is_admin:
        await db.execute("UPDATE profiles SET is_admin = true WHERE id = $1", session.user_id)
        session = await AuthService(db).sign_in(email, "secret1")
    return session


class TestCatalog:
    @pytest.mark.asyncio
    async def test_inactive_products_hidden(self, database):
        active = await add_product(database, title="Visible")
        hidden = await add_product(database, title="Hidden", is_active=False)
        catalog = CatalogService(database)

        ids = [p.id for p in await catalog.list_products()]

        assert active["id"] in ids
        assert hidden["id"] not in ids
        assert await catalog.get_active_product(hidden["id"]) is None
        assert await catalog.get_product_by_slug(hidden["slug"]) is None

    @pytest.mark.asyncio
    async def test_category_filter(self, database):
        category = await add_category(database, "Ebooks", "ebooks")
        inside = await add_product(database, category_id=category["id"])
        await add_product(database)

        products = await CatalogService(database).list_products(category["id"])

        assert [p.id for p in products] == [inside["id"]]
        assert products[0].category.slug == "ebooks"

    @pytest.mark.asyncio
    async def test_sort_by_price(self, database):
        for price in ("5.00", "50.00", "19.99"):
            await add_product(database, price=Decimal(price))
        catalog = CatalogService(database)

        low = [p.price for p in await catalog.list_products(sort="price-low")]
        high = [p.price for p in await catalog.list_products(sort="price-high")]

        assert low == sorted(low)
        assert high == sorted(high, reverse=True)

    @pytest.mark.asyncio
    async def test_search(self, database):
        await add_product(database, title="Notion Template", description="Plan your week")
        await add_product(database, title="Icon Pack", description="A TEMPLATE for icons")
        await add_product(database, title="Audio Course", description="Learn mixing")

        titles = {p.title for p in await CatalogService(database).search_products("template")}

        assert titles == {"Notion Template", "Icon Pack"}

    @pytest.mark.asyncio
    async def test_product_slugs(self, database):
        assert await list_product_slugs(database) == ["sample-product"]
        product = await add_product(database)
        assert await list_product_slugs(database) == [product["slug"]]


class TestCheckout:
    @pytest.mark.asyncio
    async def test_order_with_one_item(self, database):
        session = await sign_up(database)
        product = await add_product(database, price=Decimal("19.99"))

        result = await OrderService(database).place_order(session, product["id"])

        assert result.succeeded
        orders = await AccountService(database).get_order_history(session.user_id)
        assert len(orders) == 1
        assert orders[0].status is OrderStatus.COMPLETED
        assert orders[0].total_amount == Decimal("19.99")
        assert [item.price for item in orders[0].items] == [Decimal("19.99")]
        assert orders[0].items[0].product.id == product["id"]

    @pytest.mark.asyncio
    async def test_item_failure_leaves_no_order(self, database):
        session = await sign_up(database)
        # Never stored, so the item insert violates its foreign key
        ghost = Product(**product_row())

        result = await OrderWorkflow(database, session, ghost).run()

        assert result.state is CheckoutState.FAILED
        assert result.failed_at is CheckoutState.CREATING_ITEM
        assert await database.fetchval("SELECT COUNT(*) FROM orders") == 0

    @pytest.mark.asyncio
    async def test_price_snapshot_survives_edit(self, database):
        session = await sign_up(database)
        admin = await sign_up(database, "admin@example.com", is_admin=True)
        product = await add_product(database, price=Decimal("19.99"))
        await OrderService(database).place_order(session, product["id"])

        admin_service = AdminService(database)
        stored = await admin_service.get_product(admin, product["id"])
        form = parse_product_form(dict(form_from_product(stored), price="29.99"))
        await admin_service.save_product(admin, form, stored.id)

        orders = await AccountService(database).get_order_history(session.user_id)
        assert orders[0].items[0].price == Decimal("19.99")
        assert orders[0].items[0].product.price == Decimal("29.99")

    @pytest.mark.asyncio
    async def test_deleted_product_keeps_order(self, database):
        session = await sign_up(database)
        admin = await sign_up(database, "admin@example.com", is_admin=True)
        product = await add_product(database)
        await OrderService(database).place_order(session, product["id"])

        await AdminService(database).delete_product(admin, product["id"])

        orders = await AccountService(database).get_order_history(session.user_id)
        assert orders[0].items[0].product is None
        assert orders[0].items[0].price == product["price"]


class TestAuth:
    @pytest.mark.asyncio
    async def test_sign_up_then_sign_in(self, database):
        created = await sign_up(database)
        session = await AuthService(database).sign_in("u1@example.com", "secret1")

        assert session.user_id == created.user_id
        assert session.profile.full_name == "User One"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, database):
        await sign_up(database)
        with pytest.raises(BackendError):
            await sign_up(database)
        assert await database.fetchval("SELECT COUNT(*) FROM profiles") == 1

    @pytest.mark.asyncio
    async def test_wrong_password(self, database):
        await sign_up(database)
        with pytest.raises(AuthenticationError):
            await AuthService(database).sign_in("u1@example.com", "nope-nope")
