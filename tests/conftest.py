"""Shared fixtures: row factories, a mocked gateway and fake Telegram updates."""

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from digishop.models.profile import Profile
from digishop.services.session import Session, SessionStore

NOW = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Row factories
# =============================================================================


def product_row(**overrides):
    row = {
        "id": uuid4(),
        "title": "Ebook 101",
        "slug": "ebook-101",
        "description": "A practical introduction.",
        "price": Decimal("19.99"),
        "image_url": "https://cdn.example.com/ebook.png",
        "download_url": "https://cdn.example.com/ebook.pdf",
        "category_id": None,
        "is_featured": False,
        "is_active": True,
        "tags": ["ebook", "guide"],
        "created_at": NOW,
        "updated_at": NOW,
        "category": None,
    }
    row.update(overrides)
    return row


def category_row(**overrides):
    row = {
        "id": uuid4(),
        "name": "Templates",
        "slug": "templates",
        "description": None,
        "created_at": NOW,
    }
    row.update(overrides)
    return row


def profile_row(**overrides):
    row = {
        "id": uuid4(),
        "email": "u1@example.com",
        "full_name": "User One",
        "avatar_url": None,
        "is_admin": False,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def order_row(**overrides):
    row = {
        "id": uuid4(),
        "user_id": uuid4(),
        "total_amount": Decimal("19.99"),
        "status": "completed",
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def order_item_row(**overrides):
    row = {
        "id": uuid4(),
        "order_id": uuid4(),
        "product_id": uuid4(),
        "price": Decimal("19.99"),
        "created_at": NOW + timedelta(seconds=1),
    }
    row.update(overrides)
    return row


def make_session(is_admin=False, **profile_overrides):
    profile = Profile(**profile_row(is_admin=is_admin, **profile_overrides))
    return Session(user_id=profile.id, email=profile.email, profile=profile)


# =============================================================================
# Gateway mock
# =============================================================================


class FakeTransaction:
    """Stands in for an open transaction; records whether it was rolled back."""

    def __init__(self):
        self.fetch = AsyncMock(return_value=[])
        self.fetchrow = AsyncMock(return_value=None)
        self.fetchval = AsyncMock(return_value=None)
        self.execute = AsyncMock(return_value="")
        self.committed = False
        self.rolled_back = False


@pytest.fixture
def tx():
    return FakeTransaction()


@pytest.fixture
def db(tx):
    """Database gateway with every query mocked."""
    gateway = MagicMock()
    gateway.fetch = AsyncMock(return_value=[])
    gateway.fetchrow = AsyncMock(return_value=None)
    gateway.fetchval = AsyncMock(return_value=None)
    gateway.execute = AsyncMock(return_value="")

    @asynccontextmanager
    async def transaction():
        try:
            yield tx
        except BaseException:
            tx.rolled_back = True
            raise
        tx.committed = True

    gateway.transaction = transaction
    return gateway


@pytest.fixture
def customer():
    return make_session()


@pytest.fixture
def admin():
    return make_session(is_admin=True, email="admin@example.com")


@pytest.fixture
def sessions():
    return SessionStore()


# =============================================================================
# Telegram fakes
# =============================================================================


def make_update(user_id=1, text=None, data=None):
    """A private-chat update carrying either a message or a button press."""
    update = MagicMock()
    update.effective_user.id = user_id
    update.effective_message.reply_text = AsyncMock()
    update.message.reply_text = AsyncMock()
    update.message.delete = AsyncMock()
    update.message.text = text
    if data is None:
        update.callback_query = None
    else:
        update.callback_query.data = data
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()
    return update


def make_context(args=None):
    context = MagicMock()
    context.args = args or []
    context.user_data = {}
    # Close scheduled coroutines instead of running them
    context.application.create_task = MagicMock(
        side_effect=lambda coro, update=None: coro.close()
    )
    return context


def sent_text(update):
    """Text of the last reply, whether edited in place or sent anew."""
    if update.callback_query is not None and update.callback_query.edit_message_text.await_count:
        return update.callback_query.edit_message_text.await_args.args[0]
    if update.effective_message.reply_text.await_count:
        return update.effective_message.reply_text.await_args.args[0]
    return update.message.reply_text.await_args.args[0]
