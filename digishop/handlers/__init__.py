"""Bot handlers"""
from .base_handler import BaseHandler
from .user_handlers import UserHandler
from .auth_handlers import AuthHandler
from .account_handler import AccountHandler
from .checkout_handler import CheckoutHandler
from .admin_handlers import AdminHandler
from .callback_handler import CallbackHandler

__all__ = [
    'BaseHandler',
    'UserHandler',
    'AuthHandler',
    'AccountHandler',
    'CheckoutHandler',
    'AdminHandler',
    'CallbackHandler',
]
