# digishop/errors.py
"""Exceptions raised by the shop services.

Handlers catch these at the action that triggered them and turn them into a
short reply; the user stays on the same screen and may try again.
"""


class ShopError(Exception):
    """Base class for all shop errors"""


class ValidationError(ShopError):
    """Input rejected before any backend call"""


class BackendError(ShopError):
    """The backend refused a query; the message is the backend's own"""


class NotFoundError(ShopError):
    """A lookup by id or slug returned no row"""


class AuthenticationError(ShopError):
    """Bad credentials or no session"""


class PermissionDeniedError(ShopError):
    """The session is not allowed to use the admin console"""
