"""Checkout API package."""

from checkout.api.errors import register_checkout_exception_handlers
from checkout.api.routes import router

__all__ = ["router", "register_checkout_exception_handlers"]
