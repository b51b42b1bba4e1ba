"""Storefront API package."""

from storefront.api.errors import register_storefront_error_handlers
from storefront.api.routes import (
    cancellation_router,
    notification_router,
    order_router,
    webhook_router,
)

__all__ = [
    "order_router",
    "webhook_router",
    "cancellation_router",
    "notification_router",
    "register_storefront_error_handlers",
]
