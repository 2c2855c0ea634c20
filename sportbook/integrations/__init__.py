"""Clients for collaborators outside the data store (notification function, identity provider)."""

from .identity_client import IdentityAdminClient, IdentityProvider, IdentityProviderError
from .notification_client import (
    BookingEventType,
    FunctionNotificationClient,
    LoggingNotificationDispatcher,
    NotificationDeliveryError,
    NotificationDispatcher,
)

__all__ = [
    "BookingEventType",
    "FunctionNotificationClient",
    "IdentityAdminClient",
    "IdentityProvider",
    "IdentityProviderError",
    "LoggingNotificationDispatcher",
    "NotificationDeliveryError",
    "NotificationDispatcher",
]
