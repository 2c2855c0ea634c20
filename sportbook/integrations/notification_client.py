# sportbook/integrations/notification_client.py
"""Client for the serverless booking-notification function."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class BookingEventType(str, Enum):
    CREATED = "created"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"
    REMINDER = "reminder"


class NotificationDeliveryError(RuntimeError):
    """Raised when the notification function responds with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotificationDispatcher(Protocol):
    def notify(self, booking_id: str, event_type: BookingEventType) -> None:
        ...


class LoggingNotificationDispatcher:
    """Dispatcher used when no function endpoint is configured."""

    def notify(self, booking_id: str, event_type: BookingEventType) -> None:
        logger.info(f"Booking notification (not sent, no endpoint configured): {event_type.value} for {booking_id}")


class FunctionNotificationClient:
    """Thin client posting ``{bookingId, eventType}`` to the notification function."""

    FUNCTION_NAME = "send-booking-notification"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | SecretStr | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Notification function base_url must be provided")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def notify(self, booking_id: str, event_type: BookingEventType) -> None:
        payload: Dict[str, Any] = {"bookingId": booking_id, "eventType": BookingEventType(event_type).value}
        url = f"{self._base_url}/{self.FUNCTION_NAME}"

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise NotificationDeliveryError(f"Notification request failed: {exc}") from exc

        if response.status_code >= 400:
            raise NotificationDeliveryError(
                f"Notification function returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        logger.debug(f"Booking notification sent: {payload['eventType']} for booking {booking_id}")
