"""HTTP contract of the notification function client and best-effort delivery."""

from concurrent.futures import ThreadPoolExecutor
import json
import threading

import httpx
import pytest

from sportbook.integrations.notification_client import (
    BookingEventType,
    FunctionNotificationClient,
    LoggingNotificationDispatcher,
    NotificationDeliveryError,
)
from sportbook.services.notification_service import NotificationService


def _client(handler, **kwargs) -> FunctionNotificationClient:
    return FunctionNotificationClient(
        base_url="https://functions.example.test/v1/",
        api_key=kwargs.pop("api_key", "secret-token"),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_posts_booking_id_and_event_type():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("Authorization")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    _client(handler).notify("01HXBOOKING", BookingEventType.CONFIRMED)

    assert captured["url"] == "https://functions.example.test/v1/send-booking-notification"
    assert captured["auth"] == "Bearer secret-token"
    assert captured["body"] == {"bookingId": "01HXBOOKING", "eventType": "confirmed"}


def test_no_authorization_header_without_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(204)

    _client(handler, api_key=None).notify("01HXBOOKING", BookingEventType.CREATED)
    assert seen["auth"] is None


def test_error_status_raises_delivery_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(NotificationDeliveryError) as exc_info:
        _client(handler).notify("01HXBOOKING", BookingEventType.CANCELLED)
    assert exc_info.value.status_code == 503


def test_transport_error_raises_delivery_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NotificationDeliveryError):
        _client(handler).notify("01HXBOOKING", BookingEventType.RESCHEDULED)


def test_base_url_required():
    with pytest.raises(ValueError):
        FunctionNotificationClient(base_url="")


class TestNotificationService:
    def test_failures_are_swallowed_and_logged(self, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        service = NotificationService(dispatcher=_client(handler), max_attempts=1)

        assert service.notify("01HXBOOKING", BookingEventType.CREATED) is False
        assert "Failed to send created notification for 01HXBOOKING" in caplog.text

    def test_retries_before_giving_up(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500) if len(calls) == 1 else httpx.Response(200)

        service = NotificationService(dispatcher=_client(handler), max_attempts=2, backoff_seconds=0)

        assert service.notify("01HXBOOKING", BookingEventType.CREATED) is True
        assert len(calls) == 2

    def test_notify_many_counts_deliveries(self):
        class HalfBroken:
            def notify(self, booking_id, event_type):
                if booking_id.endswith("2"):
                    raise RuntimeError("down")

        service = NotificationService(dispatcher=HalfBroken(), max_attempts=1)
        assert service.notify_many(["b1", "b2", "b3"], BookingEventType.CREATED) == 2

    def test_logging_dispatcher_is_default_without_endpoint(self, caplog):
        service = NotificationService(dispatcher=LoggingNotificationDispatcher())
        with caplog.at_level("INFO"):
            assert service.notify("01HXBOOKING", "cancelled") is True
        assert "cancelled for 01HXBOOKING" in caplog.text

    def test_dispatch_returns_before_delivery(self):
        release = threading.Event()
        seen = []

        class Blocked:
            def notify(self, booking_id, event_type):
                release.wait(timeout=5)
                seen.append((booking_id, event_type))

        executor = ThreadPoolExecutor(max_workers=1)
        service = NotificationService(dispatcher=Blocked(), executor=executor)
        try:
            futures = service.dispatch_many(["b1", "b2"], "reminder")

            assert len(futures) == 2
            assert not any(future.done() for future in futures)
            assert service.wait_for_pending(timeout=0.05) is False
        finally:
            release.set()
            assert service.wait_for_pending(timeout=5) is True
            executor.shutdown(wait=True)

        assert [future.result() for future in futures] == [True, True]
        assert seen == [("b1", BookingEventType.REMINDER), ("b2", BookingEventType.REMINDER)]

    def test_background_failure_is_logged_not_raised(self, caplog):
        class Broken:
            def notify(self, booking_id, event_type):
                raise RuntimeError("function unavailable")

        executor = ThreadPoolExecutor(max_workers=1)
        service = NotificationService(dispatcher=Broken(), executor=executor)
        try:
            future = service.dispatch("01HXBOOKING", BookingEventType.CONFIRMED)
            assert future.result(timeout=5) is False
        finally:
            executor.shutdown(wait=True)
        assert "Failed to send confirmed notification for 01HXBOOKING" in caplog.text

    def test_dispatch_after_shutdown_is_dropped(self, caplog):
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown(wait=True)
        service = NotificationService(dispatcher=LoggingNotificationDispatcher(), executor=executor)

        assert service.dispatch("01HXBOOKING", BookingEventType.CREATED) is None
        assert "Could not queue created notification for 01HXBOOKING" in caplog.text
