# sportbook/services/notification_service.py
"""
Notification Service for the Sportbook booking core

Fires booking lifecycle events (created, confirmed, cancelled,
rescheduled, reminder) at the notification function. Delivery is
best-effort and runs on a bounded thread pool. Events are queued after
the booking write commits, so the caller never waits on the endpoint; a
failed delivery is only logged.
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from functools import wraps
import logging
import threading
import time
from typing import Callable, Iterable, List, Optional, ParamSpec, Set, TypeVar

from ..core.config import settings
from ..integrations.notification_client import (
    BookingEventType,
    FunctionNotificationClient,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Shared by every NotificationService; bounded so a slow endpoint queues
# events instead of spawning threads.
_NOTIFICATION_EXECUTOR = ThreadPoolExecutor(
    max_workers=settings.notification_max_workers,
    thread_name_prefix="booking-notify",
)


def retry(max_attempts: int = 3, backoff_seconds: float = 0.5) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator for retrying failed deliveries with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts
        backoff_seconds: Initial backoff time in seconds

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            last_exception: Exception | None = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        wait_time = backoff_seconds * (2**attempt)
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}. "
                            f"Retrying in {wait_time}s..."
                        )
                        time.sleep(wait_time)
                    else:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}: {str(e)}")

            if last_exception is not None:
                raise last_exception
            raise RuntimeError("Retry failed without capturing exception")

        return wrapper

    return decorator


def build_default_dispatcher() -> NotificationDispatcher:
    """Function client when an endpoint is configured, log-only dispatcher otherwise."""
    if settings.notifications_enabled:
        return FunctionNotificationClient(
            base_url=settings.notification_function_url or "",
            api_key=settings.notification_api_key,
            timeout=settings.notification_timeout_seconds,
        )
    return LoggingNotificationDispatcher()


class NotificationService:
    """Best-effort booking event notifications."""

    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        max_attempts: int = 1,
        backoff_seconds: float = 0.5,
        executor: Optional[Executor] = None,
    ):
        self.dispatcher = dispatcher or build_default_dispatcher()
        self.executor = executor or _NOTIFICATION_EXECUTOR
        self._send = retry(max_attempts=max_attempts, backoff_seconds=backoff_seconds)(self.dispatcher.notify)
        self._pending: Set["Future[bool]"] = set()
        self._lock = threading.Lock()

    def notify(self, booking_id: str, event_type: BookingEventType) -> bool:
        """
        Send one booking event on the calling thread.

        Returns:
            True when the dispatcher accepted the event, False when it failed
        """
        try:
            self._send(booking_id, BookingEventType(event_type))
            return True
        except Exception as e:
            logger.error(f"Failed to send {BookingEventType(event_type).value} notification for {booking_id}: {str(e)}")
            return False

    def notify_many(self, booking_ids: Iterable[str], event_type: BookingEventType) -> int:
        """Send the same event for several bookings; returns how many were delivered."""
        return sum(1 for booking_id in booking_ids if self.notify(booking_id, event_type))

    def dispatch(self, booking_id: str, event_type: BookingEventType) -> Optional["Future[bool]"]:
        """
        Queue one booking event for background delivery and return immediately.

        Args:
            booking_id: Booking the event is about
            event_type: Lifecycle event

        Returns:
            Future resolving to the delivery outcome, or None when the pool
            no longer accepts work (interpreter shutdown)
        """
        event = BookingEventType(event_type)
        try:
            future = self.executor.submit(self.notify, booking_id, event)
        except RuntimeError as e:
            logger.error(f"Could not queue {event.value} notification for {booking_id}: {str(e)}")
            return None

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._on_delivery_done)
        return future

    def dispatch_many(self, booking_ids: Iterable[str], event_type: BookingEventType) -> List["Future[bool]"]:
        futures = [self.dispatch(booking_id, event_type) for booking_id in booking_ids]
        return [future for future in futures if future is not None]

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """
        Block until queued deliveries finish (shutdown hooks and tests).

        Returns:
            True when nothing is left in flight
        """
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def _on_delivery_done(self, future: "Future[bool]") -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            logger.warning("Queued booking notification was cancelled before delivery")
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Booking notification worker crashed: {str(error)}")
