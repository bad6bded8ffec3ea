"""
Notification sink for Deepmetric.

Holds transient notifications that auto-dismiss after a fixed duration, and
simulates outbound email by logging it and raising an "email" notification.
"""

from collections import deque
from typing import Callable, Deque, Iterable, List, Optional
import itertools
import logging
import threading
import time

from deepmetric.core.config import settings
from deepmetric.schemas.notification import Notification, NotificationCategory, SimulatedEmail
from deepmetric.services.enrollment import Email, Event, Notice


logger = logging.getLogger(__name__)


class NotificationSink:
    """
    In-memory notification queue with auto-dismiss.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        outbox_limit: Optional[int] = None
    ):
        self.ttl_seconds = settings.NOTIFICATION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._items: List[Notification] = []
        self._outbox: Deque[SimulatedEmail] = deque(maxlen=outbox_limit or settings.EMAIL_OUTBOX_LIMIT)

    def notify(
        self,
        message: str,
        category: NotificationCategory = NotificationCategory.INFO
    ) -> Notification:
        """
        Queue a notification.

        Args:
            message: Text to display
            category: Display category

        Returns:
            Notification: The queued notification
        """
        now = self._clock()
        with self._lock:
            notification = Notification(
                id=next(self._ids),
                message=message,
                category=category,
                created_at=now,
                expires_at=now + self.ttl_seconds
            )
            self._items.append(notification)
        logger.debug(f"Notification [{category.value}]: {message}")
        return notification

    def send_email(self, to: str, subject: str, body: str) -> SimulatedEmail:
        """
        Simulate sending an email.

        The email is logged and kept in the outbox, which holds only the most
        recent emails; an "email" notification tells the user it was sent.
        """
        email = SimulatedEmail(to=to, subject=subject, body=body, sent_at=self._clock())
        with self._lock:
            self._outbox.append(email)
        logger.info(f"[EMAIL SIMULATION]\nTo: {to}\nSubject: {subject}\nBody: {body}")
        self.notify(f"Email sent to {to}: {subject}", NotificationCategory.EMAIL)
        return email

    def dispatch(self, events: Iterable[Event]) -> None:
        """Deliver events emitted by a state transition."""
        for event in events:
            if isinstance(event, Email):
                self.send_email(event.to, event.subject, event.body)
            elif isinstance(event, Notice):
                self.notify(event.message, event.category)
            else:
                raise TypeError(f"Unknown event type: {type(event).__name__}")

    def active(self) -> List[Notification]:
        """Get notifications that have not expired, oldest first."""
        now = self._clock()
        with self._lock:
            self._items = [n for n in self._items if n.expires_at > now]
            return list(self._items)

    def dismiss(self, notification_id: int) -> bool:
        """Remove a notification before it expires."""
        with self._lock:
            remaining = [n for n in self._items if n.id != notification_id]
            dismissed = len(remaining) != len(self._items)
            self._items = remaining
        return dismissed

    @property
    def outbox(self) -> List[SimulatedEmail]:
        with self._lock:
            return list(self._outbox)

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._outbox.clear()


# Process-wide sink
notifier = NotificationSink()


def get_notifier() -> NotificationSink:
    """Dependency to get the notification sink."""
    return notifier
