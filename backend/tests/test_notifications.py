"""
Tests for the notification sink.
"""

import pytest

from deepmetric.schemas.notification import NotificationCategory
from deepmetric.services.enrollment import Email, Notice
from deepmetric.services.notifications import NotificationSink


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timed_sink(clock):
    return NotificationSink(ttl_seconds=6.0, clock=clock)


def test_notifications_expire_after_ttl(timed_sink, clock):
    timed_sink.notify("Hello")

    clock.now = 5.9
    assert [n.message for n in timed_sink.active()] == ["Hello"]

    clock.now = 6.0
    assert timed_sink.active() == []


def test_default_category_is_info(timed_sink):
    assert timed_sink.notify("Hello").category == NotificationCategory.INFO


def test_dismiss(timed_sink):
    first = timed_sink.notify("first")
    timed_sink.notify("second")

    assert timed_sink.dismiss(first.id)
    assert not timed_sink.dismiss(first.id)
    assert [n.message for n in timed_sink.active()] == ["second"]


def test_send_email_logs_and_notifies(timed_sink, caplog):
    with caplog.at_level("INFO"):
        timed_sink.send_email("ama@example.com", "Subject line", "Body text")

    assert "[EMAIL SIMULATION]" in caplog.text
    assert timed_sink.outbox[0].to == "ama@example.com"
    notification = timed_sink.active()[0]
    assert notification.message == "Email sent to ama@example.com: Subject line"
    assert notification.category == NotificationCategory.EMAIL


def test_dispatch_preserves_event_order(timed_sink):
    timed_sink.dispatch([
        Notice("Registered", NotificationCategory.SUCCESS),
        Email("ama@example.com", "Confirmation", "Body")
    ])

    assert [n.message for n in timed_sink.active()] == [
        "Registered",
        "Email sent to ama@example.com: Confirmation"
    ]


def test_dispatch_rejects_unknown_events(timed_sink):
    with pytest.raises(TypeError):
        timed_sink.dispatch(["not an event"])


def test_clear(timed_sink):
    timed_sink.send_email("ama@example.com", "Subject", "Body")
    timed_sink.clear()

    assert timed_sink.active() == []
    assert timed_sink.outbox == []


def test_outbox_keeps_only_recent_emails(clock):
    sink = NotificationSink(ttl_seconds=6.0, clock=clock, outbox_limit=2)
    for subject in ["first", "second", "third"]:
        sink.send_email("ama@example.com", subject, "Body")

    assert [e.subject for e in sink.outbox] == ["second", "third"]
