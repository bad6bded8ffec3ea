"""
Notification schemas for Deepmetric.
"""

from enum import Enum

from .base import CamelModel


class NotificationCategory(str, Enum):
    """Display categories for transient notifications."""
    SUCCESS = "success"
    INFO = "info"
    EMAIL = "email"


class Notification(CamelModel):
    id: int
    message: str
    category: NotificationCategory
    created_at: float
    expires_at: float


class SimulatedEmail(CamelModel):
    """An outbound email that was logged instead of sent."""
    to: str
    subject: str
    body: str
    sent_at: float
