"""
Pydantic schemas for Deepmetric.

Persisted records (users, courses, reviews) and API payloads.
"""

from .base import CamelModel
from .user import User, UserRole, EnrollmentStatus, UserSummary, SessionResponse, SessionState
from .course import Course, CourseLevel, CourseCreate, CourseUpdate
from .review import Review, ReviewCreate, ReviewStats, CourseReviews
from .notification import Notification, NotificationCategory, SimulatedEmail

__all__ = [
    "CamelModel",
    "User",
    "UserRole",
    "EnrollmentStatus",
    "UserSummary",
    "SessionResponse",
    "SessionState",
    "Course",
    "CourseLevel",
    "CourseCreate",
    "CourseUpdate",
    "Review",
    "ReviewCreate",
    "ReviewStats",
    "CourseReviews",
    "Notification",
    "NotificationCategory",
    "SimulatedEmail"
]
