"""
Progress and completion schemas for Deepmetric.
"""

from typing import List, Optional
from pydantic import Field

from .base import CamelModel
from .course import Course
from .review import ReviewStats
from .user import EnrollmentStatus, User


class ProgressUpdate(CamelModel):
    percent: int


class CompletionRequest(CamelModel):
    evidence: Optional[str] = None


class CourseProgressEntry(CamelModel):
    """One registered course on the dashboard."""
    course: Course
    status: EnrollmentStatus
    progress: int = 0
    evidence: Optional[str] = None
    review_stats: ReviewStats = Field(default_factory=ReviewStats)
    has_user_rated: bool = False


class Dashboard(CamelModel):
    user: User
    courses: List[CourseProgressEntry]


class PendingRequest(CamelModel):
    """A completion request awaiting an admin decision."""
    user_id: str
    user_name: str
    user_email: str
    course_id: str
    course_title: str
    evidence: Optional[str] = None


class PendingQueue(CamelModel):
    requests: List[PendingRequest]
    total: int


class CourseListing(CamelModel):
    """A catalog entry with its ratings and the viewer's enrollment state."""
    course: Course
    review_stats: ReviewStats = Field(default_factory=ReviewStats)
    status: Optional[EnrollmentStatus] = None
    progress: Optional[int] = None


class CourseCatalog(CamelModel):
    courses: List[CourseListing]
    total: int


class CompletionDecision(CamelModel):
    """Result of an admin decision; ``applied`` is False for unknown users or courses."""
    applied: bool
    user: Optional[User] = None
