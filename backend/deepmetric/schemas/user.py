"""
User schemas for Deepmetric.

A user record holds identity, role, and the user's relationship to each
course: registered, in progress, pending approval, or completed.
"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import Field

from deepmetric.services.migrations import CURRENT_SCHEMA_VERSION
from .base import CamelModel


class UserRole(str, Enum):
    """Roles a user can hold."""
    STUDENT = "student"
    ADMIN = "admin"


class EnrollmentStatus(str, Enum):
    """State of a (user, course) pair."""
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    PENDING_APPROVAL = "pending_approval"
    COMPLETED = "completed"


class User(CamelModel):
    """
    A registered person and their course relationships.
    """
    id: str
    name: str
    email: str
    role: UserRole = UserRole.STUDENT

    registered_course_ids: List[str] = Field(default_factory=list)
    completed_course_ids: List[str] = Field(default_factory=list)
    pending_course_ids: List[str] = Field(default_factory=list)
    course_progress: Dict[str, int] = Field(default_factory=dict)
    completion_evidence: Dict[str, str] = Field(default_factory=dict)

    schema_version: int = CURRENT_SCHEMA_VERSION

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', name='{self.name}', email='{self.email}')>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def matches_email(self, email: str) -> bool:
        """Check the login key, ignoring case."""
        return self.email.lower() == email.lower()

    def is_registered(self, course_id: str) -> bool:
        return course_id in self.registered_course_ids

    def is_pending(self, course_id: str) -> bool:
        return course_id in self.pending_course_ids

    def is_completed(self, course_id: str) -> bool:
        return course_id in self.completed_course_ids

    def progress_for(self, course_id: str) -> int:
        return self.course_progress.get(course_id, 0)

    def status_for(self, course_id: str) -> EnrollmentStatus:
        """Get the enrollment state for a course."""
        if self.is_completed(course_id):
            return EnrollmentStatus.COMPLETED
        if self.is_pending(course_id):
            return EnrollmentStatus.PENDING_APPROVAL
        if self.is_registered(course_id):
            return EnrollmentStatus.REGISTERED
        return EnrollmentStatus.UNREGISTERED


class UserSummary(CamelModel):
    """Public view of a user for admin listings."""
    id: str
    name: str
    email: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class SessionResponse(CamelModel):
    """Result of authenticating."""
    user: User
    is_new: bool = False


class SessionState(CamelModel):
    """The active session, if any."""
    user: Optional[User] = None
