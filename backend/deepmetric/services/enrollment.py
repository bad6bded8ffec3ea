"""
Enrollment and completion-approval state machine for Deepmetric.

Per (user, course) pair:

    Unregistered -> Registered -> PendingApproval -> Completed
                        ^               |
                        +--- rejected --+

Every function here is pure: it takes the current user record and the
operation's inputs, and returns a ``Transition`` holding the new record and
the events to emit. Nothing is persisted or displayed here; see
``services.directory`` for the adapter that does that.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from deepmetric.core.config import settings
from deepmetric.schemas.course import Course
from deepmetric.schemas.notification import NotificationCategory
from deepmetric.schemas.user import User, UserRole


MIN_PROGRESS = 0
MAX_PROGRESS = 100


@dataclass(frozen=True)
class Notice:
    """A transient notification to display."""
    message: str
    category: NotificationCategory = NotificationCategory.INFO


@dataclass(frozen=True)
class Email:
    """An outbound email to simulate."""
    to: str
    subject: str
    body: str


Event = Union[Notice, Email]


@dataclass
class Transition:
    """Outcome of applying an operation to one user record."""
    user: User
    changed: bool = False
    events: List[Event] = field(default_factory=list)


@dataclass
class AuthResult:
    """Outcome of authenticating against the directory."""
    directory: List[User]
    user: User
    created: bool = False
    changed: bool = False
    events: List[Event] = field(default_factory=list)


def compose_letter(name: str, body: str) -> str:
    return f"Dear {name},\n\n{body}\n\nBest,\n{settings.EMAILS_FROM_NAME}"


def clamp_progress(percent: int) -> int:
    """Bound a progress value to [0, 100]."""
    return max(MIN_PROGRESS, min(MAX_PROGRESS, int(percent)))


def find_by_email(directory: List[User], email: str) -> Optional[User]:
    """Find a user by case-insensitive email."""
    return next((u for u in directory if u.matches_email(email)), None)


def find_by_id(directory: List[User], user_id: str) -> Optional[User]:
    return next((u for u in directory if u.id == user_id), None)


def replace_user(directory: List[User], user: User) -> List[User]:
    """Return a new directory with the record of the same id replaced."""
    return [user if u.id == user.id else u for u in directory]


def authenticate(
    directory: List[User],
    name: str,
    email: str,
    is_admin: bool,
    new_id: Callable[[], str]
) -> AuthResult:
    """
    Sign a user in, creating their record on first sight.

    Args:
        directory: Current user directory
        name: Display name given at sign-in
        email: Login key, matched case-insensitively
        is_admin: Whether the sign-in grants the admin role
        new_id: Factory for new user ids

    Returns:
        AuthResult: The new directory, the signed-in user and emitted events
    """
    existing = find_by_email(directory, email)

    if existing is None:
        user = User(
            id=new_id(),
            name=name or email.split("@")[0],
            email=email,
            role=UserRole.ADMIN if is_admin else UserRole.STUDENT
        )
        return AuthResult(
            directory=directory + [user],
            user=user,
            created=True,
            changed=True,
            events=[Notice(f"Welcome to Deepmetric, {user.name}!", NotificationCategory.SUCCESS)]
        )

    user = existing.model_copy(deep=True)
    changed = False

    # The role is only ever raised here, never lowered
    if is_admin and user.role != UserRole.ADMIN:
        user.role = UserRole.ADMIN
        changed = True

    # Missing collections were already backfilled when the directory loaded
    return AuthResult(
        directory=replace_user(directory, user) if changed else directory,
        user=user,
        changed=changed,
        events=[Notice(f"Welcome back, {user.name}!", NotificationCategory.SUCCESS)]
    )


def register_course(user: User, course_id: str, course: Optional[Course]) -> Transition:
    """Register the user for a course and start its progress at zero."""
    if user.is_registered(course_id):
        return Transition(user=user)

    updated = user.model_copy(deep=True)
    updated.registered_course_ids.append(course_id)
    updated.course_progress[course_id] = MIN_PROGRESS

    title = course.title if course else "course"
    events: List[Event] = [
        Notice(f"Successfully registered for {title}!", NotificationCategory.SUCCESS)
    ]
    if course:
        events.append(Email(
            to=user.email,
            subject="Course Registration Confirmation",
            body=compose_letter(
                user.name,
                f"You have successfully registered for {course.title}. "
                "We are excited to have you on board!"
            )
        ))

    return Transition(user=updated, changed=True, events=events)


def set_progress(user: User, course_id: str, percent: int) -> Transition:
    """
    Record the user's self-reported progress on a course.

    Only registered, not yet completed courses accept progress; the value is
    clamped to [0, 100]. No events are emitted.
    """
    if not user.is_registered(course_id) or user.is_completed(course_id):
        return Transition(user=user)

    value = clamp_progress(percent)
    if user.course_progress.get(course_id) == value:
        return Transition(user=user)

    updated = user.model_copy(deep=True)
    updated.course_progress[course_id] = value
    return Transition(user=updated, changed=True)


def request_completion(
    user: User,
    course_id: str,
    course: Optional[Course],
    evidence: Optional[str] = None
) -> Transition:
    """
    Ask an admin to mark a course completed.

    A no-op for courses that are unregistered, already pending, or already
    completed. Non-blank evidence is kept with the request.
    """
    if (
        not user.is_registered(course_id)
        or user.is_pending(course_id)
        or user.is_completed(course_id)
    ):
        return Transition(user=user)

    updated = user.model_copy(deep=True)
    updated.pending_course_ids.append(course_id)
    if evidence and evidence.strip():
        updated.completion_evidence[course_id] = evidence.strip()

    title = course.title if course else course_id
    return Transition(
        user=updated,
        changed=True,
        events=[Notice(f"Completion request sent for {title}", NotificationCategory.INFO)]
    )


def approve_completion(user: User, course_id: str, course: Optional[Course]) -> Transition:
    """
    Approve a completion: pending -> completed, progress forced to 100.

    Silently a no-op when the course no longer resolves or the user never
    registered for it. Completed entries are not duplicated on repeat
    approval.
    """
    if course is None or not user.is_registered(course_id):
        return Transition(user=user)

    updated = user.model_copy(deep=True)
    updated.pending_course_ids = [cid for cid in updated.pending_course_ids if cid != course_id]
    if course_id not in updated.completed_course_ids:
        updated.completed_course_ids.append(course_id)
    updated.course_progress[course_id] = MAX_PROGRESS

    return Transition(
        user=updated,
        changed=updated != user,
        events=[
            Notice(f"Approved completion for {user.name}", NotificationCategory.SUCCESS),
            Email(
                to=user.email,
                subject="Course Completion Approved",
                body=compose_letter(
                    user.name,
                    f'Congratulations! Your completion of the course "{course.title}" '
                    "has been approved by the administration. "
                    "You can now view and download your certificate."
                )
            )
        ]
    )


def reject_completion(user: User, course_id: str, course: Optional[Course]) -> Transition:
    """
    Reject a completion: pending -> registered.

    Progress and completed courses are left alone. The email is only sent
    when the course still resolves.
    """
    updated = user.model_copy(deep=True)
    updated.pending_course_ids = [cid for cid in updated.pending_course_ids if cid != course_id]

    events: List[Event] = [
        Notice(f"Rejected completion for {user.name}", NotificationCategory.INFO)
    ]
    if course:
        events.append(Email(
            to=user.email,
            subject="Course Completion Update",
            body=compose_letter(
                user.name,
                f'Regarding your completion request for "{course.title}". '
                "It has been reviewed and requires further action. "
                "Please contact your instructor."
            )
        ))

    return Transition(user=updated, changed=updated != user, events=events)
