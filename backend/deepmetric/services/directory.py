"""
User directory and session adapter for Deepmetric.

The directory (every user record) is the single source of truth. The
session is stored as the active user's id and resolved against the
directory on every read, so there is never a second copy of a user record
to keep in sync.

``EnrollmentService`` loads state from storage, applies the pure
transitions from ``services.enrollment``, writes the directory back, and
hands the emitted events to the notification sink.
"""

from typing import Callable, List, Optional
import logging
import uuid

from deepmetric.core.storage import KeyValueStore, USERS_KEY, SESSION_KEY
from deepmetric.schemas.progress import (
    CourseProgressEntry,
    Dashboard,
    PendingQueue,
    PendingRequest
)
from deepmetric.schemas.user import User
from deepmetric.services import enrollment
from deepmetric.services.catalog import CatalogStore, ReviewStore
from deepmetric.services.migrations import upgrade_session_record, upgrade_user_record
from deepmetric.services.notifications import NotificationSink


logger = logging.getLogger(__name__)


class SessionRequired(Exception):
    """An operation needs a signed-in user and there is none."""


def load_directory(store: KeyValueStore) -> List[User]:
    """
    Load the user directory, upgrading every record to the current schema.

    Args:
        store: Key-value storage

    Returns:
        List[User]: Users in directory order
    """
    records = store.get(USERS_KEY, default=[])
    return [User.model_validate(upgrade_user_record(record)) for record in records]


def save_directory(store: KeyValueStore, directory: List[User]) -> None:
    store.set(USERS_KEY, [user.to_record() for user in directory])


class EnrollmentService:
    """
    Applies enrollment transitions with persistence and notifications.
    """

    def __init__(
        self,
        store: KeyValueStore,
        catalog: CatalogStore,
        notifier: NotificationSink,
        id_factory: Optional[Callable[[], str]] = None
    ):
        self.store = store
        self.catalog = catalog
        self.notifier = notifier
        self.id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._directory: Optional[List[User]] = None

    # Directory and session

    @property
    def directory(self) -> List[User]:
        if self._directory is None:
            self._directory = load_directory(self.store)
        return self._directory

    def _save(self, directory: List[User]) -> None:
        self._directory = directory
        save_directory(self.store, directory)

    def get_user(self, user_id: str) -> Optional[User]:
        return enrollment.find_by_id(self.directory, user_id)

    def active_user_id(self) -> Optional[str]:
        return upgrade_session_record(self.store.get(SESSION_KEY))

    def current_user(self) -> Optional[User]:
        """Resolve the active session against the directory."""
        user_id = self.active_user_id()
        if user_id is None:
            return None

        user = self.get_user(user_id)
        if user is None:
            logger.warning(f"Session refers to unknown user {user_id}")
        return user

    def require_user(self) -> User:
        """
        Get the signed-in user.

        Raises:
            SessionRequired: If nobody is signed in
        """
        user = self.current_user()
        if user is None:
            raise SessionRequired()
        return user

    def _commit(self, transition: enrollment.Transition) -> User:
        if transition.changed:
            self._save(enrollment.replace_user(self.directory, transition.user))
        self.notifier.dispatch(transition.events)
        return transition.user

    # Operations

    def authenticate(self, name: str, email: str, is_admin: bool) -> enrollment.AuthResult:
        """
        Sign in by email, creating the user on first sign-in.

        No credential check is made; identity is the email address.
        """
        result = enrollment.authenticate(
            self.directory, name, email, is_admin, self.id_factory
        )
        if result.changed:
            self._save(result.directory)

        self.store.set(SESSION_KEY, result.user.id)
        self.notifier.dispatch(result.events)

        if result.created:
            logger.info(f"User created: {result.user.id} ({result.user.email}, {result.user.role.value})")
        else:
            logger.info(f"User signed in: {result.user.id} ({result.user.email})")
        return result

    def logout(self) -> None:
        """End the active session. The directory is untouched."""
        user_id = self.active_user_id()
        self.store.delete(SESSION_KEY)
        self.notifier.notify("You have successfully logged out.")
        if user_id:
            logger.info(f"User signed out: {user_id}")

    def register_course(self, course_id: str) -> User:
        """
        Register the signed-in user for a course.

        Raises:
            SessionRequired: If nobody is signed in
        """
        user = self.require_user()
        course = self.catalog.get_course(course_id)
        return self._commit(enrollment.register_course(user, course_id, course))

    def set_progress(self, course_id: str, percent: int) -> Optional[User]:
        """Set the signed-in user's progress; no-op without a session."""
        user = self.current_user()
        if user is None:
            return None
        return self._commit(enrollment.set_progress(user, course_id, percent))

    def request_completion(self, course_id: str, evidence: Optional[str] = None) -> Optional[User]:
        """Ask for a course to be marked completed; no-op without a session."""
        user = self.current_user()
        if user is None:
            return None
        course = self.catalog.get_course(course_id)
        return self._commit(enrollment.request_completion(user, course_id, course, evidence))

    def approve_completion(self, target_user_id: str, course_id: str) -> Optional[User]:
        """
        Approve a completion request. The caller checks the admin role.

        Returns None, changing nothing, if the user or course is unknown or
        the approval would not change the user's record.
        """
        user = self.get_user(target_user_id)
        course = self.catalog.get_course(course_id)
        if user is None or course is None:
            logger.debug(f"Ignoring approval for unknown user {target_user_id} or course {course_id}")
            return None

        transition = enrollment.approve_completion(user, course_id, course)
        if not transition.changed:
            logger.debug(f"Approval for user {target_user_id}, course {course_id} changes nothing")
            return None

        approved = self._commit(transition)
        logger.info(f"Completion approved: user {target_user_id}, course {course_id}")
        return approved

    def reject_completion(self, target_user_id: str, course_id: str) -> Optional[User]:
        """
        Reject a completion request. The caller checks the admin role.

        Returns None, changing nothing, if the user is unknown or has no
        pending request for the course.
        """
        user = self.get_user(target_user_id)
        if user is None:
            logger.debug(f"Ignoring rejection for unknown user {target_user_id}")
            return None

        course = self.catalog.get_course(course_id)
        transition = enrollment.reject_completion(user, course_id, course)
        if not transition.changed:
            logger.debug(f"No pending request to reject for user {target_user_id}, course {course_id}")
            return None

        rejected = self._commit(transition)
        logger.info(f"Completion rejected: user {target_user_id}, course {course_id}")
        return rejected

    # Projections

    def pending_requests(self) -> PendingQueue:
        """
        Get all completion requests awaiting a decision.

        Requests for courses that are no longer in the catalog are left out.
        """
        requests = []
        for user in self.directory:
            for course_id in user.pending_course_ids:
                course = self.catalog.get_course(course_id)
                if course is None:
                    continue
                requests.append(PendingRequest(
                    user_id=user.id,
                    user_name=user.name,
                    user_email=user.email,
                    course_id=course_id,
                    course_title=course.title,
                    evidence=user.completion_evidence.get(course_id)
                ))
        return PendingQueue(requests=requests, total=len(requests))

    def dashboard(self, reviews: ReviewStore) -> Dashboard:
        """
        Get the signed-in user's registered courses with their state.

        Raises:
            SessionRequired: If nobody is signed in
        """
        user = self.require_user()
        entries = []
        for course_id in user.registered_course_ids:
            course = self.catalog.get_course(course_id)
            if course is None:
                continue
            entries.append(CourseProgressEntry(
                course=course,
                status=user.status_for(course_id),
                progress=user.progress_for(course_id),
                evidence=user.completion_evidence.get(course_id),
                review_stats=reviews.review_stats(course_id),
                has_user_rated=reviews.has_user_rated(user.id, course_id)
            ))
        return Dashboard(user=user, courses=entries)
