"""
Schema migrations for persisted Deepmetric records.

User records carry a ``schemaVersion`` stamp. Records written before
versioning was introduced have no stamp and are treated as version 0.
Each upgrade function takes a record at version ``n - 1`` and returns it
at version ``n``; ``upgrade_user_record`` applies them in sequence.

The chain runs on every load, so it must be idempotent on current records.
"""

from typing import Any, Callable, Dict, Optional
import logging


logger = logging.getLogger(__name__)


SCHEMA_VERSION_FIELD = "schemaVersion"

UpgradeFn = Callable[[Dict[str, Any]], Dict[str, Any]]

UPGRADES: Dict[int, UpgradeFn] = {}


def upgrade(version: int) -> Callable[[UpgradeFn], UpgradeFn]:
    """Register the function that upgrades a record to ``version``."""
    def decorator(fn: UpgradeFn) -> UpgradeFn:
        if version in UPGRADES:
            raise ValueError(f"Duplicate upgrade registered for version {version}")
        UPGRADES[version] = fn
        return fn
    return decorator


@upgrade(1)
def _add_enrollment_collections(record: Dict[str, Any]) -> Dict[str, Any]:
    # Registration, completion and role arrived together
    record["registeredCourseIds"] = record.get("registeredCourseIds") or []
    record["completedCourseIds"] = record.get("completedCourseIds") or []
    record["role"] = record.get("role") or "student"
    return record


@upgrade(2)
def _add_pending_requests(record: Dict[str, Any]) -> Dict[str, Any]:
    record["pendingCourseIds"] = record.get("pendingCourseIds") or []
    return record


@upgrade(3)
def _add_course_progress(record: Dict[str, Any]) -> Dict[str, Any]:
    record["courseProgress"] = record.get("courseProgress") or {}
    return record


@upgrade(4)
def _add_completion_evidence(record: Dict[str, Any]) -> Dict[str, Any]:
    record["completionEvidence"] = record.get("completionEvidence") or {}
    return record


@upgrade(5)
def _register_requested_courses(record: Dict[str, Any]) -> Dict[str, Any]:
    # Completion could once be requested without registering first
    registered = list(record.get("registeredCourseIds") or [])
    for course_id in record.get("pendingCourseIds", []) + record.get("completedCourseIds", []):
        if course_id not in registered:
            registered.append(course_id)
    record["registeredCourseIds"] = registered
    return record


CURRENT_SCHEMA_VERSION = max(UPGRADES)


def record_version(record: Dict[str, Any]) -> int:
    """Get the schema version of a stored user record."""
    version = record.get(SCHEMA_VERSION_FIELD)
    return version if isinstance(version, int) else 0


def upgrade_user_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a stored user record up to the current schema version.

    Args:
        record: The stored record (not modified)

    Returns:
        Dict[str, Any]: A new record at ``CURRENT_SCHEMA_VERSION``
    """
    upgraded = dict(record)
    version = record_version(upgraded)

    if version > CURRENT_SCHEMA_VERSION:
        logger.warning(
            f"User record {upgraded.get('id')} has schema version {version}, "
            f"newer than {CURRENT_SCHEMA_VERSION}"
        )
        return upgraded

    for target in range(version + 1, CURRENT_SCHEMA_VERSION + 1):
        upgraded = UPGRADES[target](upgraded)
        upgraded[SCHEMA_VERSION_FIELD] = target

    if version < CURRENT_SCHEMA_VERSION:
        logger.debug(
            f"Upgraded user record {upgraded.get('id')} "
            f"from schema version {version} to {CURRENT_SCHEMA_VERSION}"
        )
    return upgraded


def upgrade_session_record(value: Any) -> Optional[str]:
    """
    Normalize a stored session value to the active user id.

    Older layouts stored a full snapshot of the user record as the session;
    only its id is kept.

    Args:
        value: The stored session value

    Returns:
        Optional[str]: The active user id, or None when there is no session
    """
    if value is None:
        return None
    if isinstance(value, dict):
        user_id = value.get("id")
        return str(user_id) if user_id is not None else None
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value) or None
    logger.warning(f"Discarding unreadable session record of type {type(value).__name__}")
    return None
