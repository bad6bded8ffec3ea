"""
Key-value storage facade for Deepmetric.

Wraps the ``stored_records`` table with get/set/delete by logical key.
Writes are flushed but not committed; the caller owns the transaction.
"""

from typing import Any, Optional
from sqlalchemy.orm import Session
import copy
import logging

from .config import settings


logger = logging.getLogger(__name__)


# Logical record keys
USERS_KEY = settings.storage_key("users")
SESSION_KEY = settings.storage_key("user")
REVIEWS_KEY = settings.storage_key("reviews")
COURSES_KEY = settings.storage_key("courses")


class KeyValueStore:
    """
    Durable key-value storage backed by SQLAlchemy.
    """

    def __init__(self, db: Session):
        self.db = db

    def _record(self, key: str):
        from deepmetric.models.record import StoredRecord

        return self.db.get(StoredRecord, key)

    def exists(self, key: str) -> bool:
        """Check whether a record is stored under the key."""
        return self._record(key) is not None

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Read the value stored under a key.

        Args:
            key: Storage key
            default: Value returned when nothing is stored

        Returns:
            Any: The deserialized value, or ``default``
        """
        record = self._record(key)
        if record is None or record.payload is None:
            return default
        # In-place edits by callers must not alias the committed state
        return copy.deepcopy(record.payload)

    def set(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under a key.

        Raises ``sqlalchemy.orm.exc.StaleDataError`` on flush if another
        writer updated the record since it was read in this session.

        Args:
            key: Storage key
            value: JSON-serializable value
        """
        from deepmetric.models.record import StoredRecord

        value = copy.deepcopy(value)
        record = self._record(key)
        if record is None:
            record = StoredRecord(key=key, payload=value)
            self.db.add(record)
        else:
            record.payload = value
        self.db.flush()
        logger.debug(f"Stored record {key} (version {record.version})")

    def delete(self, key: str) -> None:
        """Remove the record stored under a key, if any."""
        record = self._record(key)
        if record is not None:
            self.db.delete(record)
            self.db.flush()
            logger.debug(f"Removed record {key}")
