"""
Stored record model for Deepmetric.

Every piece of persisted state (user directory, active session, catalog,
reviews) lives in one keyed JSON record, mirroring a browser's local
key-value storage.
"""

from datetime import datetime
from typing import Any, Optional
from sqlalchemy import Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from deepmetric.core.database import Base


class StoredRecord(Base):
    """
    A serialized record stored under a fixed logical key.
    """
    __tablename__ = "stored_records"

    # Logical key, e.g. "deepmetric_users"
    key: Mapped[str] = mapped_column(String(100), primary_key=True)

    # Serialized value
    payload: Mapped[Any] = mapped_column(JSON, nullable=True)

    # Version stamp for optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_stored_record_updated", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<StoredRecord(key='{self.key}', version={self.version})>"
