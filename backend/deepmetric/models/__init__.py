"""
Database models for Deepmetric.

All persisted state is held as keyed JSON records:
- users: the user directory
- session: the active user's id
- courses: the course catalog
- reviews: course reviews
"""

from deepmetric.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .record import StoredRecord

# Export all models
__all__ = [
    "Base",
    "StoredRecord"
]
