"""
Core module for the Deepmetric backend.

This module contains core functionality including:
- Configuration management
- Database connections and keyed record storage
- Signed credential tokens
"""

from .config import settings
from .database import get_db, engine, SessionLocal
from .storage import KeyValueStore
from .security import (
    create_certificate_token,
    verify_certificate_token,
    verify_token
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "KeyValueStore",
    "create_certificate_token",
    "verify_certificate_token",
    "verify_token"
]
