"""
Database configuration and session management for Deepmetric.

Sets up SQLAlchemy engine, session factory, and base model.
"""

from typing import Generator
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool
import logging

from .config import settings


# Configure logging
logger = logging.getLogger(__name__)


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Create engine based on environment
if settings.TESTING:
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif settings.DATABASE_URL.startswith("sqlite"):
    # Local file store, shared across the request threadpool
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        echo=settings.DEBUG, # Log SQL statements if in debug mode
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Initialize the store with required data.

    Seeds the default course catalog the first time the service starts
    against an empty store. Existing catalogs are left untouched, including
    catalogs an admin has emptied on purpose.

    Args:
        db: Database session
    """
    from deepmetric.core.storage import KeyValueStore, COURSES_KEY
    from deepmetric.services.catalog import DEFAULT_COURSES

    store = KeyValueStore(db)
    if settings.SEED_DEFAULT_COURSES and not store.exists(COURSES_KEY):
        store.set(
            COURSES_KEY,
            [course.model_dump(mode="json", by_alias=True) for course in DEFAULT_COURSES]
        )
        db.commit()
        logger.info(f"Seeded default catalog with {len(DEFAULT_COURSES)} courses")


def check_database_connection() -> bool:
    """
    Check if database is accessible.

    Returns:
        bool: True if database is accessible, False otherwise
    """
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


class DatabaseManager:
    """
    Database manager for handling database operations.
    """

    @staticmethod
    def create_all_tables():
        """Create all database tables."""
        # Import models to ensure they're registered
        import deepmetric.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("All database tables created successfully")

    @staticmethod
    def drop_all_tables():
        """Drop all database tables. USE WITH CAUTION!"""
        Base.metadata.drop_all(bind=engine)
        logger.warning("All database tables dropped")

    @staticmethod
    def reset_database():
        """Reset database by dropping and recreating all tables."""
        DatabaseManager.drop_all_tables()
        DatabaseManager.create_all_tables()

        # Initialize with default data
        db = SessionLocal()
        try:
            init_db(db)
            logger.info("Database reset completed")
        finally:
            db.close()

    @staticmethod
    def get_record_stats() -> dict:
        """
        Get statistics about the persisted records.

        Returns:
            dict: Size of each stored record, keyed by storage key
        """
        from deepmetric.models import StoredRecord

        stats = {}
        db = SessionLocal()
        try:
            for record in db.query(StoredRecord).all():
                payload = record.payload
                stats[record.key] = {
                    "version": record.version,
                    "entries": len(payload) if isinstance(payload, list) else 1,
                    "updated_at": record.updated_at.isoformat() if record.updated_at else None
                }
            return stats
        finally:
            db.close()
