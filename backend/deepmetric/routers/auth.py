"""
Authentication router for Deepmetric.

Handles sign-in, sign-out and the active session, plus the request-scoped
dependencies shared by the other routers.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from deepmetric.core.config import settings
from deepmetric.core.database import get_db
from deepmetric.core.storage import KeyValueStore
from deepmetric.schemas.auth import LoginRequest
from deepmetric.schemas.user import SessionResponse, SessionState, User
from deepmetric.services.catalog import CatalogStore, ReviewStore
from deepmetric.services.directory import EnrollmentService
from deepmetric.services.notifications import NotificationSink, get_notifier


router = APIRouter()


# Dependencies
def get_store(db: Session = Depends(get_db)) -> KeyValueStore:
    return KeyValueStore(db)


def get_catalog(store: KeyValueStore = Depends(get_store)) -> CatalogStore:
    return CatalogStore(store)


def get_reviews(store: KeyValueStore = Depends(get_store)) -> ReviewStore:
    return ReviewStore(store)


def get_enrollment(
    store: KeyValueStore = Depends(get_store),
    catalog: CatalogStore = Depends(get_catalog),
    notifier: NotificationSink = Depends(get_notifier)
) -> EnrollmentService:
    return EnrollmentService(store, catalog, notifier)


def get_optional_user(
    service: EnrollmentService = Depends(get_enrollment)
) -> Optional[User]:
    """
    Get the signed-in user, if any.
    """
    return service.current_user()


def get_current_user(
    service: EnrollmentService = Depends(get_enrollment)
) -> User:
    """
    Get the signed-in user.

    Without one, ``SessionRequired`` sends the caller to sign in.
    """
    return service.require_user()


def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Verify that the current user has admin privileges.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def is_admin_email(email: str) -> bool:
    """Signing in with the distinguished admin email grants the admin role."""
    return email.lower() == settings.ADMIN_EMAIL.lower()


# Endpoints
@router.get("/login")
async def login_prompt(
    current_user: Optional[User] = Depends(get_optional_user)
) -> Dict[str, Any]:
    """
    Where callers without a session are sent.
    """
    return {
        "message": "Sign in with your name and email to continue",
        "authenticated": current_user is not None
    }


@router.post("/login", response_model=SessionResponse)
def login(
    credentials: LoginRequest,
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Sign in by email, creating the account on first sign-in.
    """
    result = service.authenticate(
        name=credentials.name,
        email=credentials.email,
        is_admin=is_admin_email(credentials.email)
    )
    db.commit()

    return {
        "user": result.user,
        "is_new": result.created
    }


@router.post("/logout")
def logout(
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> Dict[str, str]:
    """
    End the active session.
    """
    service.logout()
    db.commit()

    return {"message": "Successfully logged out"}


@router.get("/me", response_model=SessionState)
async def get_session(
    current_user: Optional[User] = Depends(get_optional_user)
) -> Dict[str, Any]:
    """
    Get the signed-in user, or null.
    """
    return {"user": current_user}

