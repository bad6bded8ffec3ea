"""
API routers for Deepmetric.

This module contains all API endpoint routers:
- auth: Sign-in, sign-out and the active session
- courses: Catalog browsing and reviews
- progress: Registration, progress and completion requests
- certificates: Certificates for completed courses
- advisor: AI course advisor and tag suggestions
- notifications: Transient notifications and simulated email
- admin: Catalog management and completion approval
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .courses import router as courses_router
from .progress import router as progress_router
from .certificates import router as certificates_router
from .advisor import router as advisor_router
from .notifications import router as notifications_router

# Import admin sub-routers
from .admin import admin_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    courses_router,
    prefix="/courses",
    tags=["courses"]
)

api_router.include_router(
    progress_router,
    prefix="/progress",
    tags=["progress"]
)

api_router.include_router(
    certificates_router,
    prefix="/certificates",
    tags=["certificates"]
)

api_router.include_router(
    advisor_router,
    prefix="/advisor",
    tags=["advisor"]
)

api_router.include_router(
    notifications_router,
    prefix="/notifications",
    tags=["notifications"]
)

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["admin"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "courses_router",
    "progress_router",
    "certificates_router",
    "advisor_router",
    "notifications_router",
    "admin_router"
]
