"""
Admin routers for Deepmetric.

This module contains all admin-specific API endpoints:
- courses: Catalog management (create, replace, delete)
- completions: Completion request queue (approve, reject)
"""

from fastapi import APIRouter, Depends

from deepmetric.core.database import DatabaseManager
from deepmetric.services.catalog import ReviewStore
from deepmetric.services.directory import EnrollmentService
from deepmetric.routers.auth import get_current_admin_user, get_enrollment, get_reviews

# Import admin sub-routers
from .courses import router as courses_router
from .completions import router as completions_router


# Create admin router
admin_router = APIRouter()

# Include all admin sub-routers
admin_router.include_router(
    courses_router,
    prefix="/courses",
    tags=["admin-courses"],
    dependencies=[Depends(get_current_admin_user)]
)

admin_router.include_router(
    completions_router,
    prefix="/completions",
    tags=["admin-completions"],
    dependencies=[Depends(get_current_admin_user)]
)


# Admin dashboard endpoint
@admin_router.get("/dashboard", dependencies=[Depends(get_current_admin_user)])
async def get_admin_dashboard(
    service: EnrollmentService = Depends(get_enrollment),
    reviews: ReviewStore = Depends(get_reviews)
) -> dict:
    """
    Get admin dashboard overview with statistics.
    """
    users = service.directory
    courses = service.catalog.courses

    total_enrollments = sum(len(u.registered_course_ids) for u in users)
    completed_courses = sum(len(u.completed_course_ids) for u in users)

    return {
        "statistics": {
            "courses": {
                "total": len(courses)
            },
            "users": {
                "total": len(users),
                "admins": len([u for u in users if u.is_admin])
            },
            "enrollments": {
                "total": total_enrollments,
                "completed": completed_courses,
                "completion_rate": (completed_courses / total_enrollments * 100) if total_enrollments > 0 else 0
            },
            "reviews": {
                "total": len(reviews.reviews)
            }
        },
        "pending_request_count": service.pending_requests().total,
        "storage": DatabaseManager.get_record_stats()
    }
