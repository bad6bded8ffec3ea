"""
Courses router for Deepmetric.

Handles user-facing catalog endpoints: browsing courses and reading and
submitting reviews.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from deepmetric.core.database import get_db
from deepmetric.schemas.course import Course, CourseLevel
from deepmetric.schemas.notification import NotificationCategory
from deepmetric.schemas.progress import CourseCatalog
from deepmetric.schemas.review import CourseReviews, Review, ReviewCreate
from deepmetric.schemas.user import User
from deepmetric.services.catalog import CatalogStore, ReviewStore
from deepmetric.services.notifications import NotificationSink, get_notifier
from deepmetric.routers.auth import (
    get_catalog,
    get_current_user,
    get_optional_user,
    get_reviews
)


router = APIRouter()


@router.get("/", response_model=CourseCatalog)
async def list_courses(
    level: Optional[CourseLevel] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    catalog: CatalogStore = Depends(get_catalog),
    reviews: ReviewStore = Depends(get_reviews)
) -> Dict[str, Any]:
    """
    List catalog courses with optional filtering.
    """
    courses = catalog.list_courses(level=level, tag=tag, search=search)

    course_list = []
    for course in courses:
        course_list.append({
            "course": course,
            "review_stats": reviews.review_stats(course.id),
            # Enrollment state only for signed-in users
            "status": current_user.status_for(course.id) if current_user else None,
            "progress": current_user.course_progress.get(course.id) if current_user else None
        })

    return {
        "courses": course_list,
        "total": len(course_list)
    }


@router.get("/{course_id}", response_model=Course)
async def get_course(
    course_id: str,
    catalog: CatalogStore = Depends(get_catalog)
) -> Course:
    """
    Get a single course.
    """
    course = catalog.get_course(course_id)
    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )
    return course


@router.get("/{course_id}/reviews", response_model=CourseReviews)
async def list_reviews(
    course_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    reviews: ReviewStore = Depends(get_reviews)
) -> Dict[str, Any]:
    """
    Get reviews and rating statistics for a course.
    """
    return {
        "reviews": reviews.reviews_for(course_id),
        "stats": reviews.review_stats(course_id),
        "has_user_rated": reviews.has_user_rated(current_user.id, course_id) if current_user else False
    }


@router.post("/{course_id}/reviews", response_model=Review, status_code=status.HTTP_201_CREATED)
def submit_review(
    course_id: str,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    catalog: CatalogStore = Depends(get_catalog),
    reviews: ReviewStore = Depends(get_reviews),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db)
) -> Review:
    """
    Rate a course.
    """
    if not catalog.get_course(course_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    review = reviews.submit_review(
        user_id=current_user.id,
        user_name=current_user.name,
        course_id=course_id,
        rating=review_data.rating,
        comment=review_data.comment
    )
    db.commit()

    notifier.notify("Review submitted successfully!", NotificationCategory.SUCCESS)
    return review
