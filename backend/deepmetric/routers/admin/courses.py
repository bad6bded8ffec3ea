"""
Admin courses router for Deepmetric.

Handles catalog management: creating, replacing and deleting courses.
"""

from typing import Dict
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from deepmetric.core.database import get_db
from deepmetric.schemas.course import Course, CourseCreate, CourseUpdate
from deepmetric.schemas.notification import NotificationCategory
from deepmetric.schemas.user import User
from deepmetric.services.catalog import CatalogStore, DuplicateCourseError
from deepmetric.services.notifications import NotificationSink, get_notifier
from deepmetric.routers.auth import get_catalog, get_current_user


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=Course, status_code=status.HTTP_201_CREATED)
def create_course(
    course_data: CourseCreate,
    current_admin: User = Depends(get_current_user),
    catalog: CatalogStore = Depends(get_catalog),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db)
) -> Course:
    """
    Add a course to the catalog.
    """
    try:
        course = catalog.create_course(course_data)
    except DuplicateCourseError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    db.commit()

    logger.info(f"Admin {current_admin.id} created course {course.id}")
    notifier.notify("New course created successfully", NotificationCategory.SUCCESS)
    return course


@router.put("/{course_id}", response_model=Course)
def update_course(
    course_id: str,
    course_data: CourseUpdate,
    current_admin: User = Depends(get_current_user),
    catalog: CatalogStore = Depends(get_catalog),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db)
) -> Course:
    """
    Replace a course in place.
    """
    course = catalog.update_course(course_id, course_data)
    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )
    db.commit()

    logger.info(f"Admin {current_admin.id} updated course {course_id}")
    notifier.notify("Course updated successfully", NotificationCategory.SUCCESS)
    return course


@router.delete("/{course_id}")
def delete_course(
    course_id: str,
    current_admin: User = Depends(get_current_user),
    catalog: CatalogStore = Depends(get_catalog),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db)
) -> Dict[str, str]:
    """
    Remove a course from the catalog.

    Users who registered keep the course id in their records.
    """
    if not catalog.delete_course(course_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )
    db.commit()

    logger.info(f"Admin {current_admin.id} deleted course {course_id}")
    notifier.notify("Course deleted successfully", NotificationCategory.SUCCESS)
    return {"message": "Course deleted successfully"}
