"""
Progress router for Deepmetric.

Handles course registration, self-reported progress, completion requests
and the learner dashboard.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from deepmetric.core.database import get_db
from deepmetric.schemas.progress import CompletionRequest, Dashboard, ProgressUpdate
from deepmetric.schemas.user import User
from deepmetric.services.catalog import ReviewStore
from deepmetric.services.directory import EnrollmentService
from deepmetric.routers.auth import get_current_user, get_enrollment, get_reviews


# Every endpoint here needs a session; callers without one are sent to sign in
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/courses/{course_id}/register", response_model=User)
def register_course(
    course_id: str,
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> User:
    """
    Register for a course. Registering twice changes nothing.
    """
    user = service.register_course(course_id)
    db.commit()
    return user


@router.put("/courses/{course_id}", response_model=User)
def update_progress(
    course_id: str,
    progress_data: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> User:
    """
    Set progress on a registered course, clamped to 0-100.
    """
    user = service.set_progress(course_id, progress_data.percent)
    db.commit()
    return user or current_user


@router.post("/courses/{course_id}/complete", response_model=User)
def request_completion(
    course_id: str,
    completion_data: CompletionRequest,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> User:
    """
    Ask an admin to mark a registered course completed.
    """
    user = service.request_completion(course_id, completion_data.evidence)
    db.commit()
    return user or current_user


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    service: EnrollmentService = Depends(get_enrollment),
    reviews: ReviewStore = Depends(get_reviews)
) -> Dashboard:
    """
    Get the signed-in user's courses with status and progress.
    """
    return service.dashboard(reviews)
