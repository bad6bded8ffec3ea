"""
Admin completions router for Deepmetric.

Handles the completion-request queue: listing pending requests and
approving or rejecting them.
"""

from typing import List, Dict, Any
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from deepmetric.core.database import get_db
from deepmetric.schemas.progress import CompletionDecision, PendingQueue
from deepmetric.schemas.user import UserSummary
from deepmetric.services.directory import EnrollmentService
from deepmetric.routers.auth import get_enrollment


router = APIRouter()


@router.get("/", response_model=PendingQueue)
async def list_pending_requests(
    service: EnrollmentService = Depends(get_enrollment)
) -> PendingQueue:
    """
    Get every completion request awaiting a decision.
    """
    return service.pending_requests()


@router.get("/users", response_model=List[UserSummary])
async def list_users(
    service: EnrollmentService = Depends(get_enrollment)
) -> List[UserSummary]:
    """
    Get the user directory.
    """
    return [UserSummary.from_user(user) for user in service.directory]


@router.post("/{user_id}/{course_id}/approve", response_model=CompletionDecision)
def approve_completion(
    user_id: str,
    course_id: str,
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Approve a completion request.

    Unknown users or courses are ignored.
    """
    user = service.approve_completion(user_id, course_id)
    db.commit()
    return {"applied": user is not None, "user": user}


@router.post("/{user_id}/{course_id}/reject", response_model=CompletionDecision)
def reject_completion(
    user_id: str,
    course_id: str,
    service: EnrollmentService = Depends(get_enrollment),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Reject a completion request.

    Unknown users are ignored.
    """
    user = service.reject_completion(user_id, course_id)
    db.commit()
    return {"applied": user is not None, "user": user}
