"""
Notifications router for Deepmetric.
"""

from typing import List, Dict
from fastapi import APIRouter, Depends, HTTPException, status

from deepmetric.schemas.notification import Notification, SimulatedEmail
from deepmetric.services.notifications import NotificationSink, get_notifier


router = APIRouter()


@router.get("/", response_model=List[Notification])
async def list_notifications(
    notifier: NotificationSink = Depends(get_notifier)
) -> List[Notification]:
    """
    Get notifications that have not been dismissed or expired.
    """
    return notifier.active()


@router.get("/outbox", response_model=List[SimulatedEmail])
async def list_outbox(
    notifier: NotificationSink = Depends(get_notifier)
) -> List[SimulatedEmail]:
    """
    Get emails that were simulated instead of sent.
    """
    return notifier.outbox


@router.delete("/{notification_id}")
async def dismiss_notification(
    notification_id: int,
    notifier: NotificationSink = Depends(get_notifier)
) -> Dict[str, str]:
    """
    Dismiss a notification early.
    """
    if not notifier.dismiss(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    return {"message": "Notification dismissed"}
