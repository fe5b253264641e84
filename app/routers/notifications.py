from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user
from app.errors import ValidationError
from app.models.user import User
from app.schemas.notification import NotificationResponse, UnreadCountResponse, DeletedCountResponse
from app.services import notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Latest unexpired notifications for the current user."""
    return notifications.list_notifications(db, current_user.id)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"unread_count": notifications.unread_count(db, current_user.id)}


@router.patch("/read-all")
async def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = notifications.mark_all_as_read(db, current_user.id)
    return {"updated_count": updated}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notifications.mark_as_read(db, notification_id, current_user.id)


@router.delete("/{notification_id}", response_model=DeletedCountResponse)
async def delete_notifications(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete one notification, or every notification when the id is ``all``."""
    if notification_id == "all":
        deleted = notifications.delete_all_notifications(db, current_user.id)
    else:
        try:
            target = int(notification_id)
        except ValueError:
            raise ValidationError("Invalid notification id")
        deleted = notifications.delete_notification(db, target, current_user.id)
    return {"deleted_count": deleted}
