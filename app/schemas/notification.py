from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.schemas.user import UserSummary


class NotificationResponse(BaseModel):
    id: int
    recipient_id: int
    actor: Optional[UserSummary]
    type: str
    title: Optional[str]
    content: Optional[str]
    related_item_id: Optional[int]
    related_item_type: Optional[str]
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime
    expires_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread_count: int


class DeletedCountResponse(BaseModel):
    deleted_count: int
