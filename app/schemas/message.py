from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.schemas.user import UserSummary


class MessageCreate(BaseModel):
    text: str = ""
    image: Optional[str] = None


class MessageUpdate(BaseModel):
    # An explicit null image clears it; an absent image leaves it untouched.
    text: Optional[str] = None
    image: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    text: str
    image: Optional[str]
    is_read: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    participant: UserSummary
    last_message: str
    last_message_at: datetime
    unread_count: int
