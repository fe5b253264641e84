from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.schemas.user import UserSummary


class FriendRequestCreate(BaseModel):
    receiver_id: int = Field(alias="receiverId")

    class Config:
        populate_by_name = True


class FriendRequestRespond(BaseModel):
    action: str


class FriendRequestResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    status: str
    created_at: datetime
    responded_at: Optional[datetime]

    class Config:
        from_attributes = True


class PendingFriendRequestResponse(FriendRequestResponse):
    sender: UserSummary


class FriendDirectoryEntry(BaseModel):
    id: int
    username: str
    fullname: str
    email: str
    profile_image: Optional[str]
    role: str
    location: Optional[str]
    bio: Optional[str]
    status: str  # friend, pending, accepted, rejected, none
    request_id: Optional[int]
    request_direction: Optional[str]  # sent, received
