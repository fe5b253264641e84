from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.schemas.user import UserSummary


class MediaItem(BaseModel):
    url: str
    storage_id: Optional[str] = Field(default=None, alias="storageId")
    type: str = "image"

    class Config:
        populate_by_name = True


class MediaResponse(BaseModel):
    url: str
    storage_id: Optional[str] = None
    type: str

    class Config:
        from_attributes = True


class PostCreate(BaseModel):
    content: str = ""
    visibility: str = "public"
    media: list[MediaItem] = []


class PostUpdate(BaseModel):
    content: Optional[str] = None
    visibility: Optional[str] = None
    media: list[MediaItem] = []
    media_to_delete: list[str] = Field(default=[], alias="mediaToDelete")

    class Config:
        populate_by_name = True


class PostResponse(BaseModel):
    id: int
    author: UserSummary
    content: str
    visibility: str
    media: list[MediaResponse]
    likes_count: int
    comments_count: int
    shares_count: int
    is_liked: bool
    is_bookmarked: bool
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total_posts: int
    total_pages: int
    has_next_page: bool


class FeedResponse(BaseModel):
    items: list[PostResponse]
    pagination: Pagination


class LikeToggleResponse(BaseModel):
    likes_count: int
    is_liked: bool


class BookmarkResponse(BaseModel):
    is_bookmarked: bool


class ShareResponse(BaseModel):
    shares_count: int


class CommentCreate(BaseModel):
    content: str = ""


class CommentUpdate(BaseModel):
    content: str = ""


class CommentResponse(BaseModel):
    id: int
    author: UserSummary
    post_id: int
    content: str
    parent_comment_id: Optional[int]
    replies_count: int
    likes_count: int
    is_liked: bool
    created_at: datetime
    updated_at: datetime
