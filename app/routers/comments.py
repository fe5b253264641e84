from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, get_current_user_optional
from app.models.user import User
from app.schemas.post import CommentCreate, CommentUpdate, CommentResponse, LikeToggleResponse
from app.services import comments

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    comment = comments.get_visible_comment(db, comment_id, current_user)
    return comments.serialize_comment(comment, current_user)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = comments.update_comment(db, comment_id, current_user, payload.content)
    return comments.serialize_comment(comment, current_user)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comments.delete_comment(db, comment_id, current_user)
    return {"status": "ok"}


@router.get("/{comment_id}/replies", response_model=list[CommentResponse])
async def list_replies(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    replies = comments.list_replies(db, comment_id, current_user)
    return [comments.serialize_comment(r, current_user) for r in replies]


@router.post("/{comment_id}/replies", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_reply(
    comment_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reply = comments.add_reply(db, comment_id, current_user, payload.content)
    return comments.serialize_comment(reply, current_user)


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
async def toggle_comment_like(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return comments.toggle_comment_like(db, comment_id, current_user)
