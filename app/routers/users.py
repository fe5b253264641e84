from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.user import UserResponse, PublicUserResponse, AccountUpdateRequest
from app.services import users

router = APIRouter(prefix="/api/users", tags=["users"])


@router.put("/me", response_model=UserResponse)
async def update_account(
    update_data: AccountUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update account settings (fullname, bio, location, profile image)."""
    return users.update_account(db, current_user, update_data)


@router.delete("/me")
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Soft-delete the current account."""
    users.soft_delete_user(db, current_user)
    return {"status": "ok"}


@router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return users.get_user(db, user_id)
