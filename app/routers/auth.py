from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from app.config import ACCESS_TOKEN_COOKIE, ACCESS_TOKEN_EXPIRE_MINUTES, ENVIRONMENT
from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserResponse,
    VerifyEmailRequest,
    TokenResponse,
    RefreshTokenRequest,
)
from app.services import users
from app.services.auth import create_tokens, decode_token
from app.errors import AuthenticationError

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        httponly=True,
        secure=ENVIRONMENT == "production",
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new, unverified account."""
    return users.register_user(db, user_data)


@router.post("/verify-email", response_model=TokenResponse)
async def verify_email(payload: VerifyEmailRequest, response: Response, db: Session = Depends(get_db)):
    """Activate an account with its verification code and log it in."""
    user = users.verify_email(db, payload.email, payload.code)
    tokens = create_tokens(user.id)
    _set_session_cookie(response, tokens["access_token"])
    return tokens


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    """Login with email and password."""
    user = users.authenticate(db, credentials.email, credentials.password)
    tokens = create_tokens(user.id)
    _set_session_cookie(response, tokens["access_token"])
    return tokens


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshTokenRequest, response: Response, db: Session = Depends(get_db)):
    """Refresh access token using refresh token."""
    payload = decode_token(request.refresh_token)
    if payload.get("type") != "refresh":
        raise AuthenticationError("Invalid token type")

    user = users.find_user(db, int(payload.get("sub")))
    if not user:
        raise AuthenticationError("User not found")

    tokens = create_tokens(user.id)
    _set_session_cookie(response, tokens["access_token"])
    return tokens


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return {"status": "ok"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user info."""
    return current_user
