"""User directory: registration, verification, lookups and soft deletion."""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from app.config import VERIFICATION_CODE_TTL_MINUTES
from app.errors import ValidationError, ConflictError, NotFoundError, AuthenticationError, AuthorizationError
from app.models.user import User
from app.schemas.user import UserCreate, AccountUpdateRequest, ROLE_PROFILE_MODELS
from app.services.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)

ROLE_ALIASES = {
    "investisseur": "investor",
    "organization": "organisation",
    "universite": "university",
    "université": "university",
}


def active_users(db: Session):
    """Base query for users that have not been soft-deleted."""
    return db.query(User).filter(User.deleted_at.is_(None))


def get_user(db: Session, user_id: int) -> User:
    user = active_users(db).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def find_user(db: Session, user_id: int) -> Optional[User]:
    return active_users(db).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return active_users(db).filter(User.email == email.lower()).first()


def normalize_role(role: str) -> str:
    role = (role or "").strip().lower()
    return ROLE_ALIASES.get(role, role)


def build_role_profile(role: str, payload: UserCreate) -> dict:
    """Validate and extract the profile sub-record for a self-registering role."""
    model = ROLE_PROFILE_MODELS.get(role)
    if model is None:
        raise ValidationError(
            "Invalid role specified. Allowed roles: " + ", ".join(ROLE_PROFILE_MODELS)
        )
    fields = {name: getattr(payload, name) for name in model.model_fields}
    try:
        return model(**fields).model_dump()
    except PydanticValidationError as exc:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ValidationError(f"Missing or invalid profile fields for role {role}: {missing}")


def register_user(db: Session, payload: UserCreate) -> User:
    role = normalize_role(payload.role)
    profile = build_role_profile(role, payload)

    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("This email is already taken")
    if db.query(User).filter(User.username == payload.username).first():
        raise ConflictError("This username is already taken")

    user = User(
        username=payload.username,
        fullname=payload.fullname,
        email=email,
        hashed_password=get_password_hash(payload.password),
        role=role,
        profile=profile,
        location=payload.location,
        bio=payload.bio,
        is_verified=False,
        verification_code=f"{secrets.randbelow(10**6):06d}",
        verification_code_expires_at=datetime.utcnow() + timedelta(minutes=VERIFICATION_CODE_TTL_MINUTES),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, role)
    return user


def verify_email(db: Session, email: str, code: str) -> User:
    user = get_user_by_email(db, email)
    if (
        not user
        or not user.verification_code
        or not secrets.compare_digest(user.verification_code, code)
        or user.verification_code_expires_at < datetime.utcnow()
    ):
        raise ValidationError("Invalid or expired verification code")

    user.is_verified = True
    user.verification_code = None
    user.verification_code_expires_at = None
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_verified:
        raise AuthorizationError("Account not activated")

    user.last_login = datetime.utcnow()
    db.commit()
    return user


def update_account(db: Session, user: User, payload: AccountUpdateRequest) -> User:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "fullname" and (value is None or len(value.strip()) < 3):
            raise ValidationError("fullname must contain at least 3 characters")
        setattr(user, field, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(user)
    return user


def soft_delete_user(db: Session, user: User) -> User:
    user.deleted_at = datetime.utcnow()
    db.commit()
    logger.info("Soft-deleted user %s", user.id)
    return user
