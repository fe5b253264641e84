from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, JSON, Table
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

ROLES = ("entrepreneur", "investor", "startup", "organisation", "university", "admin", "super_admin")
ADMIN_ROLES = ("admin", "super_admin")

# Each friendship is stored twice, once per direction.
user_friends = Table(
    "user_friends",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("friend_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    fullname = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False)
    # Shape depends on role, see app.schemas.user.ROLE_PROFILE_MODELS
    profile = Column(JSON, nullable=True)

    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    profile_image = Column(String(500), nullable=True)

    # Verification
    is_verified = Column(Boolean, default=False)
    verification_code = Column(String(6), nullable=True)
    verification_code_expires_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    friends = relationship(
        "User",
        secondary=user_friends,
        primaryjoin=id == user_friends.c.user_id,
        secondaryjoin=id == user_friends.c.friend_id,
        order_by="User.id",
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
