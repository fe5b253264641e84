from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timedelta
from app.config import NOTIFICATION_TTL_DAYS
from app.database import Base

NOTIFICATION_TYPES = ("message", "post", "friend_request", "friend_accept", "event", "like", "comment")
RELATED_ITEM_TYPES = ("Post", "Message", "User", "Event", "Challenge")


def default_expiry():
    return datetime.utcnow() + timedelta(days=NOTIFICATION_TTL_DAYS)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    related_item_id = Column(Integer, nullable=True)
    related_item_type = Column(String(20), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    expires_at = Column(DateTime, default=default_expiry, nullable=False, index=True)

    recipient = relationship("User", foreign_keys=[recipient_id])
    actor = relationship("User", foreign_keys=[actor_id])
