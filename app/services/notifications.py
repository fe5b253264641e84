"""Notification fan-out and read/expiry lifecycle.

``create_notification`` is the single creation primitive. The ``notify_*``
triggers wrap it for each content action and never raise: a failed
notification is logged and the triggering action keeps its outcome.
"""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import ValidationError, NotFoundError
from app.models.notification import Notification, NOTIFICATION_TYPES, RELATED_ITEM_TYPES
from app.models.post import Post
from app.models.user import User
from app.schemas.notification import NotificationResponse
from app.services.realtime import manager

logger = logging.getLogger(__name__)

NOTIFICATION_LIST_LIMIT = 50
PREVIEW_LENGTH = 100


def create_notification(
    db: Session,
    recipient_id: int,
    type: str,
    title: Optional[str] = None,
    content: Optional[str] = None,
    actor_id: Optional[int] = None,
    related_item_id: Optional[int] = None,
    related_item_type: Optional[str] = None,
) -> Notification:
    if type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Invalid notification type: {type}")
    if related_item_type is not None and related_item_type not in RELATED_ITEM_TYPES:
        raise ValidationError(f"Invalid related item type: {related_item_type}")
    if (related_item_id is None) != (related_item_type is None):
        raise ValidationError("related_item_id and related_item_type must be set together")

    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        type=type,
        title=title,
        content=content,
        related_item_id=related_item_id,
        related_item_type=related_item_type,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    manager.publish(
        recipient_id,
        "new_notification",
        NotificationResponse.model_validate(notification).model_dump(mode="json"),
    )
    return notification


def notify(db: Session, **fields) -> Optional[Notification]:
    try:
        return create_notification(db, **fields)
    except Exception:
        db.rollback()
        logger.exception(
            "Failed to create %s notification for user %s",
            fields.get("type"),
            fields.get("recipient_id"),
        )
        return None


def _preview(text: Optional[str], fallback: str) -> str:
    text = (text or "").strip()
    return text[:PREVIEW_LENGTH] if text else fallback


def notify_friend_request(db: Session, sender_id: int, receiver_id: int) -> Optional[Notification]:
    return notify(
        db,
        recipient_id=receiver_id,
        actor_id=sender_id,
        type="friend_request",
        title="New friend request",
        content="Someone sent you a friend request",
        related_item_id=sender_id,
        related_item_type="User",
    )


def notify_friend_accepted(db: Session, accepter_id: int, sender_id: int) -> Optional[Notification]:
    return notify(
        db,
        recipient_id=sender_id,
        actor_id=accepter_id,
        type="friend_accept",
        title="Friend request accepted",
        content="Your friend request was accepted",
        related_item_id=accepter_id,
        related_item_type="User",
    )


def notify_new_post(db: Session, author: User, post: Post) -> list[Notification]:
    notifications = []
    for friend in list(author.friends):
        if friend.id == author.id:
            continue
        notification = notify(
            db,
            recipient_id=friend.id,
            actor_id=author.id,
            type="post",
            title="New post",
            content=_preview(post.content, "A new post was published"),
            related_item_id=post.id,
            related_item_type="Post",
        )
        if notification:
            notifications.append(notification)
    return notifications


def notify_post_liked(db: Session, liker_id: int, post: Post) -> Optional[Notification]:
    if liker_id == post.author_id:
        return None
    return notify(
        db,
        recipient_id=post.author_id,
        actor_id=liker_id,
        type="like",
        title="Your post was liked",
        content="Someone liked your post",
        related_item_id=post.id,
        related_item_type="Post",
    )


def notify_post_commented(db: Session, commenter_id: int, post: Post, text: str) -> Optional[Notification]:
    if commenter_id == post.author_id:
        return None
    return notify(
        db,
        recipient_id=post.author_id,
        actor_id=commenter_id,
        type="comment",
        title="New comment",
        content=_preview(text, "Someone commented on your post"),
        related_item_id=post.id,
        related_item_type="Post",
    )


def notify_message_received(db: Session, sender_id: int, receiver_id: int, text: str) -> Optional[Notification]:
    # Related item is the sender so the client can open the conversation.
    return notify(
        db,
        recipient_id=receiver_id,
        actor_id=sender_id,
        type="message",
        title="New message",
        content=_preview(text, "You received a new message"),
        related_item_id=sender_id,
        related_item_type="User",
    )


def _live(db: Session, user_id: int, now: Optional[datetime] = None):
    now = now or datetime.utcnow()
    return (
        db.query(Notification)
        .filter(Notification.recipient_id == user_id)
        .filter(Notification.expires_at > now)
    )


def list_notifications(db: Session, user_id: int, now: Optional[datetime] = None) -> list[Notification]:
    return (
        _live(db, user_id, now)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATION_LIST_LIMIT)
        .all()
    )


def unread_count(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
    return _live(db, user_id, now).filter(Notification.is_read.is_(False)).count()


def mark_as_read(db: Session, notification_id: int, user_id: int, now: Optional[datetime] = None) -> Notification:
    notification = _live(db, user_id, now).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
    updated = (
        _live(db, user_id, now)
        .filter(Notification.is_read.is_(False))
        .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, notification_id: int, user_id: int, now: Optional[datetime] = None) -> int:
    deleted = (
        _live(db, user_id, now)
        .filter(Notification.id == notification_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        raise NotFoundError("Notification not found")
    db.commit()
    return deleted


def delete_all_notifications(db: Session, user_id: int) -> int:
    deleted = (
        db.query(Notification)
        .filter(Notification.recipient_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def purge_expired_notifications(db: Session, now: Optional[datetime] = None) -> int:
    """Delete every notification past its expiry, read or not."""
    now = now or datetime.utcnow()
    deleted = (
        db.query(Notification)
        .filter(Notification.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("Purged %s expired notifications", deleted)
    return deleted
