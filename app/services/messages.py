"""Direct messages with best-effort live delivery."""

import logging
from typing import Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from app.errors import ValidationError, NotFoundError, AuthorizationError
from app.models.message import Message
from app.models.user import User
from app.schemas.message import MessageResponse
from app.services import notifications, users
from app.services.media import MediaStorage, delete_quietly, storage_id_from_url
from app.services.realtime import manager

logger = logging.getLogger(__name__)


def _push(message: Message, receiver_event: str, sender_event: str) -> None:
    payload = MessageResponse.model_validate(message).model_dump(mode="json")
    manager.publish(message.receiver_id, receiver_event, payload)
    manager.publish(message.sender_id, sender_event, payload)


def _between(a_id: int, b_id: int):
    return or_(
        and_(Message.sender_id == a_id, Message.receiver_id == b_id),
        and_(Message.sender_id == b_id, Message.receiver_id == a_id),
    )


def send_message(db: Session, sender: User, receiver_id: int, text: str = "", image: Optional[str] = None) -> Message:
    text = (text or "").strip()
    if not text and not image:
        raise ValidationError("Message must contain text or an image")
    receiver = users.get_user(db, receiver_id)

    message = Message(sender_id=sender.id, receiver_id=receiver.id, text=text, image=image, is_read=False)
    db.add(message)
    db.commit()
    db.refresh(message)

    notifications.notify_message_received(db, sender.id, receiver.id, text)
    _push(message, "receive_message", "message_sent")
    return message


def fetch_thread(db: Session, user: User, other_id: int) -> list[Message]:
    """Messages between the pair, oldest first; marks the other side's messages read."""
    messages = (
        db.query(Message)
        .filter(_between(user.id, other_id))
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    (
        db.query(Message)
        .filter(Message.sender_id == other_id)
        .filter(Message.receiver_id == user.id)
        .filter(Message.is_read.is_(False))
        .update({"is_read": True}, synchronize_session="fetch")
    )
    db.commit()
    return messages


def list_conversations(db: Session, user: User) -> list[dict]:
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == user.id, Message.receiver_id == user.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )

    conversations: dict[int, dict] = {}
    for message in messages:
        other_id = message.receiver_id if message.sender_id == user.id else message.sender_id
        conversation = conversations.get(other_id)
        if conversation is None:
            other = message.receiver if message.sender_id == user.id else message.sender
            conversation = conversations[other_id] = {
                "participant": other,
                "last_message": message.text or "",
                "last_message_at": message.created_at,
                "unread_count": 0,
            }
        if message.receiver_id == user.id and not message.is_read:
            conversation["unread_count"] += 1

    return [c for c in conversations.values() if c["participant"].deleted_at is None]


def get_own_message(db: Session, message_id: int, user: User, action: str) -> Message:
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise NotFoundError("Message not found")
    if message.sender_id != user.id:
        raise AuthorizationError(f"You can only {action} your own messages")
    return message


def update_message(db: Session, message_id: int, user: User, changes: dict, storage: MediaStorage) -> Message:
    """Apply ``changes`` (``text`` and/or ``image``) to a message the user sent.

    A present ``image`` key replaces the stored image, a null value removes it.
    """
    message = get_own_message(db, message_id, user, "update")

    old_image = message.image
    text = message.text
    if changes.get("text") is not None:
        text = changes["text"].strip()
    image = (changes["image"] or None) if "image" in changes else old_image
    if not text and not image:
        raise ValidationError("Message must contain text or an image")

    message.text = text
    message.image = image
    db.commit()
    db.refresh(message)

    if "image" in changes and old_image and old_image != message.image:
        delete_quietly(storage, storage_id_from_url(old_image))
    _push(message, "message_updated", "message_updated")
    return message


def delete_message(db: Session, message_id: int, user: User, storage: MediaStorage) -> int:
    message = get_own_message(db, message_id, user, "delete")
    sender_id, receiver_id, image = message.sender_id, message.receiver_id, message.image

    if image:
        delete_quietly(storage, storage_id_from_url(image))
    db.delete(message)
    db.commit()

    manager.publish(receiver_id, "message_deleted", {"id": message_id})
    manager.publish(sender_id, "message_deleted", {"id": message_id})
    return message_id
