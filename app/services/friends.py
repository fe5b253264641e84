"""Friend graph: request edges and the mirrored friends relation."""

import logging
from datetime import datetime
from sqlalchemy import and_, delete, or_
from sqlalchemy.orm import Session
from app.errors import ValidationError, ConflictError, NotFoundError, AuthorizationError
from app.models.friend import FriendRequest
from app.models.user import User, user_friends
from app.services import notifications, users

logger = logging.getLogger(__name__)

RESPONSE_ACTIONS = ("accepted", "rejected")


def _between(a_id: int, b_id: int):
    return or_(
        and_(FriendRequest.sender_id == a_id, FriendRequest.receiver_id == b_id),
        and_(FriendRequest.sender_id == b_id, FriendRequest.receiver_id == a_id),
    )


def find_edge(db: Session, a_id: int, b_id: int):
    return db.query(FriendRequest).filter(_between(a_id, b_id)).first()


def _add_friend(user: User, other: User) -> None:
    if other not in user.friends:
        user.friends.append(other)


def send_friend_request(db: Session, sender: User, receiver_id: int) -> FriendRequest:
    if receiver_id == sender.id:
        raise ValidationError("You cannot send a friend request to yourself")
    receiver = users.get_user(db, receiver_id)

    # Any earlier edge blocks a new one, whatever its status.
    if find_edge(db, sender.id, receiver.id):
        raise ConflictError("Friend request already exists")

    friend_request = FriendRequest(sender_id=sender.id, receiver_id=receiver.id, status="pending")
    db.add(friend_request)
    db.commit()
    db.refresh(friend_request)
    logger.info("Friend request %s: %s -> %s", friend_request.id, sender.id, receiver.id)

    notifications.notify_friend_request(db, sender.id, receiver.id)
    return friend_request


def respond_to_friend_request(db: Session, request_id: int, responder: User, action: str) -> FriendRequest:
    if action not in RESPONSE_ACTIONS:
        raise ValidationError('Invalid action. Must be "accepted" or "rejected".')

    friend_request = db.query(FriendRequest).filter(FriendRequest.id == request_id).first()
    if not friend_request:
        raise NotFoundError("Friend request not found")
    if friend_request.receiver_id != responder.id:
        raise AuthorizationError("You are not authorized to respond to this request")
    if friend_request.status != "pending":
        raise ValidationError(f"Friend request already {friend_request.status}")

    if action == "accepted":
        sender = users.find_user(db, friend_request.sender_id)
        if sender is None:
            raise ValidationError("The sender of this request no longer has an active account")
        _add_friend(sender, responder)
        _add_friend(responder, sender)

    friend_request.status = action
    friend_request.responded_at = datetime.utcnow()
    db.commit()
    db.refresh(friend_request)
    logger.info("Friend request %s %s", friend_request.id, action)

    if action == "accepted":
        notifications.notify_friend_accepted(db, responder.id, friend_request.sender_id)
    return friend_request


def remove_friend(db: Session, user: User, friend_id: int) -> None:
    """Drop the friendship in both directions; a no-op for non-friends."""
    db.execute(
        delete(user_friends).where(
            or_(
                and_(user_friends.c.user_id == user.id, user_friends.c.friend_id == friend_id),
                and_(user_friends.c.user_id == friend_id, user_friends.c.friend_id == user.id),
            )
        )
    )
    db.commit()
    db.expire_all()


def list_friends(db: Session, user: User) -> list[User]:
    return [friend for friend in user.friends if friend.deleted_at is None]


def list_pending_requests(db: Session, user: User) -> list[FriendRequest]:
    return (
        db.query(FriendRequest)
        .filter(FriendRequest.receiver_id == user.id)
        .filter(FriendRequest.status == "pending")
        .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
        .all()
    )


def list_directory(db: Session, user: User) -> list[dict]:
    """Every other user annotated with their relationship to ``user``."""
    friend_ids = {friend.id for friend in user.friends}
    edges = (
        db.query(FriendRequest)
        .filter(or_(FriendRequest.sender_id == user.id, FriendRequest.receiver_id == user.id))
        .all()
    )
    sent = {edge.receiver_id: edge for edge in edges if edge.sender_id == user.id}
    received = {edge.sender_id: edge for edge in edges if edge.receiver_id == user.id}

    entries = []
    for other in users.active_users(db).filter(User.id != user.id).order_by(User.id).all():
        edge = sent.get(other.id) or received.get(other.id)
        if other.id in friend_ids:
            relationship_status = "friend"
        else:
            relationship_status = edge.status if edge else "none"
        entries.append(
            {
                "id": other.id,
                "username": other.username,
                "fullname": other.fullname,
                "email": other.email,
                "profile_image": other.profile_image,
                "role": other.role,
                "location": other.location,
                "bio": other.bio,
                "status": relationship_status,
                "request_id": edge.id if edge else None,
                "request_direction": ("sent" if other.id in sent else "received") if edge else None,
            }
        )
    return entries
