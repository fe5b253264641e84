import logging
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from app.database import SessionLocal, get_db
from app.dependencies import get_current_user, user_from_token
from app.models.user import User
from app.schemas.message import MessageCreate, MessageUpdate, MessageResponse, ConversationResponse
from app.services import messages
from app.services.media import MediaStorage, get_media_storage
from app.services.realtime import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])
ws_router = APIRouter(tags=["messages"])


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messages.list_conversations(db, current_user)


@router.put("/update/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: int,
    payload: MessageUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    changes = payload.model_dump(include=payload.model_fields_set)
    return messages.update_message(db, message_id, current_user, changes, storage)


@router.delete("/delete/{message_id}")
async def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    deleted_id = messages.delete_message(db, message_id, current_user, storage)
    return {"status": "ok", "id": deleted_id}


@router.get("/{user_id}", response_model=list[MessageResponse])
async def get_thread(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Messages exchanged with another user, oldest first."""
    return messages.fetch_thread(db, current_user, user_id)


@router.post("/{user_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    user_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messages.send_message(db, current_user, user_id, payload.text, payload.image)


@ws_router.websocket("/ws/messages")
async def messages_socket(websocket: WebSocket, token: str = Query("")):
    """Live channel for message and notification events."""
    db = SessionLocal()
    try:
        user_id = user_from_token(db, token).id if token else None
    except HTTPException:
        user_id = None
    finally:
        db.close()

    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(user_id, websocket)
    try:
        while True:
            # Client frames only keep the connection alive.
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("User %s disconnected", user_id)
    finally:
        manager.disconnect(user_id, websocket)
