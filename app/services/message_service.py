import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.core.errors import AppError
from app.db.models import Connection, Message, MessageType, User
from app.schemas.message import MessageOut


logger = logging.getLogger(__name__)


def serialize(message: Message) -> dict:
    return MessageOut.model_validate(message).model_dump(mode="json")


def validate_recipient(db: Session, sender_id: int, to_user_id: int) -> None:
    """Messages go to another, existing user."""
    if to_user_id == sender_id:
        raise AppError("You cannot send a message to yourself")

    if not db.query(User.id).filter(User.id == to_user_id).first():
        raise AppError("Recipient not found")


def ensure_connection(db: Session, user_id: int, peer_id: int) -> None:
    """Both participants appear in each other's connections after a message."""
    pairs = [(user_id, peer_id), (peer_id, user_id)]
    for owner_id, connection_id in pairs:
        existing = db.query(Connection).filter(
            Connection.owner_id == owner_id,
            Connection.connection_id == connection_id,
        ).first()
        if not existing:
            db.add(Connection(owner_id=owner_id, connection_id=connection_id))


def create_message(
    db: Session,
    sender_id: int,
    to_user_id: int,
    text: str = "",
    media_url: Optional[str] = None,
) -> Message:
    """Persist one direct message; the row carries text, an image, or both."""
    text = text or ""
    if not text and not media_url:
        raise AppError("Message must contain text or an image")

    validate_recipient(db, sender_id, to_user_id)

    message = Message(
        from_user_id=sender_id,
        to_user_id=to_user_id,
        text=text,
        media_url=media_url,
        message_type=(MessageType.IMAGE if media_url else MessageType.TEXT).value,
    )
    db.add(message)
    ensure_connection(db, sender_id, to_user_id)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(message)

    logger.info("Message %s stored (%s -> %s, %s)", message.id, sender_id, to_user_id, message.message_type)
    return message


def conversation_history(db: Session, user_id: int, peer_id: int) -> List[Message]:
    """All messages exchanged between the two participants, oldest first."""
    return db.query(Message).filter(
        or_(
            and_(Message.from_user_id == user_id, Message.to_user_id == peer_id),
            and_(Message.from_user_id == peer_id, Message.to_user_id == user_id),
        )
    ).order_by(Message.created_at.asc(), Message.id.asc()).all()
