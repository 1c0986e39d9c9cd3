import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from marketplace.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from marketplace.models.listing import Listing
from marketplace.models.message import Message
from marketplace.models.user import User, UserRole
from marketplace.schemas.message import ContactRequest, SendMessageRequest

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Property Inquiry"


def _with_relations(query):
    return query.options(
        joinedload(Message.sender),
        joinedload(Message.receiver),
        joinedload(Message.listing),
    )


def _newest_first(query):
    return query.order_by(Message.created_at.desc(), Message.id.desc())


def _require_text(value: str | None, error: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(error)
    return value.strip()


def _existing_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User not found with id: {user_id}")
    return user


def _existing_listing_id(db: Session, property_id: int | None) -> int | None:
    if property_id is None:
        return None
    return db.query(Listing.id).filter(Listing.id == property_id).scalar()


def send_message(
    db: Session,
    sender_id: int | None,
    receiver_id: int,
    property_id: int | None,
    content: str,
    subject: str | None = None,
) -> Message:
    """Persist a message between two users. A ``None`` sender is a system message."""
    sender = _existing_user(db, sender_id) if sender_id is not None else None
    _existing_user(db, receiver_id)

    message = Message(
        sender_id=sender.id if sender else None,
        sender_name=sender.full_name if sender else None,
        sender_email=sender.email if sender else None,
        sender_phone=sender.phone if sender else None,
        receiver_id=receiver_id,
        property_id=_existing_listing_id(db, property_id),
        subject=subject,
        content=content,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def create_contact_message(db: Session, payload: ContactRequest, sender: User | None = None) -> Message:
    if payload.recipient_id is None:
        raise ValidationError("Recipient ID is required")
    content = _require_text(payload.message, "Message content is required")
    name = _require_text(payload.name, "Your name is required")
    email = _require_text(payload.email, "Your email is required")
    _existing_user(db, payload.recipient_id)

    message = Message(
        sender_id=sender.id if sender else None,
        sender_name=name,
        sender_email=email,
        sender_phone=payload.phone,
        receiver_id=payload.recipient_id,
        property_id=_existing_listing_id(db, payload.property_id),
        subject=payload.subject or DEFAULT_SUBJECT,
        content=content,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info("Contact message id=%s to user id=%s", message.id, payload.recipient_id)
    return message


def send_user_message(db: Session, payload: SendMessageRequest, sender: User) -> Message:
    if payload.sender_id is not None and payload.sender_id != sender.id:
        raise PermissionDeniedError("You can only send messages as yourself")
    if payload.recipient_id is None:
        raise ValidationError("Recipient ID is required")
    if payload.property_id is None:
        raise ValidationError("Property ID is required")
    content = _require_text(payload.message, "Message content is required")

    return send_message(
        db,
        sender.id,
        payload.recipient_id,
        payload.property_id,
        content,
        payload.subject or DEFAULT_SUBJECT,
    )


def get_message(db: Session, message_id: int) -> Message:
    message = _with_relations(db.query(Message)).filter(Message.id == message_id).first()
    if not message:
        raise NotFoundError(f"Message not found with id: {message_id}")
    return message


def inbox(db: Session, user_id: int) -> list[Message]:
    return _newest_first(_with_relations(db.query(Message)).filter(Message.receiver_id == user_id)).all()


def sent(db: Session, user_id: int) -> list[Message]:
    return _newest_first(_with_relations(db.query(Message)).filter(Message.sender_id == user_id)).all()


def unread(db: Session, user_id: int) -> list[Message]:
    query = _with_relations(db.query(Message)).filter(
        Message.receiver_id == user_id, Message.is_read.is_(False)
    )
    return _newest_first(query).all()


def unread_count(db: Session, user_id: int) -> int:
    return db.query(Message).filter(Message.receiver_id == user_id, Message.is_read.is_(False)).count()


def conversation(db: Session, user_a: int, user_b: int) -> list[Message]:
    query = _with_relations(db.query(Message)).filter(
        or_(
            and_(Message.sender_id == user_a, Message.receiver_id == user_b),
            and_(Message.sender_id == user_b, Message.receiver_id == user_a),
        )
    )
    return _newest_first(query).all()


def property_messages(db: Session, property_id: int, actor: User) -> list[Message]:
    listing = db.query(Listing).filter(Listing.id == property_id).first()
    if not listing:
        raise NotFoundError(f"Listing not found with id: {property_id}")

    query = _with_relations(db.query(Message)).filter(Message.property_id == property_id)
    if actor.role != UserRole.ADMIN and listing.user_id != actor.id:
        query = query.filter(or_(Message.sender_id == actor.id, Message.receiver_id == actor.id))
    return _newest_first(query).all()


def mark_read(db: Session, message_id: int, actor: User) -> Message:
    message = get_message(db, message_id)
    if message.receiver_id != actor.id:
        raise PermissionDeniedError("You are not authorized to mark this message as read")
    message.is_read = True
    db.commit()
    db.refresh(message)
    return message


def delete_message(db: Session, message_id: int, actor: User) -> None:
    message = get_message(db, message_id)
    if actor.id not in (message.sender_id, message.receiver_id):
        raise PermissionDeniedError("You are not authorized to delete this message")
    db.delete(message)
    db.commit()
