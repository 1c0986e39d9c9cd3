from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user, get_optional_user
from marketplace.core.rate_limit import limiter
from marketplace.models.user import User
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.message import (
    ContactRequest,
    MessageResponse,
    SendMessageRequest,
    UnreadCountResponse,
    message_to_response,
)
from marketplace.services import messages as message_service
from marketplace.services.users import ensure_self_or_admin

router = APIRouter(prefix="/messages", tags=["messages"])


def _many(messages) -> list[MessageResponse]:
    return [message_to_response(m) for m in messages]


@router.post("/contact", response_model=ApiResponse[MessageResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def contact_owner(
    request: Request,
    payload: ContactRequest,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    message = message_service.create_contact_message(db, payload, current_user)
    return ok(message_to_response(message), "Message sent successfully")


@router.post("/send", response_model=ApiResponse[MessageResponse], status_code=status.HTTP_201_CREATED)
def send_message(
    payload: SendMessageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    message = message_service.send_user_message(db, payload, current_user)
    return ok(message_to_response(message_service.get_message(db, message.id)), "Message sent successfully")


@router.get("/inbox", response_model=ApiResponse[list[MessageResponse]])
def inbox(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_many(message_service.inbox(db, current_user.id)), "Messages retrieved successfully")


@router.get("/sent", response_model=ApiResponse[list[MessageResponse]])
def sent(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_many(message_service.sent(db, current_user.id)), "Messages retrieved successfully")


@router.get("/unread/count", response_model=ApiResponse[UnreadCountResponse])
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    count = message_service.unread_count(db, current_user.id)
    return ok(UnreadCountResponse(count=count), "Unread count retrieved successfully")


@router.get("/sent/{user_id}", response_model=ApiResponse[list[MessageResponse]])
def sent_by_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ok(_many(message_service.sent(db, user_id)), "Messages retrieved successfully")


@router.get("/received/{user_id}", response_model=ApiResponse[list[MessageResponse]])
def received_by_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ok(_many(message_service.inbox(db, user_id)), "Messages retrieved successfully")


@router.get("/unread/{user_id}", response_model=ApiResponse[list[MessageResponse]])
def unread_for_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ok(_many(message_service.unread(db, user_id)), "Messages retrieved successfully")


@router.get("/conversation/{other_user_id}", response_model=ApiResponse[list[MessageResponse]])
def conversation_with(
    other_user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = _many(message_service.conversation(db, current_user.id, other_user_id))
    return ok(items, "Conversation retrieved successfully")


@router.get("/conversation/{user_id1}/{user_id2}", response_model=ApiResponse[list[MessageResponse]])
def conversation_between(
    user_id1: int,
    user_id2: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != user_id2:
        ensure_self_or_admin(current_user, user_id1)
    items = _many(message_service.conversation(db, user_id1, user_id2))
    return ok(items, "Conversation retrieved successfully")


@router.get("/property/{property_id}", response_model=ApiResponse[list[MessageResponse]])
def property_messages(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = _many(message_service.property_messages(db, property_id, current_user))
    return ok(items, "Property messages retrieved successfully")


@router.put("/{message_id}/read", response_model=ApiResponse[MessageResponse])
def mark_read(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    message = message_service.mark_read(db, message_id, current_user)
    return ok(message_to_response(message), "Message marked as read")


@router.put("/read/{message_id}", response_model=ApiResponse[MessageResponse])
def mark_read_legacy(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    message = message_service.mark_read(db, message_id, current_user)
    return ok(message_to_response(message), "Message marked as read")


@router.delete("/{message_id}", response_model=ApiResponse[None])
def delete_message(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    message_service.delete_message(db, message_id, current_user)
    return ok(message="Message deleted successfully")
