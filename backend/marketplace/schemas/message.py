from datetime import datetime

from pydantic import Field

from marketplace.core.config import get_settings
from marketplace.models.message import Message
from marketplace.schemas.common import CamelModel


class ContactRequest(CamelModel):
    # All optional here; the service reports which one is missing.
    recipient_id: int | None = None
    property_id: int | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    subject: str | None = None
    message: str | None = None


class SendMessageRequest(CamelModel):
    sender_id: int | None = None
    recipient_id: int | None = None
    property_id: int | None = None
    subject: str | None = None
    message: str | None = None


class MessageResponse(CamelModel):
    id: int
    subject: str | None
    content: str
    read: bool
    created_at: datetime
    updated_at: datetime
    property_id: int | None
    sender_id: int | None
    sender_name: str | None
    sender_email: str | None
    sender_phone: str | None
    recipient_id: int
    recipient_name: str | None
    property_name: str | None
    property_image_url: str | None


class UnreadCountResponse(CamelModel):
    count: int = Field(ge=0)


def message_to_response(message: Message) -> MessageResponse:
    sender = message.sender
    listing = message.listing
    property_image_url = None
    if message.property_id is not None:
        property_image_url = (listing.first_image_url if listing else None) or get_settings().DEFAULT_PROPERTY_IMAGE_PATH

    return MessageResponse(
        id=message.id,
        subject=message.subject,
        content=message.content,
        read=message.is_read,
        created_at=message.created_at,
        updated_at=message.updated_at,
        property_id=message.property_id,
        sender_id=message.sender_id,
        sender_name=sender.full_name if sender else message.sender_name,
        sender_email=sender.email if sender else message.sender_email,
        sender_phone=(sender.phone if sender else None) or message.sender_phone,
        recipient_id=message.receiver_id,
        recipient_name=message.receiver.full_name if message.receiver else None,
        property_name=listing.name if listing else None,
        property_image_url=property_image_url,
    )
