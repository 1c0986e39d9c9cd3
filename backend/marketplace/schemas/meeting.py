from datetime import datetime

from pydantic import field_validator

from marketplace.core.config import get_settings
from marketplace.models.meeting import Meeting, MeetingStatus
from marketplace.schemas.common import CamelModel, to_naive_utc


class MeetingCreate(CamelModel):
    participant_id: int | None = None
    title: str | None = None
    description: str | None = None
    meeting_time: datetime | None = None
    duration_minutes: int | None = None
    location: str | None = None
    meeting_link: str | None = None
    property_id: int | None = None
    message_id: int | None = None

    @field_validator("meeting_time")
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class MeetingUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    meeting_time: datetime | None = None
    duration_minutes: int | None = None
    location: str | None = None
    meeting_link: str | None = None
    property_id: int | None = None

    @field_validator("meeting_time")
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class MeetingResponse(CamelModel):
    id: int
    title: str
    description: str | None
    meeting_time: datetime
    duration_minutes: int
    location: str | None
    meeting_link: str | None
    status: MeetingStatus
    created_at: datetime
    updated_at: datetime
    property_id: int
    message_id: int | None
    creator_id: int
    creator_name: str | None
    participant_id: int
    participant_name: str | None
    property_name: str | None
    property_image_url: str | None
    creator_notified: bool
    participant_notified: bool


def meeting_to_response(meeting: Meeting) -> MeetingResponse:
    listing = meeting.listing
    return MeetingResponse(
        id=meeting.id,
        title=meeting.title,
        description=meeting.description,
        meeting_time=meeting.meeting_time,
        duration_minutes=meeting.duration_minutes,
        location=meeting.location,
        meeting_link=meeting.meeting_link,
        status=meeting.status,
        created_at=meeting.created_at,
        updated_at=meeting.updated_at,
        property_id=meeting.property_id,
        message_id=meeting.message_id,
        creator_id=meeting.creator_id,
        creator_name=meeting.creator.full_name if meeting.creator else None,
        participant_id=meeting.participant_id,
        participant_name=meeting.participant.full_name if meeting.participant else None,
        property_name=listing.name if listing else None,
        property_image_url=(listing.first_image_url if listing else None)
        or get_settings().DEFAULT_PROPERTY_IMAGE_PATH,
        creator_notified=meeting.creator_notified,
        participant_notified=meeting.participant_notified,
    )
