from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.meeting import MeetingCreate, MeetingResponse, MeetingUpdate, meeting_to_response
from marketplace.services import meetings as meeting_service

router = APIRouter(prefix="/meetings", tags=["meetings"])


def _many(meetings) -> list[MeetingResponse]:
    return [meeting_to_response(m) for m in meetings]


@router.post("", response_model=ApiResponse[MeetingResponse], status_code=status.HTTP_201_CREATED)
def create_meeting(
    payload: MeetingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    meeting = meeting_service.create_meeting(db, payload, current_user)
    return ok(meeting_to_response(meeting), "Meeting created successfully")


# Static paths are declared before /{meeting_id}.
@router.get("/upcoming", response_model=ApiResponse[list[MeetingResponse]])
def upcoming(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_many(meeting_service.upcoming_meetings(db, current_user)), "Upcoming meetings retrieved successfully")


@router.get("/past", response_model=ApiResponse[list[MeetingResponse]])
def past(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_many(meeting_service.past_meetings(db, current_user)), "Past meetings retrieved successfully")


@router.get("/created", response_model=ApiResponse[list[MeetingResponse]])
def created(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_many(meeting_service.created_meetings(db, current_user)), "Created meetings retrieved successfully")


@router.get("/participating", response_model=ApiResponse[list[MeetingResponse]])
def participating(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = _many(meeting_service.participating_meetings(db, current_user))
    return ok(items, "Participating meetings retrieved successfully")


@router.get("/message/{message_id}", response_model=ApiResponse[list[MeetingResponse]])
def by_message(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = _many(meeting_service.meetings_for_message(db, message_id, current_user))
    return ok(items, "Meetings retrieved successfully")


@router.get("/property/{property_id}", response_model=ApiResponse[list[MeetingResponse]])
def by_property(property_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = _many(meeting_service.meetings_for_property(db, property_id, current_user))
    return ok(items, "Meetings retrieved successfully")


@router.get("/status/{meeting_status}", response_model=ApiResponse[list[MeetingResponse]])
def by_status(meeting_status: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = _many(meeting_service.meetings_by_status(db, meeting_status, current_user))
    return ok(items, "Meetings retrieved successfully")


@router.get("/{meeting_id}", response_model=ApiResponse[MeetingResponse])
def get_meeting(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.get_meeting_for(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting retrieved successfully")


@router.post("/{meeting_id}/accept", response_model=ApiResponse[MeetingResponse])
def accept(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.accept_meeting(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting accepted successfully")


@router.post("/{meeting_id}/decline", response_model=ApiResponse[MeetingResponse])
def decline(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.decline_meeting(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting declined successfully")


@router.post("/{meeting_id}/cancel", response_model=ApiResponse[MeetingResponse])
def cancel(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.cancel_meeting(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting cancelled successfully")


@router.post("/{meeting_id}/complete", response_model=ApiResponse[MeetingResponse])
def complete(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.complete_meeting(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting marked as completed")


@router.post("/{meeting_id}/mark-notified", response_model=ApiResponse[MeetingResponse])
def mark_notified(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting = meeting_service.mark_notified(db, meeting_id, current_user)
    return ok(meeting_to_response(meeting), "Meeting marked as notified")


@router.put("/{meeting_id}", response_model=ApiResponse[MeetingResponse])
def update_meeting(
    meeting_id: int,
    payload: MeetingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    meeting = meeting_service.update_meeting(db, meeting_id, payload, current_user)
    return ok(meeting_to_response(meeting), "Meeting updated successfully")


@router.delete("/{meeting_id}", response_model=ApiResponse[None])
def delete_meeting(meeting_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    meeting_service.delete_meeting(db, meeting_id, current_user)
    return ok(message="Meeting deleted successfully")
