import logging
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from marketplace.core.config import get_settings
from marketplace.core.errors import MarketplaceError, NotFoundError, PermissionDeniedError, ValidationError
from marketplace.models.listing import Listing
from marketplace.models.meeting import DEFAULT_DURATION_MINUTES, Meeting, MeetingStatus
from marketplace.models.message import Message
from marketplace.models.user import User, UserRole
from marketplace.schemas.meeting import MeetingCreate, MeetingUpdate
from marketplace.services.messages import send_message

logger = logging.getLogger(__name__)

MEETING_SUBJECT = "Meeting"
REMINDER_SUBJECT = "Meeting Reminder"

# Allowed source states per target state.
TRANSITIONS = {
    MeetingStatus.ACCEPTED: {MeetingStatus.PENDING},
    MeetingStatus.DECLINED: {MeetingStatus.PENDING},
    MeetingStatus.CANCELLED: {MeetingStatus.PENDING, MeetingStatus.ACCEPTED},
    MeetingStatus.COMPLETED: {MeetingStatus.PENDING, MeetingStatus.ACCEPTED},
}


def _fmt(when: datetime) -> str:
    return when.strftime("%Y-%m-%d %H:%M UTC")


def _now() -> datetime:
    return datetime.utcnow()


def _with_relations(query):
    return query.options(
        joinedload(Meeting.creator),
        joinedload(Meeting.participant),
        joinedload(Meeting.listing),
    )


def _for_party(db: Session, user_id: int):
    return _with_relations(db.query(Meeting)).filter(
        or_(Meeting.creator_id == user_id, Meeting.participant_id == user_id)
    )


def _notify(db: Session, sender_id: int | None, receiver_id: int, property_id: int | None, content: str) -> bool:
    # Side-channel messages never undo the meeting change that triggered them.
    try:
        send_message(db, sender_id, receiver_id, property_id, content, MEETING_SUBJECT)
        return True
    except (MarketplaceError, SQLAlchemyError):
        db.rollback()
        logger.warning("Failed to send meeting message to user id=%s", receiver_id, exc_info=True)
        return False


def _listing_exists(db: Session, property_id: int) -> None:
    if not db.query(Listing.id).filter(Listing.id == property_id).scalar():
        raise NotFoundError(f"Listing not found with id: {property_id}")


def get_meeting(db: Session, meeting_id: int) -> Meeting:
    meeting = _with_relations(db.query(Meeting)).filter(Meeting.id == meeting_id).first()
    if not meeting:
        raise NotFoundError(f"Meeting not found with id: {meeting_id}")
    return meeting


def get_meeting_for(db: Session, meeting_id: int, actor: User) -> Meeting:
    meeting = get_meeting(db, meeting_id)
    if not meeting.is_party(actor.id) and actor.role != UserRole.ADMIN:
        raise PermissionDeniedError("You are not authorized to view this meeting")
    return meeting


def create_meeting(db: Session, payload: MeetingCreate, creator: User) -> Meeting:
    if payload.participant_id is None:
        raise ValidationError("Participant ID is required")
    if not payload.title or not payload.title.strip():
        raise ValidationError("Meeting title is required")
    if payload.meeting_time is None:
        raise ValidationError("Meeting time is required")
    if payload.meeting_time <= _now():
        raise ValidationError("Meeting time must be in the future")
    # Checked before any lookup; a linked message never supplies it.
    if payload.property_id is None:
        raise ValidationError("Property ID is required")
    if payload.participant_id == creator.id:
        raise ValidationError("You cannot schedule a meeting with yourself")

    participant = db.query(User).filter(User.id == payload.participant_id).first()
    if not participant:
        raise NotFoundError(f"Participant not found with id: {payload.participant_id}")
    _listing_exists(db, payload.property_id)
    if payload.message_id is not None:
        if not db.query(Message.id).filter(Message.id == payload.message_id).scalar():
            raise NotFoundError(f"Message not found with id: {payload.message_id}")

    meeting = Meeting(
        creator_id=creator.id,
        participant_id=participant.id,
        title=payload.title.strip(),
        description=payload.description,
        meeting_time=payload.meeting_time,
        duration_minutes=payload.duration_minutes or DEFAULT_DURATION_MINUTES,
        location=payload.location,
        meeting_link=payload.meeting_link,
        property_id=payload.property_id,
        message_id=payload.message_id,
        status=MeetingStatus.PENDING,
    )
    db.add(meeting)
    db.commit()
    db.refresh(meeting)
    logger.info("Meeting id=%s created by user id=%s", meeting.id, creator.id)

    _notify(
        db,
        creator.id,
        participant.id,
        meeting.property_id,
        f'I\'d like to schedule a meeting: "{meeting.title}" on {_fmt(meeting.meeting_time)}. '
        "Please accept or decline this invitation.",
    )
    return get_meeting(db, meeting.id)


def _status_message(meeting: Meeting, status: MeetingStatus) -> str:
    when = _fmt(meeting.meeting_time)
    if status == MeetingStatus.ACCEPTED:
        return f'I have accepted the meeting "{meeting.title}" scheduled for {when}.'
    if status == MeetingStatus.DECLINED:
        return f'I have declined the meeting "{meeting.title}" scheduled for {when}.'
    if status == MeetingStatus.CANCELLED:
        return f'I have cancelled the meeting "{meeting.title}" scheduled for {when}.'
    if status == MeetingStatus.COMPLETED:
        return f'I have marked the meeting "{meeting.title}" as completed.'
    return f'The status of meeting "{meeting.title}" has been updated to {status.value}.'


def _transition(db: Session, meeting_id: int, actor: User, status: MeetingStatus) -> Meeting:
    meeting = get_meeting(db, meeting_id)

    if status in (MeetingStatus.ACCEPTED, MeetingStatus.DECLINED):
        if actor.id != meeting.participant_id:
            raise PermissionDeniedError(f"Only the participant can {_verb(status)} this meeting")
    elif status == MeetingStatus.CANCELLED:
        if actor.id != meeting.creator_id:
            raise PermissionDeniedError("Only the creator can cancel this meeting")
    elif not meeting.is_party(actor.id):
        raise PermissionDeniedError("You are not authorized to update this meeting")

    if meeting.status not in TRANSITIONS[status]:
        raise ValidationError(
            f"Cannot {_verb(status)} a meeting that is {meeting.status.value.lower()}"
        )

    meeting.status = status
    meeting.reset_notifications()
    db.commit()
    db.refresh(meeting)
    logger.info("Meeting id=%s -> %s by user id=%s", meeting.id, status.value, actor.id)

    _notify(db, actor.id, meeting.other_party_id(actor.id), meeting.property_id, _status_message(meeting, status))
    return get_meeting(db, meeting.id)


def _verb(status: MeetingStatus) -> str:
    return {
        MeetingStatus.ACCEPTED: "accept",
        MeetingStatus.DECLINED: "decline",
        MeetingStatus.CANCELLED: "cancel",
        MeetingStatus.COMPLETED: "complete",
    }.get(status, "update")


def accept_meeting(db: Session, meeting_id: int, actor: User) -> Meeting:
    return _transition(db, meeting_id, actor, MeetingStatus.ACCEPTED)


def decline_meeting(db: Session, meeting_id: int, actor: User) -> Meeting:
    return _transition(db, meeting_id, actor, MeetingStatus.DECLINED)


def cancel_meeting(db: Session, meeting_id: int, actor: User) -> Meeting:
    return _transition(db, meeting_id, actor, MeetingStatus.CANCELLED)


def complete_meeting(db: Session, meeting_id: int, actor: User) -> Meeting:
    return _transition(db, meeting_id, actor, MeetingStatus.COMPLETED)


def update_meeting(db: Session, meeting_id: int, payload: MeetingUpdate, actor: User) -> Meeting:
    meeting = get_meeting(db, meeting_id)
    if actor.id != meeting.creator_id:
        raise PermissionDeniedError("Only the creator can update this meeting")

    changes = payload.model_dump(exclude_none=True)
    if "title" in changes:
        if not changes["title"].strip():
            raise ValidationError("Meeting title is required")
        changes["title"] = changes["title"].strip()
    if "meeting_time" in changes and changes["meeting_time"] <= _now():
        raise ValidationError("Meeting time must be in the future")
    if "property_id" in changes:
        _listing_exists(db, changes["property_id"])

    for field, value in changes.items():
        setattr(meeting, field, value)
    meeting.reset_notifications()
    db.commit()
    db.refresh(meeting)

    _notify(
        db,
        actor.id,
        meeting.participant_id,
        meeting.property_id,
        f'I have updated the details of our meeting "{meeting.title}" scheduled for {_fmt(meeting.meeting_time)}.',
    )
    return get_meeting(db, meeting.id)


def delete_meeting(db: Session, meeting_id: int, actor: User) -> None:
    meeting = get_meeting(db, meeting_id)
    if actor.id != meeting.creator_id:
        raise PermissionDeniedError("Only the creator can delete this meeting")

    participant_id = meeting.participant_id
    property_id = meeting.property_id
    content = f'I have deleted our meeting "{meeting.title}" that was scheduled for {_fmt(meeting.meeting_time)}.'

    db.delete(meeting)
    db.commit()
    logger.info("Meeting id=%s deleted by user id=%s", meeting_id, actor.id)
    _notify(db, actor.id, participant_id, property_id, content)


def mark_notified(db: Session, meeting_id: int, actor: User) -> Meeting:
    meeting = get_meeting(db, meeting_id)
    if actor.id == meeting.creator_id:
        meeting.creator_notified = True
    elif actor.id == meeting.participant_id:
        meeting.participant_notified = True
    else:
        raise PermissionDeniedError("You are not authorized to update this meeting")
    db.commit()
    return get_meeting(db, meeting.id)


def upcoming_meetings(db: Session, user: User) -> list[Meeting]:
    return (
        _for_party(db, user.id)
        .filter(Meeting.meeting_time > _now())
        .order_by(Meeting.meeting_time.asc())
        .all()
    )


def past_meetings(db: Session, user: User) -> list[Meeting]:
    return (
        _for_party(db, user.id)
        .filter(Meeting.meeting_time <= _now())
        .order_by(Meeting.meeting_time.desc())
        .all()
    )


def created_meetings(db: Session, user: User) -> list[Meeting]:
    return (
        _with_relations(db.query(Meeting))
        .filter(Meeting.creator_id == user.id)
        .order_by(Meeting.meeting_time.desc())
        .all()
    )


def participating_meetings(db: Session, user: User) -> list[Meeting]:
    return (
        _with_relations(db.query(Meeting))
        .filter(Meeting.participant_id == user.id)
        .order_by(Meeting.meeting_time.desc())
        .all()
    )


def meetings_for_message(db: Session, message_id: int, user: User) -> list[Meeting]:
    return _for_party(db, user.id).filter(Meeting.message_id == message_id).order_by(Meeting.meeting_time.desc()).all()


def meetings_for_property(db: Session, property_id: int, user: User) -> list[Meeting]:
    query = _with_relations(db.query(Meeting)).filter(Meeting.property_id == property_id)
    if user.role != UserRole.ADMIN:
        query = query.filter(or_(Meeting.creator_id == user.id, Meeting.participant_id == user.id))
    return query.order_by(Meeting.meeting_time.desc()).all()


def meetings_by_status(db: Session, status: str, user: User) -> list[Meeting]:
    try:
        parsed = MeetingStatus(status.strip().upper())
    except ValueError:
        valid = ", ".join(s.value for s in MeetingStatus)
        raise ValidationError(f"Invalid meeting status: {status}. Valid values are: {valid}")
    return _for_party(db, user.id).filter(Meeting.status == parsed).order_by(Meeting.meeting_time.asc()).all()


def send_due_reminders(db: Session, now: datetime | None = None) -> int:
    """Remind both parties of accepted meetings starting within the reminder window.

    Each party is reminded once; the flag is flipped and committed right after
    its message goes out. Returns the number of reminders sent.
    """
    now = now or _now()
    cutoff = now + timedelta(minutes=get_settings().REMINDER_WINDOW_MINUTES)

    due = (
        _with_relations(db.query(Meeting))
        .filter(
            Meeting.meeting_time > now,
            Meeting.meeting_time <= cutoff,
            or_(Meeting.creator_notified.is_(False), Meeting.participant_notified.is_(False)),
        )
        .order_by(Meeting.meeting_time.asc())
        .all()
    )

    sent = 0
    for meeting in due:
        if meeting.status != MeetingStatus.ACCEPTED:
            continue

        when = _fmt(meeting.meeting_time)
        parties = (
            ("creator_notified", meeting.creator_id, meeting.participant),
            ("participant_notified", meeting.participant_id, meeting.creator),
        )
        for flag, recipient_id, other in parties:
            if getattr(meeting, flag):
                continue
            other_name = other.full_name if other else "your contact"
            content = (
                f'REMINDER: Your meeting "{meeting.title}" with {other_name} '
                f"is scheduled in less than 1 hour at {when}."
            )
            try:
                send_message(db, None, recipient_id, meeting.property_id, content, REMINDER_SUBJECT)
            except (MarketplaceError, SQLAlchemyError):
                db.rollback()
                logger.error("Failed to send reminder for meeting id=%s to user id=%s", meeting.id, recipient_id, exc_info=True)
                continue
            setattr(meeting, flag, True)
            db.commit()
            sent += 1
            logger.info("Sent meeting reminder for meeting id=%s to user id=%s", meeting.id, recipient_id)

    return sent
