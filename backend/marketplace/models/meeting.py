from datetime import datetime
import enum

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.core.database import Base


class MeetingStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


DEFAULT_DURATION_MINUTES = 30


class Meeting(Base):
    __tablename__ = "meetings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    meeting_time: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=DEFAULT_DURATION_MINUTES, nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    meeting_link: Mapped[str | None] = mapped_column(String(500))
    property_id: Mapped[int] = mapped_column(ForeignKey("listings.id", ondelete="CASCADE"), index=True, nullable=False)
    message_id: Mapped[int | None] = mapped_column(ForeignKey("messages.id", ondelete="SET NULL"))
    status: Mapped[MeetingStatus] = mapped_column(
        Enum(MeetingStatus), default=MeetingStatus.PENDING, index=True, nullable=False
    )
    creator_notified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    participant_notified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    creator = relationship("User", foreign_keys=[creator_id])
    participant = relationship("User", foreign_keys=[participant_id])
    listing = relationship("Listing")
    message = relationship("Message")

    def is_party(self, user_id: int) -> bool:
        return user_id in (self.creator_id, self.participant_id)

    def other_party_id(self, user_id: int) -> int:
        return self.participant_id if user_id == self.creator_id else self.creator_id

    def reset_notifications(self) -> None:
        self.creator_notified = False
        self.participant_notified = False


@event.listens_for(Meeting, "before_insert")
@event.listens_for(Meeting, "before_update")
def _require_property(mapper, connection, target: Meeting) -> None:
    if target.property_id is None:
        raise ValueError("Meeting must reference a property")
