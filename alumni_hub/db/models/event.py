from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SAEnum, UniqueConstraint, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base
from alumni_hub.schemas.enums import CheckInMethodEnum, EventStatusEnum, RegistrationStatusEnum

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    organizer_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SAEnum(EventStatusEnum, name="eventstatusenum_sqlalchemy"), default=EventStatusEnum.DRAFT, nullable=False)

    starts_at = Column(DateTime(timezone=True), nullable=True)
    max_attendees = Column(Integer, nullable=True) # None means unlimited
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    cancellation_deadline = Column(DateTime(timezone=True), nullable=True)

    # Denormalized count of confirmed registrations, maintained by the aggregate counter
    attendee_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(RegistrationStatusEnum, name="registrationstatusenum_sqlalchemy"), default=RegistrationStatusEnum.CONFIRMED, nullable=False)
    registered_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    check_in_method = Column(SAEnum(CheckInMethodEnum, name="checkinmethodenum_sqlalchemy"), nullable=True)
    check_in_notes = Column(Text, nullable=True)

    __table_args__ = (UniqueConstraint('event_id', 'user_id', name='uq_event_registration_user'),)


class EventFavorite(Base):
    __tablename__ = "event_favorites"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint('event_id', 'user_id', name='uq_event_favorite_user'),)
