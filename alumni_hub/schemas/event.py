import uuid
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .enums import CheckInMethodEnum, EventStatusEnum, RegistrationStatusEnum

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: EventStatusEnum = EventStatusEnum.DRAFT
    starts_at: Optional[datetime] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    registration_deadline: Optional[datetime] = None
    cancellation_deadline: Optional[datetime] = None

class EventRead(BaseModel):
    id: int
    organizer_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: EventStatusEnum
    starts_at: Optional[datetime] = None
    max_attendees: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    cancellation_deadline: Optional[datetime] = None
    attendee_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class EventRegistrationCreate(BaseModel):
    event_id: int
    user_id: uuid.UUID

class EventRegistrationRead(BaseModel):
    id: int
    event_id: int
    user_id: uuid.UUID
    status: RegistrationStatusEnum
    registered_at: datetime
    checked_in_at: Optional[datetime] = None
    check_in_method: Optional[CheckInMethodEnum] = None

    model_config = ConfigDict(from_attributes=True)

class EventCheckInCreate(BaseModel):
    method: CheckInMethodEnum = CheckInMethodEnum.MANUAL
    notes: Optional[str] = Field(None, max_length=1000)

class EventFavoriteCreate(BaseModel):
    event_id: int
    user_id: uuid.UUID

class EventFavoriteRead(BaseModel):
    id: int
    event_id: int
    user_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
