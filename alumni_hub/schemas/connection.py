import uuid
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .enums import ConnectionStatusEnum

class ConnectionRequestCreate(BaseModel):
    target_user_id: uuid.UUID
    message: Optional[str] = Field(None, max_length=500)

class ConnectionRead(BaseModel):
    id: int
    requester_id: uuid.UUID
    recipient_id: uuid.UUID
    status: ConnectionStatusEnum
    message: Optional[str] = None
    requested_at: datetime
    accepted_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
