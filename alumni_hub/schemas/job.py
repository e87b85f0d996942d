import uuid
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None

class JobRead(BaseModel):
    id: int
    poster_id: uuid.UUID
    title: str
    company: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SavedJobCreate(BaseModel):
    job_id: int
    user_id: uuid.UUID

class SavedJobRead(BaseModel):
    id: int
    job_id: int
    user_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
