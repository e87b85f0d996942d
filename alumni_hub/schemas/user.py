from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
import uuid

# Properties to receive on user creation
class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    full_name: Optional[str] = Field(None, max_length=200)
    password: str = Field(..., min_length=8, max_length=128)

# Public profile, safe to list to anyone
class UserPublic(BaseModel):
    id: uuid.UUID
    username: str
    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# The authenticated user's own view
class UserRead(UserPublic):
    roles: List[str] = []
    is_active: bool
    created_at: datetime
