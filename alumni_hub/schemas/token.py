from pydantic import BaseModel
from typing import Optional
import uuid

class Token(BaseModel):
    access_token: str
    token_type: str
    username: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
