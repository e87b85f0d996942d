import uuid
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

class AchievementCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field("milestone", max_length=50)

class AchievementRead(AchievementCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class AchievementAward(BaseModel):
    user_id: uuid.UUID

class UserAchievementCreate(BaseModel):
    user_id: uuid.UUID
    achievement_id: int

class UserAchievementRead(BaseModel):
    id: int
    user_id: uuid.UUID
    achievement_id: int
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CelebrationCreate(BaseModel):
    user_achievement_id: int
    message: Optional[str] = Field(None, max_length=2000)

class CelebrationRead(BaseModel):
    id: int
    user_achievement_id: int
    message: Optional[str] = None
    congratulations_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CongratulationCreate(BaseModel):
    message: Optional[str] = Field(None, max_length=500)

class CongratulationRead(BaseModel):
    id: int
    celebration_id: int
    user_id: uuid.UUID
    message: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CongratulationResult(BaseModel):
    congratulation: Optional[CongratulationRead] = None
    congratulations_count: int
