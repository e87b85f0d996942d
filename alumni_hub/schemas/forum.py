import uuid
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List
from .enums import TopicStatusEnum

class ForumTopicCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)

class ForumTopicRead(BaseModel):
    id: int
    author_id: uuid.UUID
    title: str
    content: str
    status: TopicStatusEnum
    is_pinned: bool
    is_approved: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ForumPostCreate(BaseModel):
    content: str = Field(..., min_length=1)

class ForumPostRead(BaseModel):
    id: int
    topic_id: int
    author_id: uuid.UUID
    content: str
    is_approved: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PendingModerationRead(BaseModel):
    topics: List[ForumTopicRead] = []
    posts: List[ForumPostRead] = []
