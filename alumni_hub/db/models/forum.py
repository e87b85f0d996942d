from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Enum as SAEnum, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base
from alumni_hub.schemas.enums import TopicStatusEnum

class ForumTopic(Base):
    __tablename__ = "forum_topics"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(SAEnum(TopicStatusEnum, name="topicstatusenum_sqlalchemy"), default=TopicStatusEnum.ACTIVE, nullable=False)
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False) # False while waiting for a moderator
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class ForumPost(Base):
    __tablename__ = "forum_posts"

    id = Column(Integer, primary_key=True, index=True)
    topic_id = Column(Integer, ForeignKey("forum_topics.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
