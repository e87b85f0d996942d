from typing import List

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.forum import ForumPost, ForumTopic
from alumni_hub.schemas.forum import ForumPostCreate, ForumTopicCreate


class CRUDForumTopic(CRUDBase[ForumTopic, ForumTopicCreate]):
    def update_fields(self, db: Session, *, topic_id: int, **values) -> bool:
        result = db.execute(
            update(ForumTopic).where(ForumTopic.id == topic_id).values(**values).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def remove(self, db: Session, *, topic_id: int) -> bool:
        # Posts go with the topic
        db.execute(delete(ForumPost).where(ForumPost.topic_id == topic_id).execution_options(synchronize_session=False))
        result = db.execute(delete(ForumTopic).where(ForumTopic.id == topic_id).execution_options(synchronize_session=False))
        return result.rowcount == 1

    def get_pending(self, db: Session, *, limit: int = 50) -> List[ForumTopic]:
        return (
            db.query(ForumTopic)
            .filter(ForumTopic.is_approved.is_(False))
            .order_by(ForumTopic.created_at)
            .limit(limit)
            .all()
        )


class CRUDForumPost(CRUDBase[ForumPost, ForumPostCreate]):
    def update_fields(self, db: Session, *, post_id: int, **values) -> bool:
        result = db.execute(
            update(ForumPost).where(ForumPost.id == post_id).values(**values).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def remove(self, db: Session, *, post_id: int) -> bool:
        result = db.execute(delete(ForumPost).where(ForumPost.id == post_id).execution_options(synchronize_session=False))
        return result.rowcount == 1

    def get_pending(self, db: Session, *, limit: int = 50) -> List[ForumPost]:
        return (
            db.query(ForumPost)
            .filter(ForumPost.is_approved.is_(False))
            .order_by(ForumPost.created_at)
            .limit(limit)
            .all()
        )


forum_topic = CRUDForumTopic(ForumTopic)
forum_post = CRUDForumPost(ForumPost)
