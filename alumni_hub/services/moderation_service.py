from typing import Optional, Tuple, List

import structlog
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.core.config import settings
from alumni_hub.db.models.forum import ForumPost, ForumTopic
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import ModeratedItemTypeEnum, ModerationActionEnum, TopicStatusEnum
from alumni_hub.schemas.forum import ForumPostCreate, ForumTopicCreate
from alumni_hub.schemas.outcome import Outcome
from alumni_hub.services import transitions
from alumni_hub.services.unit_of_work import transaction

logger = structlog.get_logger(__name__)


def _auto_approved(actor: Actor) -> bool:
    # Moderators' own content skips the queue
    return not settings.FORUM_REQUIRES_APPROVAL or actor.has_any_role(settings.MODERATOR_ROLES)


def create_topic(db: Session, actor: Actor, topic_in: ForumTopicCreate) -> ForumTopic:
    with transaction(db, "forum.topic.create", actor_id=str(actor.id)):
        topic = crud.forum_topic.create(
            db,
            obj_in=topic_in,
            author_id=actor.id,
            status=TopicStatusEnum.ACTIVE,
            is_pinned=False,
            is_approved=_auto_approved(actor),
        )
    logger.info("forum_topic_created", topic_id=topic.id, actor_id=str(actor.id), is_approved=topic.is_approved)
    return topic


def create_post(db: Session, actor: Actor, topic_id: int, post_in: ForumPostCreate) -> Outcome:
    topic = crud.forum_topic.get_for_update(db, topic_id)
    outcome = transitions.post_to_topic(topic)
    if not outcome.allow:
        return outcome

    with transaction(db, "forum.post.create", topic_id=topic_id, actor_id=str(actor.id)):
        post = crud.forum_post.create(
            db, obj_in=post_in, topic_id=topic_id, author_id=actor.id, is_approved=_auto_approved(actor)
        )
    logger.info("forum_post_created", post_id=post.id, topic_id=topic_id, is_approved=post.is_approved)
    return outcome.with_record(post)


def get_pending(db: Session, actor: Actor, limit: int = 50) -> Tuple[Outcome, List[ForumTopic], List[ForumPost]]:
    """Topics and posts still waiting for a moderator, oldest first."""
    outcome = transitions.can_moderate(actor, settings.MODERATOR_ROLES)
    if not outcome.allow:
        return outcome, [], []
    return outcome, crud.forum_topic.get_pending(db, limit=limit), crud.forum_post.get_pending(db, limit=limit)


def _load(db: Session, item_type: ModeratedItemTypeEnum, item_id: int) -> Optional[object]:
    if item_type == ModeratedItemTypeEnum.TOPIC:
        return crud.forum_topic.get_for_update(db, item_id)
    return crud.forum_post.get_for_update(db, item_id)


def _changes(action: ModerationActionEnum, new_state: str) -> dict:
    if action == ModerationActionEnum.APPROVE:
        return {"is_approved": True}
    if action in (ModerationActionEnum.PIN, ModerationActionEnum.UNPIN):
        return {"is_pinned": action == ModerationActionEnum.PIN}
    return {"status": TopicStatusEnum(new_state)}


def moderate(
    db: Session, actor: Actor, item_type: ModeratedItemTypeEnum, item_id: int, action: ModerationActionEnum
) -> Outcome:
    item = _load(db, item_type, item_id)
    outcome = transitions.moderate_content(actor, item_type, item, action, settings.MODERATOR_ROLES)
    if not outcome.allow:
        logger.info(
            "moderation_rejected",
            item_type=item_type.value,
            item_id=item_id,
            action=action.value,
            actor_id=str(actor.id),
            reason=outcome.error.value,
        )
        return outcome

    store = crud.forum_topic if item_type == ModeratedItemTypeEnum.TOPIC else crud.forum_post
    key = {"topic_id": item_id} if item_type == ModeratedItemTypeEnum.TOPIC else {"post_id": item_id}

    with transaction(db, f"moderate.{action.value}", item_type=item_type.value, item_id=item_id):
        if action == ModerationActionEnum.REJECT:
            store.remove(db, **key)
        else:
            store.update_fields(db, **key, **_changes(action, outcome.new_state))

    if action == ModerationActionEnum.REJECT:
        db.expunge(item)
        record = None
    else:
        db.refresh(item)
        record = item

    logger.info(
        "content_moderated", item_type=item_type.value, item_id=item_id, action=action.value, actor_id=str(actor.id)
    )
    return outcome.with_record(record)
