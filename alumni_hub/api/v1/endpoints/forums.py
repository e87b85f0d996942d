from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Union

from alumni_hub import schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import ModeratedItemTypeEnum, ModerationActionEnum
from alumni_hub.services import moderation_service

router = APIRouter()

@router.post("/topics", response_model=schemas.ForumTopicRead, status_code=status.HTTP_201_CREATED)
def create_topic(topic_in: schemas.ForumTopicCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Start a topic. It stays hidden in the moderation queue until approved,
    unless the author is a moderator.
    """
    return moderation_service.create_topic(db, actor, topic_in)

@router.post("/topics/{topic_id}/posts", response_model=schemas.ForumPostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    topic_id: int, post_in: schemas.ForumPostCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = moderation_service.create_post(db, actor, topic_id, post_in)
    return raise_for_outcome(outcome).record

@router.get("/moderation/pending", response_model=schemas.PendingModerationRead)
def read_pending_content(limit: int = 50, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Topics and posts waiting for approval (moderators and admins only).
    """
    outcome, topics, posts = moderation_service.get_pending(db, actor, limit=limit)
    raise_for_outcome(outcome)
    return {"topics": topics, "posts": posts}

@router.post(
    "/moderate/{item_type}/{item_id}",
    response_model=Union[schemas.ForumTopicRead, schemas.ForumPostRead, schemas.ActionResult],
)
def moderate_content(
    item_type: ModeratedItemTypeEnum,
    item_id: int,
    action: ModerationActionEnum,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Apply a moderation action: approve or reject a topic or post; pin, unpin,
    lock or unlock a topic. Rejected content is deleted.
    """
    outcome = raise_for_outcome(moderation_service.moderate(db, actor, item_type, item_id, action))
    if outcome.record is None:
        return schemas.ActionResult(message=outcome.message)
    if item_type == ModeratedItemTypeEnum.TOPIC:
        return schemas.ForumTopicRead.model_validate(outcome.record)
    return schemas.ForumPostRead.model_validate(outcome.record)
