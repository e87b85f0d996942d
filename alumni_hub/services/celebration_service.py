import uuid
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.core.config import settings
from alumni_hub.db.models.achievement import Achievement, AchievementCelebration, Congratulation
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.celebration import AchievementCreate, CelebrationCreate, UserAchievementCreate
from alumni_hub.schemas.outcome import ErrorKind, Outcome
from alumni_hub.services import aggregate_counter, transitions
from alumni_hub.services.unit_of_work import require_duplicate, transaction

logger = structlog.get_logger(__name__)

CELEBRATION_MESSAGES = {
    "career": "just unlocked the '{name}' achievement! Their career journey continues to inspire us all.",
    "education": "just earned the '{name}' achievement! Continuous learning at its finest.",
    "community": "just earned the '{name}' achievement! Thank you for being such an active community member.",
    "milestone": "just reached a major milestone with the '{name}' achievement!",
}


def create_achievement(db: Session, actor: Actor, achievement_in: AchievementCreate) -> Outcome:
    allowed = transitions.can_moderate(actor, settings.MODERATOR_ROLES)
    if not allowed.allow:
        return allowed
    if crud.achievement.get_by_name(db, name=achievement_in.name) is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "An achievement with this name already exists.")
    try:
        with transaction(db, "achievement.create", duplicates=True, actor_id=str(actor.id)):
            achievement = crud.achievement.create(db, obj_in=achievement_in)
    except IntegrityError as e:
        duplicate = crud.achievement.get_by_name(db, name=achievement_in.name)
        require_duplicate(e, "achievement.create", duplicate is not None, actor_id=str(actor.id))
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "An achievement with this name already exists.")
    return Outcome.ok("created", "Achievement created.", record=achievement)


def award_achievement(db: Session, actor: Actor, achievement_id: int, user_id: uuid.UUID) -> Outcome:
    allowed = transitions.can_moderate(actor, settings.MODERATOR_ROLES)
    if not allowed.allow:
        return allowed
    if crud.achievement.get(db, achievement_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Achievement not found.")
    if crud.user.get(db, user_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "User not found.")
    if crud.user_achievement.get_by_user(db, user_id=user_id, achievement_id=achievement_id) is not None:
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "User already has this achievement.")
    try:
        with transaction(db, "achievement.award", duplicates=True, achievement_id=achievement_id):
            awarded = crud.user_achievement.create(
                db, obj_in=UserAchievementCreate(user_id=user_id, achievement_id=achievement_id)
            )
    except IntegrityError as e:
        duplicate = crud.user_achievement.get_by_user(db, user_id=user_id, achievement_id=achievement_id)
        require_duplicate(e, "achievement.award", duplicate is not None, achievement_id=achievement_id)
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "User already has this achievement.")
    logger.info("achievement_awarded", achievement_id=achievement_id, user_id=str(user_id), awarded_by=str(actor.id))
    return Outcome.ok("awarded", "Achievement awarded.", record=awarded)


def _default_message(username: str, achievement: Achievement) -> str:
    template = CELEBRATION_MESSAGES.get(achievement.category, CELEBRATION_MESSAGES["milestone"])
    return f"{username} " + template.format(name=achievement.name)


def create_celebration(db: Session, actor: Actor, celebration_in: CelebrationCreate, username: str) -> Outcome:
    """Only the user who earned the achievement can start a celebration for it."""
    user_achievement = crud.user_achievement.get(db, celebration_in.user_achievement_id)
    if user_achievement is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "User achievement not found.")
    if user_achievement.user_id != actor.id:
        return Outcome.deny(ErrorKind.FORBIDDEN, "You can only celebrate your own achievements.")

    message = celebration_in.message
    if not message:
        message = _default_message(username, crud.achievement.get(db, user_achievement.achievement_id))

    with transaction(db, "celebration.create", actor_id=str(actor.id)):
        celebration = crud.celebration.add(
            db, user_achievement_id=user_achievement.id, message=message, congratulations_count=0
        )
    logger.info("celebration_created", celebration_id=celebration.id, actor_id=str(actor.id))
    return Outcome.ok("created", "Celebration created.", record=celebration)


def get_celebration(db: Session, celebration_id: int) -> Optional[AchievementCelebration]:
    return crud.celebration.get_for_update(db, celebration_id)


def get_congratulations_count(db: Session, celebration_id: int) -> int:
    return aggregate_counter.current_value(db, AchievementCelebration.congratulations_count, celebration_id) or 0


def congratulate(db: Session, actor: Actor, celebration_id: int, message: Optional[str] = None) -> Outcome:
    """
    Records the actor's congratulation and bumps the celebration's counter in the
    same transaction. A concurrent duplicate hits the unique index, which rolls the
    counter change back too.
    """
    if crud.celebration.get(db, celebration_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Celebration not found.")

    existing = crud.congratulation.get_by_user(db, celebration_id=celebration_id, user_id=actor.id)
    outcome = transitions.add_congratulation(existing)
    if not outcome.allow:
        return outcome

    try:
        with transaction(db, "congratulation.add", duplicates=True, celebration_id=celebration_id, actor_id=str(actor.id)):
            record = crud.congratulation.add(db, celebration_id=celebration_id, user_id=actor.id, message=message)
            aggregate_counter.increment(db, AchievementCelebration.congratulations_count, celebration_id)
    except IntegrityError as e:
        duplicate = crud.congratulation.get_by_user(db, celebration_id=celebration_id, user_id=actor.id)
        require_duplicate(e, "congratulation.add", duplicate is not None, celebration_id=celebration_id)
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "You have already congratulated this achievement.")

    logger.info("congratulation_added", celebration_id=celebration_id, actor_id=str(actor.id))
    return outcome.with_record(record)


def remove_congratulation(db: Session, actor: Actor, celebration_id: int) -> Outcome:
    """
    Removes the actor's congratulation. When there is nothing to remove the outcome
    is a plain "not allowed" with not_found; nothing is written.
    """
    existing = crud.congratulation.get_by_user(db, celebration_id=celebration_id, user_id=actor.id)
    outcome = transitions.remove_congratulation(existing)
    if not outcome.allow:
        return outcome

    with transaction(db, "congratulation.remove", celebration_id=celebration_id, actor_id=str(actor.id)):
        deleted = crud.congratulation.delete_by_user(db, celebration_id=celebration_id, user_id=actor.id)
        if deleted:
            aggregate_counter.decrement(db, AchievementCelebration.congratulations_count, celebration_id)
    db.expunge(existing)
    if not deleted:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Congratulation not found.")

    logger.info("congratulation_removed", celebration_id=celebration_id, actor_id=str(actor.id))
    return outcome


def reconcile_congratulations(db: Session, actor: Actor, celebration_id: int) -> Outcome:
    allowed = transitions.can_moderate(actor, settings.MODERATOR_ROLES)
    if not allowed.allow:
        return allowed
    if crud.celebration.get(db, celebration_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Celebration not found.")
    with transaction(db, "congratulation.recount", celebration_id=celebration_id):
        count = aggregate_counter.recount_congratulations(db, celebration_id)
    return Outcome.ok("reconciled", "Counter reconciled.", record=count)


def get_congratulations(db: Session, celebration_id: int, skip: int = 0, limit: int = 100) -> List[Congratulation]:
    return crud.congratulation.get_multi_by_celebration(db, celebration_id=celebration_id, skip=skip, limit=limit)


def get_recent_celebrations(db: Session, skip: int = 0, limit: int = 20) -> List[AchievementCelebration]:
    return crud.celebration.get_multi_recent(db, skip=skip, limit=limit)
