from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from alumni_hub import schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor, get_current_user
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.db.models.user import User
from alumni_hub.schemas.actor import Actor
from alumni_hub.services import celebration_service

router = APIRouter()
achievements_router = APIRouter()

# --- Achievements catalogue ---

@achievements_router.post("/", response_model=schemas.AchievementRead, status_code=status.HTTP_201_CREATED)
def create_achievement(
    achievement_in: schemas.AchievementCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = celebration_service.create_achievement(db, actor, achievement_in)
    return raise_for_outcome(outcome).record

@achievements_router.post("/{achievement_id}/award", response_model=schemas.UserAchievementRead, status_code=status.HTTP_201_CREATED)
def award_achievement(
    achievement_id: int,
    award_in: schemas.AchievementAward,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    outcome = celebration_service.award_achievement(db, actor, achievement_id, award_in.user_id)
    return raise_for_outcome(outcome).record

# --- Celebrations ---

@router.post("/", response_model=schemas.CelebrationRead, status_code=status.HTTP_201_CREATED)
def create_celebration(
    celebration_in: schemas.CelebrationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_current_actor),
):
    """
    Celebrate one of your own achievements. Without a message a default one is generated.
    """
    outcome = celebration_service.create_celebration(db, actor, celebration_in, current_user.username)
    return raise_for_outcome(outcome).record

@router.get("/", response_model=List[schemas.CelebrationRead])
def read_recent_celebrations(skip: int = 0, limit: int = 20, db: Session = Depends(get_db)):
    return celebration_service.get_recent_celebrations(db, skip=skip, limit=limit)

@router.get("/{celebration_id}/congratulations", response_model=List[schemas.CongratulationRead])
def read_congratulations(celebration_id: int, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    if celebration_service.get_celebration(db, celebration_id) is None:
        raise HTTPException(status_code=404, detail="Celebration not found")
    return celebration_service.get_congratulations(db, celebration_id, skip=skip, limit=limit)

@router.post("/{celebration_id}/congratulations", response_model=schemas.CongratulationResult)
def congratulate(
    celebration_id: int,
    congratulation_in: Optional[schemas.CongratulationCreate] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Congratulate the achiever. Returns the new congratulation and the updated count.
    """
    message = congratulation_in.message if congratulation_in else None
    outcome = celebration_service.congratulate(db, actor, celebration_id, message=message)
    raise_for_outcome(outcome)
    return {
        "congratulation": outcome.record,
        "congratulations_count": celebration_service.get_congratulations_count(db, celebration_id),
    }

@router.delete("/{celebration_id}/congratulations", response_model=schemas.CongratulationResult)
def remove_congratulation(celebration_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    outcome = celebration_service.remove_congratulation(db, actor, celebration_id)
    raise_for_outcome(outcome)
    return {
        "congratulation": None,
        "congratulations_count": celebration_service.get_congratulations_count(db, celebration_id),
    }

@router.post("/{celebration_id}/recount", response_model=schemas.CountResult)
def recount_congratulations(celebration_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Recompute congratulations_count from the stored congratulations (moderators only).
    """
    outcome = celebration_service.reconcile_congratulations(db, actor, celebration_id)
    return {"count": raise_for_outcome(outcome).record}
