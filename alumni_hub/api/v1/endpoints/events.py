from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from alumni_hub import crud, schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.outcome import ErrorKind
from alumni_hub.services import event_service

router = APIRouter()

def _get_event_or_404(db: Session, event_id: int):
    event = crud.event.get_for_update(db, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event

@router.post("/", response_model=schemas.EventRead, status_code=status.HTTP_201_CREATED)
def create_event(event_in: schemas.EventCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return event_service.create_event(db, actor, event_in)

@router.get("/favorites/me", response_model=List[schemas.EventFavoriteRead])
def read_my_favorites(
    skip: int = 0, limit: int = 100, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    return event_service.get_favorites(db, actor, skip=skip, limit=limit)

@router.get("/{event_id}", response_model=schemas.EventRead)
def read_event(event_id: int, db: Session = Depends(get_db)):
    return _get_event_or_404(db, event_id)

@router.get("/{event_id}/attendees", response_model=List[schemas.EventRegistrationRead])
def read_attendees(event_id: int, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    _get_event_or_404(db, event_id)
    return event_service.get_attendees(db, event_id, skip=skip, limit=limit)

@router.post("/{event_id}/register", response_model=schemas.EventRegistrationRead)
def register_for_event(event_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Register the current user for an event.
    Closed, past-deadline, full and duplicate registrations are all rejected with 422.
    """
    _get_event_or_404(db, event_id)
    outcome = event_service.register(db, actor, event_id)
    return raise_for_outcome(outcome).record

@router.delete("/{event_id}/register", response_model=schemas.ActionResult)
def unregister_from_event(event_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    _get_event_or_404(db, event_id)
    outcome = raise_for_outcome(event_service.unregister(db, actor, event_id))
    return {"message": outcome.message}

@router.post("/{event_id}/check-in", response_model=schemas.EventRegistrationRead)
def check_in_to_event(
    event_id: int,
    check_in_in: Optional[schemas.EventCheckInCreate] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Check the current user in to an event they are registered for.
    """
    _get_event_or_404(db, event_id)
    check_in_in = check_in_in or schemas.EventCheckInCreate()
    outcome = event_service.check_in(db, actor, event_id, method=check_in_in.method, notes=check_in_in.notes)
    return raise_for_outcome(outcome).record

@router.post("/{event_id}/favorite", response_model=schemas.EventFavoriteRead)
def favorite_event(event_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    outcome = event_service.add_favorite(db, actor, event_id)
    return raise_for_outcome(outcome).record

@router.delete("/{event_id}/favorite", response_model=schemas.ActionResult)
def unfavorite_event(event_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    # A favorite that is not there is a rule failure, not a missing resource
    outcome = event_service.remove_favorite(db, actor, event_id)
    raise_for_outcome(outcome, overrides={ErrorKind.NOT_FOUND: status.HTTP_422_UNPROCESSABLE_ENTITY})
    return {"message": outcome.message}
