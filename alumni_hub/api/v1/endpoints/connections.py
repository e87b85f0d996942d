from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from alumni_hub import schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.schemas.actor import Actor
from alumni_hub.services import connection_service

router = APIRouter()

@router.post("/request", response_model=schemas.ConnectionRead)
def send_connection_request(
    request_in: schemas.ConnectionRequestCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Send a connection request to another user.
    """
    outcome = connection_service.request_connection(
        db, actor, request_in.target_user_id, message=request_in.message
    )
    return raise_for_outcome(outcome).record

@router.post("/{connection_id}/accept", response_model=schemas.ConnectionRead)
def accept_connection_request(
    connection_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = connection_service.accept_connection(db, actor, connection_id)
    return raise_for_outcome(outcome).record

@router.post("/{connection_id}/decline", response_model=schemas.ConnectionRead)
def decline_connection_request(
    connection_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    outcome = connection_service.decline_connection(db, actor, connection_id)
    return raise_for_outcome(outcome).record

@router.delete("/{connection_id}", response_model=schemas.ActionResult)
def remove_connection(
    connection_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    """
    Remove an accepted connection. Either party may remove it.
    """
    outcome = raise_for_outcome(connection_service.remove_connection(db, actor, connection_id))
    return {"message": outcome.message}

@router.get("/", response_model=List[schemas.ConnectionRead])
def read_connections(
    skip: int = 0, limit: int = 100, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    """
    Accepted connections of the current user.
    """
    return connection_service.get_connections(db, actor, skip=skip, limit=limit)

@router.get("/requests", response_model=List[schemas.ConnectionRead])
def read_pending_requests(
    skip: int = 0, limit: int = 20, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    """
    Pending requests addressed to the current user.
    """
    return connection_service.get_pending_requests(db, actor, skip=skip, limit=limit)
