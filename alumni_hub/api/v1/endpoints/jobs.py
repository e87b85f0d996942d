from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from alumni_hub import schemas
from alumni_hub.api.v1.deps import get_db, get_current_actor
from alumni_hub.api.v1.outcomes import raise_for_outcome
from alumni_hub.schemas.actor import Actor
from alumni_hub.services import job_service

router = APIRouter()

@router.post("/", response_model=schemas.JobRead, status_code=status.HTTP_201_CREATED)
def create_job(job_in: schemas.JobCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return job_service.create_job(db, actor, job_in)

@router.get("/saved/me", response_model=List[schemas.SavedJobRead])
def read_saved_jobs(
    skip: int = 0, limit: int = 100, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)
):
    return job_service.get_saved_jobs(db, actor, skip=skip, limit=limit)

@router.post("/{job_id}/save", response_model=schemas.SavedJobRead)
def save_job(job_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Save a job. Saving an already saved job returns the existing entry.
    """
    outcome = job_service.save_job(db, actor, job_id)
    return raise_for_outcome(outcome).record

@router.delete("/{job_id}/save", response_model=schemas.ActionResult)
def unsave_job(job_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    outcome = job_service.unsave_job(db, actor, job_id)
    return {"message": outcome.message}
