from typing import List

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.db.models.job import Job, SavedJob
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.job import JobCreate, SavedJobCreate
from alumni_hub.schemas.outcome import ErrorKind, Outcome
from alumni_hub.services import transitions
from alumni_hub.services.unit_of_work import require_duplicate, transaction

logger = structlog.get_logger(__name__)


def create_job(db: Session, actor: Actor, job_in: JobCreate) -> Job:
    with transaction(db, "job.create", actor_id=str(actor.id)):
        job = crud.job.create(db, obj_in=job_in, poster_id=actor.id)
    logger.info("job_created", job_id=job.id, poster_id=str(actor.id))
    return job


def save_job(db: Session, actor: Actor, job_id: int) -> Outcome:
    """
    Find-or-create. Saving a job that is already saved returns the existing row,
    including when a concurrent save wins the insert.
    """
    if crud.job.get(db, job_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Job not found.")

    existing = crud.saved_job.get_by_user(db, job_id=job_id, user_id=actor.id)
    outcome = transitions.save_job(existing)
    if existing is not None:
        return outcome.with_record(existing)

    try:
        with transaction(db, "job.save", duplicates=True, job_id=job_id, actor_id=str(actor.id)):
            record = crud.saved_job.create(db, obj_in=SavedJobCreate(job_id=job_id, user_id=actor.id))
    except IntegrityError as e:
        record = crud.saved_job.get_by_user(db, job_id=job_id, user_id=actor.id)
        require_duplicate(e, "job.save", record is not None, job_id=job_id, actor_id=str(actor.id))

    logger.info("job_saved", job_id=job_id, actor_id=str(actor.id))
    return outcome.with_record(record)


def unsave_job(db: Session, actor: Actor, job_id: int) -> Outcome:
    """Delete-if-exists; unsaving a job that is not saved is a silent success."""
    existing = crud.saved_job.get_by_user(db, job_id=job_id, user_id=actor.id)
    outcome = transitions.unsave_job(existing)
    if existing is None:
        return outcome

    with transaction(db, "job.unsave", job_id=job_id, actor_id=str(actor.id)):
        crud.saved_job.delete_by_user(db, job_id=job_id, user_id=actor.id)
    db.expunge(existing)
    logger.info("job_unsaved", job_id=job_id, actor_id=str(actor.id))
    return outcome


def get_saved_jobs(db: Session, actor: Actor, skip: int = 0, limit: int = 100) -> List[SavedJob]:
    return crud.saved_job.get_multi_by_user(db, user_id=actor.id, skip=skip, limit=limit)
