import uuid
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.job import Job, SavedJob
from alumni_hub.schemas.job import JobCreate, SavedJobCreate


class CRUDJob(CRUDBase[Job, JobCreate]):
    pass


class CRUDSavedJob(CRUDBase[SavedJob, SavedJobCreate]):
    def get_by_user(self, db: Session, *, job_id: int, user_id: uuid.UUID) -> Optional[SavedJob]:
        return db.query(SavedJob).filter(SavedJob.job_id == job_id, SavedJob.user_id == user_id).first()

    def delete_by_user(self, db: Session, *, job_id: int, user_id: uuid.UUID) -> bool:
        result = db.execute(
            delete(SavedJob)
            .where(SavedJob.job_id == job_id, SavedJob.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_multi_by_user(self, db: Session, *, user_id: uuid.UUID, skip: int = 0, limit: int = 100) -> List[SavedJob]:
        return (
            db.query(SavedJob)
            .filter(SavedJob.user_id == user_id)
            .order_by(SavedJob.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


job = CRUDJob(Job)
saved_job = CRUDSavedJob(SavedJob)
