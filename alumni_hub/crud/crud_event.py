import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.event import Event, EventFavorite, EventRegistration
from alumni_hub.schemas.enums import CheckInMethodEnum, RegistrationStatusEnum
from alumni_hub.schemas.event import EventCreate, EventFavoriteCreate, EventRegistrationCreate


class CRUDEvent(CRUDBase[Event, EventCreate]):
    pass


class CRUDEventRegistration(CRUDBase[EventRegistration, EventRegistrationCreate]):
    def get_by_user(self, db: Session, *, event_id: int, user_id: uuid.UUID) -> Optional[EventRegistration]:
        return db.query(EventRegistration).filter(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id,
        ).first()

    def create_confirmed(self, db: Session, *, event_id: int, user_id: uuid.UUID) -> EventRegistration:
        obj_in = EventRegistrationCreate(event_id=event_id, user_id=user_id)
        return self.create(db, obj_in=obj_in, status=RegistrationStatusEnum.CONFIRMED)

    def check_in(
        self,
        db: Session,
        *,
        registration_id: int,
        method: CheckInMethodEnum,
        notes: Optional[str],
        at: datetime,
    ) -> bool:
        """Confirmed -> checked_in. Returns False when the registration is no longer confirmed."""
        result = db.execute(
            update(EventRegistration)
            .where(
                EventRegistration.id == registration_id,
                EventRegistration.status == RegistrationStatusEnum.CONFIRMED,
            )
            .values(
                status=RegistrationStatusEnum.CHECKED_IN,
                checked_in_at=at,
                check_in_method=method,
                check_in_notes=notes,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_by_user(self, db: Session, *, event_id: int, user_id: uuid.UUID) -> bool:
        # Checked-in registrations stay
        result = db.execute(
            delete(EventRegistration)
            .where(
                EventRegistration.event_id == event_id,
                EventRegistration.user_id == user_id,
                EventRegistration.status == RegistrationStatusEnum.CONFIRMED,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def count_by_event(self, db: Session, *, event_id: int) -> int:
        return db.execute(
            select(func.count(EventRegistration.id)).where(EventRegistration.event_id == event_id)
        ).scalar_one()

    def get_multi_by_event(self, db: Session, *, event_id: int, skip: int = 0, limit: int = 100) -> List[EventRegistration]:
        return (
            db.query(EventRegistration)
            .filter(EventRegistration.event_id == event_id)
            .order_by(EventRegistration.registered_at)
            .offset(skip)
            .limit(limit)
            .all()
        )


class CRUDEventFavorite(CRUDBase[EventFavorite, EventFavoriteCreate]):
    def get_by_user(self, db: Session, *, event_id: int, user_id: uuid.UUID) -> Optional[EventFavorite]:
        return db.query(EventFavorite).filter(
            EventFavorite.event_id == event_id,
            EventFavorite.user_id == user_id,
        ).first()

    def delete_by_user(self, db: Session, *, event_id: int, user_id: uuid.UUID) -> bool:
        result = db.execute(
            delete(EventFavorite)
            .where(EventFavorite.event_id == event_id, EventFavorite.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_multi_by_user(self, db: Session, *, user_id: uuid.UUID, skip: int = 0, limit: int = 100) -> List[EventFavorite]:
        return (
            db.query(EventFavorite)
            .filter(EventFavorite.user_id == user_id)
            .order_by(EventFavorite.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


event = CRUDEvent(Event)
event_registration = CRUDEventRegistration(EventRegistration)
event_favorite = CRUDEventFavorite(EventFavorite)
