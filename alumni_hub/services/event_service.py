from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.core.utils import as_utc, utcnow
from alumni_hub.db.models.event import Event, EventFavorite, EventRegistration
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import CheckInMethodEnum
from alumni_hub.schemas.event import EventCreate, EventFavoriteCreate
from alumni_hub.schemas.outcome import ErrorKind, Outcome
from alumni_hub.services import aggregate_counter, transitions
from alumni_hub.services.unit_of_work import require_duplicate, transaction

logger = structlog.get_logger(__name__)


def create_event(db: Session, actor: Actor, event_in: EventCreate) -> Event:
    values = event_in.model_dump()
    # Stored as UTC so deadline comparisons do not depend on the client's offset
    for field in ("starts_at", "registration_deadline", "cancellation_deadline"):
        values[field] = as_utc(values[field])

    with transaction(db, "event.create", actor_id=str(actor.id)):
        event = crud.event.add(db, organizer_id=actor.id, attendee_count=0, **values)
    logger.info("event_created", event_id=event.id, organizer_id=str(actor.id), status=event.status.value)
    return event


def register(db: Session, actor: Actor, event_id: int, now: Optional[datetime] = None) -> Outcome:
    """
    Registers the actor for the event.

    The guards run against a fresh read of the event; the seat itself is taken by a
    conditional increment of attendee_count, so two registrations racing for the
    last seat cannot both succeed. A duplicate insert for the same user trips the
    unique index and rolls the seat back with it.
    """
    event = crud.event.get_for_update(db, event_id)
    if event is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Event not found.")

    now = now or utcnow()
    existing = crud.event_registration.get_by_user(db, event_id=event_id, user_id=actor.id)
    outcome = transitions.register_for_event(actor, event, existing, now, registration_count=event.attendee_count)
    if not outcome.allow:
        logger.info("registration_rejected", event_id=event_id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    record = None
    try:
        with transaction(db, "registration.register", duplicates=True, event_id=event_id, actor_id=str(actor.id)):
            if aggregate_counter.reserve_seat(db, event_id):
                record = crud.event_registration.create_confirmed(db, event_id=event_id, user_id=actor.id)
    except IntegrityError as e:
        duplicate = crud.event_registration.get_by_user(db, event_id=event_id, user_id=actor.id)
        require_duplicate(e, "registration.register", duplicate is not None, event_id=event_id, actor_id=str(actor.id))
        logger.info("registration_conflict", event_id=event_id, actor_id=str(actor.id))
        return Outcome.deny(ErrorKind.ALREADY_REGISTERED, "You are already registered for this event.")

    if record is None:
        logger.info("registration_rejected", event_id=event_id, actor_id=str(actor.id), reason=ErrorKind.FULL.value)
        return Outcome.deny(ErrorKind.FULL, "This event is full.")

    logger.info("registration_confirmed", event_id=event_id, actor_id=str(actor.id), registration_id=record.id)
    return outcome.with_record(record)


def unregister(db: Session, actor: Actor, event_id: int, now: Optional[datetime] = None) -> Outcome:
    event = crud.event.get_for_update(db, event_id)
    if event is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Event not found.")

    existing = crud.event_registration.get_by_user(db, event_id=event_id, user_id=actor.id)
    outcome = transitions.unregister_from_event(actor, event, existing, now or utcnow())
    if not outcome.allow:
        logger.info("unregistration_rejected", event_id=event_id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    with transaction(db, "registration.unregister", event_id=event_id, actor_id=str(actor.id)):
        deleted = crud.event_registration.delete_by_user(db, event_id=event_id, user_id=actor.id)
        if deleted:
            aggregate_counter.release_seat(db, event_id)
    db.expunge(existing)
    if not deleted:
        if crud.event_registration.get_by_user(db, event_id=event_id, user_id=actor.id) is not None:
            return Outcome.deny(ErrorKind.INVALID_STATE, "You have already checked in to this event.")
        return Outcome.deny(ErrorKind.NOT_REGISTERED, "You are not registered for this event.")

    logger.info("registration_cancelled", event_id=event_id, actor_id=str(actor.id))
    return outcome


def check_in(
    db: Session,
    actor: Actor,
    event_id: int,
    method: CheckInMethodEnum = CheckInMethodEnum.MANUAL,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Outcome:
    """
    Moves the actor's confirmed registration to checked_in. The seat stays taken,
    and a checked-in registration can no longer be cancelled.
    """
    event = crud.event.get_for_update(db, event_id)
    if event is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Event not found.")

    registration = crud.event_registration.get_by_user(db, event_id=event_id, user_id=actor.id)
    outcome = transitions.check_in(event, registration)
    if not outcome.allow:
        logger.info("check_in_rejected", event_id=event_id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    with transaction(db, "registration.check_in", event_id=event_id, actor_id=str(actor.id)):
        applied = crud.event_registration.check_in(
            db, registration_id=registration.id, method=method, notes=notes, at=now or utcnow()
        )
    if not applied:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Registration is no longer confirmed.")

    db.refresh(registration)
    logger.info("checked_in", event_id=event_id, actor_id=str(actor.id), method=method.value)
    return outcome.with_record(registration)


def get_attendees(db: Session, event_id: int, skip: int = 0, limit: int = 100) -> List[EventRegistration]:
    return crud.event_registration.get_multi_by_event(db, event_id=event_id, skip=skip, limit=limit)


def reconcile_attendees(db: Session, event_id: int) -> int:
    with transaction(db, "event.recount", event_id=event_id):
        count = aggregate_counter.recount_attendees(db, event_id)
    return count


# --- Favorites ---

def add_favorite(db: Session, actor: Actor, event_id: int) -> Outcome:
    if crud.event.get(db, event_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Event not found.")

    existing = crud.event_favorite.get_by_user(db, event_id=event_id, user_id=actor.id)
    outcome = transitions.add_favorite(existing)
    if not outcome.allow:
        return outcome

    try:
        with transaction(db, "favorite.add", duplicates=True, event_id=event_id, actor_id=str(actor.id)):
            record = crud.event_favorite.create(db, obj_in=EventFavoriteCreate(event_id=event_id, user_id=actor.id))
    except IntegrityError as e:
        duplicate = crud.event_favorite.get_by_user(db, event_id=event_id, user_id=actor.id)
        require_duplicate(e, "favorite.add", duplicate is not None, event_id=event_id, actor_id=str(actor.id))
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "Already in your favorites.")

    logger.info("event_favorited", event_id=event_id, actor_id=str(actor.id))
    return outcome.with_record(record)


def remove_favorite(db: Session, actor: Actor, event_id: int) -> Outcome:
    existing = crud.event_favorite.get_by_user(db, event_id=event_id, user_id=actor.id)
    outcome = transitions.remove_favorite(existing)
    if not outcome.allow:
        return outcome

    with transaction(db, "favorite.remove", event_id=event_id, actor_id=str(actor.id)):
        deleted = crud.event_favorite.delete_by_user(db, event_id=event_id, user_id=actor.id)
    db.expunge(existing)
    if not deleted:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Not in your favorites.")

    logger.info("event_unfavorited", event_id=event_id, actor_id=str(actor.id))
    return outcome


def get_favorites(db: Session, actor: Actor, skip: int = 0, limit: int = 100) -> List[EventFavorite]:
    return crud.event_favorite.get_multi_by_user(db, user_id=actor.id, skip=skip, limit=limit)
