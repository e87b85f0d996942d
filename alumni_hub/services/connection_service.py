import uuid
from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumni_hub import crud
from alumni_hub.core.utils import utcnow
from alumni_hub.db.models.connection import Connection
from alumni_hub.schemas.actor import Actor
from alumni_hub.schemas.enums import ConnectionStatusEnum
from alumni_hub.schemas.outcome import ErrorKind, Outcome
from alumni_hub.services import transitions
from alumni_hub.services.unit_of_work import require_duplicate, transaction

logger = structlog.get_logger(__name__)


def request_connection(db: Session, actor: Actor, target_user_id: uuid.UUID, message: Optional[str] = None) -> Outcome:
    """
    Sends a connection request from the actor to the target user.
    The unique index on the unordered pair settles concurrent requests: one insert
    wins and every other one is reported as already_exists.
    """
    if target_user_id != actor.id and crud.user.get_active(db, user_id=target_user_id) is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "User not found.")

    existing = crud.connection.get_between(db, user_a=actor.id, user_b=target_user_id)
    outcome = transitions.request_connection(actor, target_user_id, existing)
    if not outcome.allow:
        logger.info("connection_request_rejected", actor_id=str(actor.id), target_id=str(target_user_id), reason=outcome.error.value)
        return outcome

    try:
        with transaction(db, "connection.request", duplicates=True, actor_id=str(actor.id)):
            record = crud.connection.create_request(
                db, requester_id=actor.id, recipient_id=target_user_id, message=message
            )
    except IntegrityError as e:
        duplicate = crud.connection.get_between(db, user_a=actor.id, user_b=target_user_id)
        require_duplicate(e, "connection.request", duplicate is not None, actor_id=str(actor.id))
        logger.info("connection_request_conflict", actor_id=str(actor.id), target_id=str(target_user_id))
        return Outcome.deny(ErrorKind.ALREADY_EXISTS, "A connection already exists between these users.")

    logger.info("connection_requested", connection_id=record.id, actor_id=str(actor.id), target_id=str(target_user_id))
    return outcome.with_record(record)


def _respond(
    db: Session, actor: Actor, connection_id: int, new_status: ConnectionStatusEnum, now: Optional[datetime]
) -> Outcome:
    connection = crud.connection.get_for_update(db, connection_id)
    if connection is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Connection request not found.")

    if new_status == ConnectionStatusEnum.ACCEPTED:
        outcome = transitions.accept_connection(actor, connection)
    else:
        outcome = transitions.decline_connection(actor, connection)
    if not outcome.allow:
        logger.info("connection_response_rejected", connection_id=connection_id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    with transaction(db, f"connection.{new_status.value}", connection_id=connection_id):
        applied = crud.connection.transition_status(
            db,
            connection_id=connection_id,
            expected=ConnectionStatusEnum.PENDING,
            new_status=new_status,
            at=now or utcnow(),
        )
    if not applied:
        # Another response landed between our read and our write
        return Outcome.deny(ErrorKind.INVALID_STATE, "Connection request is no longer pending.")

    db.refresh(connection)
    logger.info(f"connection_{new_status.value}", connection_id=connection_id, actor_id=str(actor.id))
    return outcome.with_record(connection)


def accept_connection(db: Session, actor: Actor, connection_id: int, now: Optional[datetime] = None) -> Outcome:
    return _respond(db, actor, connection_id, ConnectionStatusEnum.ACCEPTED, now)


def decline_connection(db: Session, actor: Actor, connection_id: int, now: Optional[datetime] = None) -> Outcome:
    return _respond(db, actor, connection_id, ConnectionStatusEnum.DECLINED, now)


def remove_connection(db: Session, actor: Actor, connection_id: int) -> Outcome:
    """
    Deletes an accepted connection. The row is gone afterwards, so either party
    may send a fresh request later.
    """
    connection = crud.connection.get_for_update(db, connection_id)
    if connection is None:
        return Outcome.deny(ErrorKind.NOT_FOUND, "Connection not found.")

    outcome = transitions.remove_connection(actor, connection)
    if not outcome.allow:
        logger.info("connection_remove_rejected", connection_id=connection_id, actor_id=str(actor.id), reason=outcome.error.value)
        return outcome

    with transaction(db, "connection.remove", connection_id=connection_id):
        deleted = crud.connection.delete_if_status(db, connection_id=connection_id, status=ConnectionStatusEnum.ACCEPTED)
    db.expunge(connection)
    if not deleted:
        return Outcome.deny(ErrorKind.INVALID_STATE, "Only accepted connections can be removed.")

    logger.info("connection_removed", connection_id=connection_id, actor_id=str(actor.id))
    return outcome


def get_connections(db: Session, actor: Actor, skip: int = 0, limit: int = 100) -> List[Connection]:
    return crud.connection.get_multi_for_user(
        db, user_id=actor.id, status=ConnectionStatusEnum.ACCEPTED, skip=skip, limit=limit
    )


def get_pending_requests(db: Session, actor: Actor, skip: int = 0, limit: int = 20) -> List[Connection]:
    return crud.connection.get_pending_for_recipient(db, user_id=actor.id, skip=skip, limit=limit)
