"""
Denormalized counters kept in step with the relationship rows they summarize.

``increment`` and ``decrement`` issue a single ``UPDATE ... SET col = col + n``
inside the caller's open transaction and never commit; the action service
commits the counter change together with the row insert or delete that
justifies it. The ``recount_*`` functions recompute a counter from its source
rows and write the corrected value back.
"""
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import InstrumentedAttribute

from alumni_hub import crud
from alumni_hub.db.models.achievement import AchievementCelebration
from alumni_hub.db.models.event import Event
from alumni_hub.db.models.fundraising import PeerFundraiser

logger = structlog.get_logger(__name__)


def increment(db: Session, column: InstrumentedAttribute, row_id: Any, amount: Any = 1, guard: Optional[Any] = None) -> bool:
    """
    Adds ``amount`` to ``column`` on the row with primary key ``row_id``.
    An optional ``guard`` expression is added to the WHERE clause; returns False
    when no row matched (missing row or guard not satisfied).
    """
    model = column.class_
    stmt = update(model).where(model.id == row_id).values({column.key: column + amount})
    if guard is not None:
        stmt = stmt.where(guard)
    result = db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount == 1


def decrement(db: Session, column: InstrumentedAttribute, row_id: Any, amount: Any = 1) -> bool:
    # Never drive a counter below zero; drift is repaired by the recount functions
    return increment(db, column, row_id, -amount, guard=column >= amount)


def current_value(db: Session, column: InstrumentedAttribute, row_id: Any) -> Any:
    model = column.class_
    return db.execute(select(column).where(model.id == row_id)).scalar_one_or_none()


def _write_back(db: Session, column: InstrumentedAttribute, row_id: Any, value: Any) -> None:
    model = column.class_
    db.execute(
        update(model).where(model.id == row_id).values({column.key: value}).execution_options(synchronize_session=False)
    )


# --- Seat reservation ---

def reserve_seat(db: Session, event_id: int) -> bool:
    """
    Takes one seat on the event if capacity allows, atomically.
    The capacity test lives in the UPDATE itself, so concurrent registrations
    cannot push attendee_count past max_attendees.
    """
    return increment(
        db,
        Event.attendee_count,
        event_id,
        guard=or_(Event.max_attendees.is_(None), Event.attendee_count < Event.max_attendees),
    )


def release_seat(db: Session, event_id: int) -> bool:
    return decrement(db, Event.attendee_count, event_id)


# --- Reconciliation ---

def recount_congratulations(db: Session, celebration_id: int) -> int:
    stored = current_value(db, AchievementCelebration.congratulations_count, celebration_id)
    live = crud.congratulation.count_by_celebration(db, celebration_id=celebration_id)
    if stored != live:
        logger.warning("counter_drift_corrected", counter="congratulations_count", row_id=celebration_id, stored=stored, live=live)
        _write_back(db, AchievementCelebration.congratulations_count, celebration_id, live)
    return live


def recount_attendees(db: Session, event_id: int) -> int:
    stored = current_value(db, Event.attendee_count, event_id)
    live = crud.event_registration.count_by_event(db, event_id=event_id)
    if stored != live:
        logger.warning("counter_drift_corrected", counter="attendee_count", row_id=event_id, stored=stored, live=live)
        _write_back(db, Event.attendee_count, event_id, live)
    return live


def recount_raised_amount(db: Session, fundraiser_id: int) -> Decimal:
    stored = current_value(db, PeerFundraiser.raised_amount, fundraiser_id)
    live = crud.donation.sum_completed(db, fundraiser_id=fundraiser_id)
    if stored is None or Decimal(str(stored)) != live:
        logger.warning("counter_drift_corrected", counter="raised_amount", row_id=fundraiser_id, stored=str(stored), live=str(live))
        _write_back(db, PeerFundraiser.raised_amount, fundraiser_id, live)
    return live
