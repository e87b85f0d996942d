from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from alumni_hub.core.exceptions import StoreError

logger = structlog.get_logger(__name__)


@contextmanager
def transaction(db: Session, action: str, *, duplicates: bool = False, **log_context) -> Iterator[Session]:
    """
    Runs one action as a single transaction: commit on success, roll back otherwise.

    With ``duplicates=True`` an IntegrityError is re-raised untouched and the service
    checks it with require_duplicate. Any other database failure is logged and
    surfaced as a generic StoreError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if duplicates:
            raise
        logger.error("store_failure", action=action, exc_info=True, **log_context)
        raise StoreError(f"{action} failed") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("store_failure", action=action, exc_info=True, **log_context)
        raise StoreError(f"{action} failed") from e
    except Exception:
        db.rollback()
        raise


def require_duplicate(error: IntegrityError, action: str, duplicate_found: bool, **log_context) -> None:
    """
    Called after a failed insert once the caller has re-read the row its unique
    key points at. A visible row means the insert lost a race on that key and the
    caller reports a duplicate. Anything else, such as a missing foreign-key
    target, is logged and raised as StoreError.
    """
    if duplicate_found:
        return
    logger.error("store_failure", action=action, reason=str(error.orig), **log_context)
    raise StoreError(f"{action} failed") from error
