import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, delete, or_, update
from sqlalchemy.orm import Session

from alumni_hub.core.utils import ordered_pair
from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.connection import Connection
from alumni_hub.schemas.connection import ConnectionRequestCreate
from alumni_hub.schemas.enums import ConnectionStatusEnum


class CRUDConnection(CRUDBase[Connection, ConnectionRequestCreate]):
    def get_between(self, db: Session, *, user_a: uuid.UUID, user_b: uuid.UUID) -> Optional[Connection]:
        """Gets the connection for the unordered pair {user_a, user_b}, in any status."""
        low, high = ordered_pair(user_a, user_b)
        return db.query(Connection).filter(
            Connection.user_low_id == low,
            Connection.user_high_id == high,
        ).first()

    def exists_between(self, db: Session, *, user_a: uuid.UUID, user_b: uuid.UUID) -> bool:
        """Checks both directions explicitly, independent of the pair key columns."""
        return db.query(Connection.id).filter(
            or_(
                and_(Connection.requester_id == user_a, Connection.recipient_id == user_b),
                and_(Connection.requester_id == user_b, Connection.recipient_id == user_a),
            )
        ).first() is not None

    def create_request(
        self, db: Session, *, requester_id: uuid.UUID, recipient_id: uuid.UUID, message: Optional[str] = None
    ) -> Connection:
        low, high = ordered_pair(requester_id, recipient_id)
        return self.add(
            db,
            requester_id=requester_id,
            recipient_id=recipient_id,
            user_low_id=low,
            user_high_id=high,
            status=ConnectionStatusEnum.PENDING,
            message=message,
        )

    def transition_status(
        self,
        db: Session,
        *,
        connection_id: int,
        expected: ConnectionStatusEnum,
        new_status: ConnectionStatusEnum,
        at: datetime,
    ) -> bool:
        """
        Compare-and-set on the status column.
        Returns False when the row is no longer in the expected status.
        """
        values = {"status": new_status}
        if new_status == ConnectionStatusEnum.ACCEPTED:
            values["accepted_at"] = at
        elif new_status == ConnectionStatusEnum.DECLINED:
            values["declined_at"] = at
        result = db.execute(
            update(Connection)
            .where(Connection.id == connection_id, Connection.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_if_status(self, db: Session, *, connection_id: int, status: ConnectionStatusEnum) -> bool:
        result = db.execute(
            delete(Connection)
            .where(Connection.id == connection_id, Connection.status == status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_multi_for_user(
        self, db: Session, *, user_id: uuid.UUID, status: ConnectionStatusEnum, skip: int = 0, limit: int = 100
    ) -> List[Connection]:
        return (
            db.query(Connection)
            .filter(
                or_(Connection.requester_id == user_id, Connection.recipient_id == user_id),
                Connection.status == status,
            )
            .order_by(Connection.requested_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_pending_for_recipient(
        self, db: Session, *, user_id: uuid.UUID, skip: int = 0, limit: int = 20
    ) -> List[Connection]:
        """Gets pending requests where the given user is the recipient."""
        return (
            db.query(Connection)
            .filter(
                Connection.recipient_id == user_id,
                Connection.status == ConnectionStatusEnum.PENDING,
            )
            .order_by(Connection.requested_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


connection = CRUDConnection(Connection)
