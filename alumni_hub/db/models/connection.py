from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum, UniqueConstraint, CheckConstraint, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base
from alumni_hub.schemas.enums import ConnectionStatusEnum

class Connection(Base):
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Unordered pair key: the two party ids sorted, so A->B and B->A collide on the unique index
    user_low_id = Column(Uuid, nullable=False)
    user_high_id = Column(Uuid, nullable=False)

    status = Column(SAEnum(ConnectionStatusEnum, name="connectionstatusenum_sqlalchemy"), default=ConnectionStatusEnum.PENDING, nullable=False)
    message = Column(String(500), nullable=True)

    requested_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    declined_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('user_low_id', 'user_high_id', name='uq_connection_pair'),
        CheckConstraint('requester_id != recipient_id', name='ck_connection_not_self'),
    )
