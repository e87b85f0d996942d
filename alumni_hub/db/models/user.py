import uuid
from sqlalchemy import Column, String, DateTime, Boolean, JSON, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    # Capability set handed to the core as Actor.roles, e.g. ["admin"] or ["moderator"]
    roles = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
