from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid

from alumni_hub.core.utils import utcnow
from alumni_hub.db.session import Base

class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), default="milestone", nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),)


class AchievementCelebration(Base):
    __tablename__ = "achievement_celebrations"

    id = Column(Integer, primary_key=True, index=True)
    user_achievement_id = Column(Integer, ForeignKey("user_achievements.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=True)
    # Denormalized count of Congratulation rows; reconcile with recount_congratulations
    congratulations_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Congratulation(Base):
    __tablename__ = "congratulations"

    id = Column(Integer, primary_key=True, index=True)
    celebration_id = Column(Integer, ForeignKey("achievement_celebrations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint('celebration_id', 'user_id', name='uq_congratulation_user'),)
