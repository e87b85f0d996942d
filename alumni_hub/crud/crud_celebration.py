import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.achievement import (
    Achievement,
    AchievementCelebration,
    Congratulation,
    UserAchievement,
)
from alumni_hub.schemas.celebration import (
    AchievementCreate,
    CelebrationCreate,
    CongratulationCreate,
    UserAchievementCreate,
)


class CRUDAchievement(CRUDBase[Achievement, AchievementCreate]):
    def get_by_name(self, db: Session, *, name: str) -> Optional[Achievement]:
        return db.query(Achievement).filter(Achievement.name == name).first()


class CRUDUserAchievement(CRUDBase[UserAchievement, UserAchievementCreate]):
    def get_by_user(self, db: Session, *, user_id: uuid.UUID, achievement_id: int) -> Optional[UserAchievement]:
        return db.query(UserAchievement).filter(
            UserAchievement.user_id == user_id,
            UserAchievement.achievement_id == achievement_id,
        ).first()


class CRUDCelebration(CRUDBase[AchievementCelebration, CelebrationCreate]):
    def get_multi_recent(self, db: Session, *, skip: int = 0, limit: int = 20) -> List[AchievementCelebration]:
        return (
            db.query(AchievementCelebration)
            .order_by(AchievementCelebration.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


class CRUDCongratulation(CRUDBase[Congratulation, CongratulationCreate]):
    def get_by_user(self, db: Session, *, celebration_id: int, user_id: uuid.UUID) -> Optional[Congratulation]:
        return db.query(Congratulation).filter(
            Congratulation.celebration_id == celebration_id,
            Congratulation.user_id == user_id,
        ).first()

    def delete_by_user(self, db: Session, *, celebration_id: int, user_id: uuid.UUID) -> bool:
        result = db.execute(
            delete(Congratulation)
            .where(Congratulation.celebration_id == celebration_id, Congratulation.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def count_by_celebration(self, db: Session, *, celebration_id: int) -> int:
        return db.execute(
            select(func.count(Congratulation.id)).where(Congratulation.celebration_id == celebration_id)
        ).scalar_one()

    def get_multi_by_celebration(
        self, db: Session, *, celebration_id: int, skip: int = 0, limit: int = 100
    ) -> List[Congratulation]:
        return (
            db.query(Congratulation)
            .filter(Congratulation.celebration_id == celebration_id)
            .order_by(Congratulation.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


achievement = CRUDAchievement(Achievement)
user_achievement = CRUDUserAchievement(UserAchievement)
celebration = CRUDCelebration(AchievementCelebration)
congratulation = CRUDCongratulation(Congratulation)
