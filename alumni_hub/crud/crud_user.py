import uuid
from typing import Optional

from sqlalchemy.orm import Session

from alumni_hub.core.security import get_password_hash, verify_password
from alumni_hub.crud.base import CRUDBase
from alumni_hub.db.models.user import User
from alumni_hub.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate]):
    def get_by_username(self, db: Session, *, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def get_active(self, db: Session, *, user_id: uuid.UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()

    def create(self, db: Session, *, obj_in: UserCreate, **extra) -> User:
        values = obj_in.model_dump(exclude={"password"})
        db_obj = User(**values, hashed_password=get_password_hash(obj_in.password), **extra)
        db.add(db_obj)
        db.flush()
        return db_obj

    def authenticate(self, db: Session, *, username: str, password: str) -> Optional[User]:
        """Returns the active user matching the credentials, or None."""
        user = self.get_by_username(db, username=username)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user


user = CRUDUser(User)
