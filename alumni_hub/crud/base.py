from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from alumni_hub.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType]):
    """
    Key-based reads and writes for one table.
    Writes only flush: the calling service owns the transaction and commits once per action.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.get(self.model, id)

    def get_for_update(self, db: Session, id: Any) -> Optional[ModelType]:
        # Reload from the database even if the row is already in the identity map
        return db.execute(
            select(self.model).filter(self.model.id == id).execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        return list(db.execute(select(self.model).order_by(self.model.id).offset(skip).limit(limit)).scalars())

    def create(self, db: Session, *, obj_in: CreateSchemaType, **extra: Any) -> ModelType:
        db_obj = self.model(**obj_in.model_dump(), **extra)
        db.add(db_obj)
        db.flush()
        return db_obj

    def add(self, db: Session, **values: Any) -> ModelType:
        db_obj = self.model(**values)
        db.add(db_obj)
        db.flush()
        return db_obj
