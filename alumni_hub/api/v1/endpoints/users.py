from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import structlog

from alumni_hub import crud, schemas
from alumni_hub.api.v1.deps import get_db, get_current_user
from alumni_hub.api.v1.endpoints.auth import issue_token
from alumni_hub.db.models.user import User
from alumni_hub.services.unit_of_work import transaction

router = APIRouter()
logger = structlog.get_logger(__name__)

@router.post("/", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def create_user(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    """
    Create a new user with no roles.
    Returns an access token.
    """
    if crud.user.get_by_username(db, username=user_in.username):
        raise HTTPException(status_code=400, detail="Username already registered")
    try:
        with transaction(db, "user.create", duplicates=True):
            user = crud.user.create(db, obj_in=user_in, roles=[])
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Username already registered")

    logger.info("user_created", user_id=str(user.id))
    return issue_token(user)

@router.get("/", response_model=List[schemas.UserPublic])
def read_users(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Retrieve users.
    """
    return crud.user.get_multi(db, skip=skip, limit=limit)

@router.get("/me", response_model=schemas.UserRead)
def read_user_me(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user's details.
    """
    return current_user
