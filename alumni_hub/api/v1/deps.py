from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import uuid

from alumni_hub import crud
from alumni_hub.core.security import decode_access_token
from alumni_hub.db.models.user import User
from alumni_hub.db.session import get_db
from alumni_hub.schemas.actor import Actor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token")

def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        credentials_exception.detail = "Invalid token"
        raise credentials_exception

    user_id_str = payload.get("user_id")
    if user_id_str is None:
        credentials_exception.detail = "User ID not found in token payload"
        raise credentials_exception
    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError:
        credentials_exception.detail = "Invalid user ID format in token"
        raise credentials_exception

    user = crud.user.get_active(db, user_id=user_id)
    if user is None:
        credentials_exception.detail = "User not found or inactive"
        raise credentials_exception
    return user

def get_current_actor(current_user: User = Depends(get_current_user)) -> Actor:
    return Actor(id=current_user.id, roles=frozenset(current_user.roles or []))
