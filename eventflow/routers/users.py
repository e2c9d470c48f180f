"""User endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.user import User
from eventflow.schemas.user import UserCreate, UserRead
from eventflow.security import require_admin, require_user
from eventflow.services import users as users_service
from eventflow.utils.audit import log_audit

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> User:
    """Create a new user."""

    return users_service.create_user(db, payload, actor=f"user:{admin.id}")


@router.get("/me", response_model=UserRead)
def read_me(user: User = Depends(require_user)) -> User:
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> User:
    """Retrieve a user by identifier."""

    user = users_service.get_user(db, user_id)
    log_audit(
        db,
        actor=f"user:{admin.id}",
        action="READ_USER",
        entity="User",
        entity_id=user.id,
        data={"reason": "api_read"},
    )
    db.commit()
    return user
