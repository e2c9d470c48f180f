"""User administration services."""
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventflow.models.api_key import ApiKey
from eventflow.models.user import User
from eventflow.schemas.apikey import ApiKeyCreate
from eventflow.schemas.user import UserCreate
from eventflow.utils.apikey import gen_key
from eventflow.utils.audit import log_audit
from eventflow.utils.errors import AlreadyExistsError, NotFoundError
from eventflow.utils.time import utcnow

logger = logging.getLogger(__name__)


def create_user(db: Session, payload: UserCreate, *, actor: str) -> User:
    user = User(**payload.model_dump())
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyExistsError("Username or email already in use.") from exc

    log_audit(
        db,
        actor=actor,
        action="CREATE_USER",
        entity="User",
        entity_id=user.id,
        data={"username": user.username, "email": user.email, "role": user.role.value},
    )
    db.commit()
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.", user_id=user_id)
    return user


def issue_api_key(db: Session, payload: ApiKeyCreate, *, actor: str) -> tuple[ApiKey, str]:
    """Create a key for ``payload.user_id``. Returns the row and the raw key."""

    get_user(db, payload.user_id)
    raw, prefix, key_hash = gen_key()
    expires_at = utcnow() + timedelta(days=payload.days_valid) if payload.days_valid else None
    row = ApiKey(
        name=payload.name,
        prefix=prefix,
        key_hash=key_hash,
        user_id=payload.user_id,
        expires_at=expires_at,
        is_active=True,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyExistsError("Key name already exists.", name=payload.name) from exc

    log_audit(
        db,
        actor=actor,
        action="CREATE_API_KEY",
        entity="ApiKey",
        entity_id=row.id,
        data={"name": row.name, "user_id": row.user_id},
    )
    db.commit()
    db.refresh(row)
    return row, raw


def revoke_api_key(db: Session, api_key_id: int, *, actor: str) -> ApiKey:
    row = db.get(ApiKey, api_key_id)
    if row is None:
        raise NotFoundError("API key not found.", api_key_id=api_key_id)

    action = "REVOKE_API_KEY" if row.is_active else "REVOKE_API_KEY_NOOP"
    row.is_active = False
    log_audit(db, actor=actor, action=action, entity="ApiKey", entity_id=row.id, data={"name": row.name})
    db.commit()
    return row


__all__ = ["create_user", "get_user", "issue_api_key", "revoke_api_key"]
