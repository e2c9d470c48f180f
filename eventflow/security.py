"""Security dependencies: API key validation and role enforcement."""
from __future__ import annotations

from typing import Callable, Set

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.api_key import ApiKey
from eventflow.models.user import User, UserRole
from eventflow.services.state_machine import Actor
from eventflow.utils.apikey import find_valid_key
from eventflow.utils.audit import log_audit
from eventflow.utils.errors import error_response
from eventflow.utils.time import utcnow


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def require_api_key(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> ApiKey:
    """Validate API key tokens and return the corresponding row."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_API_KEY", "API key required."),
        )

    key = find_valid_key(db, token)
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNAUTHORIZED", "Invalid or expired API key"),
        )

    key.last_used_at = utcnow()
    log_audit(
        db,
        actor=f"apikey:{key.id}",
        action="API_KEY_USED",
        entity="ApiKey",
        entity_id=key.id,
        data={"prefix": key.prefix},
    )
    db.commit()
    return key


def require_user(
    api_key: ApiKey = Depends(require_api_key),
    db: Session = Depends(get_db),
) -> User:
    """Return the active user owning the presented key."""

    user = api_key.user or db.get(User, api_key.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response("USER_INACTIVE", "User account is missing or disabled."),
        )
    return user


def require_actor(user: User = Depends(require_user)) -> Actor:
    return Actor(actor_id=user.id, role=user.role)


def require_roles(allowed: Set[UserRole]) -> Callable:
    """Restrict an endpoint to users holding one of ``allowed`` roles."""

    if not allowed:
        raise RuntimeError("require_roles needs a non-empty set of UserRole")

    def _dep(user: User = Depends(require_user)) -> User:
        if user.role in allowed:
            return user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response(
                "INSUFFICIENT_ROLE",
                f"Requires one of: {sorted(role.value for role in allowed)}",
            ),
        )

    return _dep


require_admin = require_roles({UserRole.ADMIN})


__all__ = ["require_actor", "require_admin", "require_api_key", "require_roles", "require_user"]
