from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.api_key import ApiKey
from eventflow.models.user import User
from eventflow.schemas.apikey import ApiKeyCreate, ApiKeyCreateOut, ApiKeyRead
from eventflow.security import require_admin
from eventflow.services import users as users_service
from eventflow.utils.errors import NotFoundError

router = APIRouter(prefix="/apikeys", tags=["apikeys"])


@router.post("", response_model=ApiKeyCreateOut, status_code=status.HTTP_201_CREATED)
def create_api_key(
    payload: ApiKeyCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ApiKeyCreateOut:
    """Issue a key server-side and return the raw value once."""

    row, raw = users_service.issue_api_key(db, payload, actor=f"user:{admin.id}")
    return ApiKeyCreateOut(
        id=row.id,
        name=row.name,
        user_id=row.user_id,
        key=raw,
        expires_at=row.expires_at,
    )


@router.get("/{api_key_id}", response_model=ApiKeyRead, dependencies=[Depends(require_admin)])
def get_apikey(api_key_id: int, db: Session = Depends(get_db)) -> ApiKey:
    row = db.get(ApiKey, api_key_id)
    if row is None:
        raise NotFoundError("API key not found.", api_key_id=api_key_id)
    return row


@router.delete(
    "/{api_key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def revoke_apikey(
    api_key_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Response:
    users_service.revoke_api_key(db, api_key_id, actor=f"user:{admin.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
