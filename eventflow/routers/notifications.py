"""In-app notification endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.notification import Notification
from eventflow.schemas.notification import MarkReadResult, NotificationRead
from eventflow.security import require_actor
from eventflow.services import notifications as notifications_service
from eventflow.services.state_machine import Actor

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Notification]:
    return notifications_service.list_notifications(
        db, actor.actor_id, unread_only=unread_only, limit=limit
    )


@router.post("/read-all", response_model=MarkReadResult)
def mark_all_read(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> MarkReadResult:
    return MarkReadResult(updated=notifications_service.mark_all_read(db, actor.actor_id))
