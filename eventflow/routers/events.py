"""Event proposal endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.event import Event, EventStatus
from eventflow.models.history import EventHistory
from eventflow.models.user import User
from eventflow.schemas.event import (
    CancelPayload,
    EventCreate,
    EventHistoryRead,
    EventRead,
    EventResubmit,
    TransitionPayload,
)
from eventflow.security import require_actor, require_user
from eventflow.services import events as events_service
from eventflow.services.state_machine import Actor

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    """Submit a new event proposal."""

    return events_service.create_event(db, payload, actor=actor)


@router.get("", response_model=list[EventRead])
def list_events(
    status_filter: EventStatus | None = Query(default=None, alias="status"),
    venue_id: int | None = None,
    mine: bool = False,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Event]:
    return events_service.list_events(
        db,
        status=status_filter,
        venue_id=venue_id,
        submitted_by=actor.actor_id if mine else None,
        limit=limit,
        offset=offset,
    )


@router.get("/queue", response_model=list[EventRead])
def review_queue(
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> list[Event]:
    """Events currently waiting on the caller's role."""

    return events_service.pending_for_role(db, user.role, department=user.department)


@router.get("/{event_id}", response_model=EventRead)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    return events_service.get_event(db, event_id)


@router.post("/{event_id}/transition", response_model=EventRead)
def transition_event(
    event_id: int,
    payload: TransitionPayload,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    """Approve, reject or return an event on behalf of the caller's role."""

    return events_service.transition_event(
        db,
        event_id,
        actor=actor,
        action=payload.action,
        remarks=payload.remarks,
    )


@router.put("/{event_id}/resubmit", response_model=EventRead)
def resubmit_event(
    event_id: int,
    payload: EventResubmit,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    return events_service.resubmit_event(db, event_id, payload, actor=actor, remarks=payload.remarks)


@router.post("/{event_id}/revoke", response_model=EventRead)
def revoke_approval(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    """Withdraw the caller's own approval before the event starts."""

    return events_service.revoke_approval(db, event_id, actor=actor)


@router.post("/{event_id}/cancel", response_model=EventRead)
def cancel_event(
    event_id: int,
    payload: CancelPayload | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Event:
    reason = payload.reason if payload else None
    return events_service.cancel_event(db, event_id, actor=actor, reason=reason)


@router.get("/{event_id}/history", response_model=list[EventHistoryRead])
def get_history(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[EventHistory]:
    return events_service.get_history(db, event_id)
