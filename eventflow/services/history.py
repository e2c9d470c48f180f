"""Append-only event history."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventflow.models.event import Event, EventStatus
from eventflow.models.history import EventAction, EventHistory
from eventflow.services.state_machine import ROLE_LABELS, Actor
from eventflow.utils.errors import NotFoundError

_ACTION_VERBS = {
    EventAction.CREATE: "Submitted",
    EventAction.APPROVE: "Approved",
    EventAction.REJECT: "Rejected",
    EventAction.RETURN: "Returned",
    EventAction.RESUBMIT: "Resubmitted",
    EventAction.CANCEL: "Cancelled",
    EventAction.REVOKE: "Approval revoked",
}


def record_transition(
    db: Session,
    *,
    event: Event,
    old_status: EventStatus | None,
    action: EventAction,
    actor: Actor,
    remarks: str | None = None,
) -> EventHistory:
    """Stage a history row in the caller's transaction.

    The row is committed (or rolled back) together with the event update.
    """

    entry = EventHistory(
        event_id=event.id,
        old_status=old_status,
        new_status=event.status,
        action=action,
        actor_id=actor.actor_id,
        actor_role=actor.role,
        remarks=remarks,
        summary=f"{_ACTION_VERBS[action]} by {ROLE_LABELS[actor.role]}",
    )
    db.add(entry)
    return entry


def get_history(db: Session, event_id: int) -> list[EventHistory]:
    """Return the ordered transition log of an event. Never mutates state."""

    if db.get(Event, event_id) is None:
        raise NotFoundError("Event not found.", event_id=event_id)
    stmt = (
        select(EventHistory)
        .where(EventHistory.event_id == event_id)
        .order_by(EventHistory.id)
    )
    return list(db.scalars(stmt))


__all__ = ["record_transition", "get_history"]
