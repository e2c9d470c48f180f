"""Notification trigger for committed transitions.

Delivery is best effort: a failure here is logged and never undoes the
transition that caused it.
"""
from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from eventflow.config import get_settings
from eventflow.models import Event, EventHistory, EventStatus, Notification, User, UserRole
from eventflow.services.state_machine import ROLE_LABELS

logger = logging.getLogger(__name__)

# Which role has to act next once an event lands in a given status.
_NEXT_ROLE = {
    EventStatus.PENDING_HOD: UserRole.HOD,
    EventStatus.RESUBMITTED: UserRole.HOD,
    EventStatus.RETURNED_TO_HOD: UserRole.HOD,
    EventStatus.PENDING_DEAN: UserRole.DEAN,
    EventStatus.RETURNED_TO_DEAN: UserRole.DEAN,
    EventStatus.PENDING_PRINCIPAL: UserRole.PRINCIPAL,
}
_SUBMITTER_STATUSES = {
    EventStatus.RETURNED_TO_COORDINATOR,
    EventStatus.APPROVED,
    EventStatus.REJECTED,
}


def notify(db: Session, *, recipient_id: int, event_id: int | None, message: str) -> Notification:
    """Persist a single in-app notification."""

    notification = Notification(user_id=recipient_id, event_id=event_id, message=message)
    db.add(notification)
    db.commit()
    return notification


def recipients_for(db: Session, event: Event) -> list[int]:
    """Users who should hear about ``event`` in its current status."""

    if event.status in _SUBMITTER_STATUSES:
        return [event.submitted_by]

    role = _NEXT_ROLE.get(event.status)
    if role is None:
        return []

    stmt = select(User.id).where(User.role == role, User.is_active.is_(True))
    if role == UserRole.HOD and event.department:
        stmt = stmt.where(User.department == event.department)
    return list(db.scalars(stmt.order_by(User.id)))


def build_message(event: Event, entry: EventHistory) -> str:
    actor = ROLE_LABELS[entry.actor_role]
    if event.status in _NEXT_ROLE and entry.new_status != entry.old_status:
        text = f"Event '{event.title}' is awaiting your review ({entry.summary.lower()})."
    elif event.status == EventStatus.APPROVED:
        text = f"Event '{event.title}' has been approved."
    elif event.status == EventStatus.REJECTED:
        text = f"Event '{event.title}' was rejected by {actor}."
    else:
        text = f"Event '{event.title}' was returned by {actor}."
    if entry.remarks:
        text = f"{text} Remarks: {entry.remarks}"
    return text[:500]


def notify_transition(db: Session, event: Event, entry: EventHistory) -> int:
    """Notify the next actor (or the submitter). Returns how many were sent."""

    if not get_settings().NOTIFICATIONS_ENABLED:
        return 0

    sent = 0
    try:
        recipients = [uid for uid in recipients_for(db, event) if uid != entry.actor_id]
        message = build_message(event, entry)
    except Exception:  # noqa: BLE001
        db.rollback()
        logger.exception("Could not resolve notification recipients", extra={"event_id": event.id})
        return 0

    for recipient_id in recipients:
        try:
            notify(db, recipient_id=recipient_id, event_id=event.id, message=message)
            sent += 1
        except Exception:  # noqa: BLE001
            db.rollback()
            logger.exception(
                "Notification delivery failed",
                extra={"event_id": event.id, "recipient_id": recipient_id},
            )
    if sent:
        logger.info(
            "Transition notifications sent",
            extra={"event_id": event.id, "status": event.status.value, "count": sent},
        )
    return sent


def list_notifications(
    db: Session, user_id: int, *, unread_only: bool = False, limit: int = 20
) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    return list(db.scalars(stmt))


def mark_all_read(db: Session, user_id: int) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return result.rowcount or 0


__all__ = [
    "build_message",
    "list_notifications",
    "mark_all_read",
    "notify",
    "notify_transition",
    "recipients_for",
]
