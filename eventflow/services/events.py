"""Event approval engine.

Every mutation follows the same unit of work:

1. read the event row with ``FOR UPDATE`` (fresh state, row lock),
2. validate role, ownership, source status and remarks,
3. for admissions into a reserved slot, lock the venue and re-check conflicts,
4. update status/stamps/remarks and stage the history row,
5. commit; the ``version`` compare-and-swap fails with ``StaleDataError``
   if another writer got there first.

A lost race is retried with fresh state before surfacing
``ConcurrentModificationError``. Notifications are sent only after commit.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from eventflow.config import get_settings
from eventflow.models import Event, EventAction, EventHistory, EventStatus, RELEASED_STATUSES, UserRole
from eventflow.schemas.event import EventCreate, EventResubmit
from eventflow.services import history as history_service
from eventflow.services import notifications as notifications_service
from eventflow.services.availability import ScheduleWindow, reserve_slot
from eventflow.services.state_machine import (
    Actor,
    ensure_remarks,
    ensure_source,
    resolve_revocation,
    resolve_rule,
    review_sources,
    revocation_remarks,
    status_label,
)
from eventflow.utils.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotFoundError,
    RevocationWindowClosedError,
    UnauthorizedRoleError,
    WorkflowError,
)
from eventflow.utils.time import today_utc, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")
TransitionResult = tuple[Event, EventHistory]

_EDITABLE_FIELDS = (
    "title",
    "description",
    "department",
    "expected_audience",
    "venue_id",
    "other_venue",
    "start_date",
    "end_date",
    "start_time",
    "end_time",
)


def run_with_retry(
    db: Session,
    operation: Callable[[], T],
    *,
    action: EventAction,
    event_id: int | None = None,
) -> T:
    """Run ``operation`` as one transaction, retrying lost compare-and-swap races."""

    max_retries = get_settings().TRANSITION_MAX_RETRIES
    attempt = 0
    while True:
        try:
            return operation()
        except StaleDataError as exc:
            db.rollback()
            if attempt >= max_retries:
                logger.warning(
                    "Concurrent modification not resolved by retry",
                    extra={"event_id": event_id, "action": action.value, "attempts": attempt + 1},
                )
                raise ConcurrentModificationError(event_id=event_id) from exc
            attempt += 1
            logger.warning(
                "Concurrent modification detected, retrying with fresh state",
                extra={"event_id": event_id, "action": action.value, "attempt": attempt},
            )
        except WorkflowError as exc:
            db.rollback()
            logger.info(
                "Event action refused",
                extra={"event_id": event_id, "action": action.value, "code": exc.code},
            )
            raise
        except SQLAlchemyError:
            db.rollback()
            raise


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found.", event_id=event_id)
    return event


def _get_event_for_update(db: Session, event_id: int) -> Event:
    stmt = (
        select(Event)
        .where(Event.id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    event = db.scalars(stmt).first()
    if event is None:
        raise NotFoundError("Event not found.", event_id=event_id)
    return event


def _clean(remarks: str | None) -> str | None:
    if remarks is None:
        return None
    return remarks.strip() or None


def create_event(db: Session, payload: EventCreate, *, actor: Actor) -> Event:
    """Register a new proposal in ``pending_hod`` after checking its venue slot."""

    if actor.role != UserRole.COORDINATOR:
        raise UnauthorizedRoleError(
            "Only coordinators can submit events.",
            role=actor.role.value,
            action=EventAction.CREATE.value,
        )

    def _create() -> TransitionResult:
        reserve_slot(db, payload.venue_id, payload.window(), require_active=True)
        event = Event(
            **payload.model_dump(include=set(_EDITABLE_FIELDS)),
            submitted_by=actor.actor_id,
            status=EventStatus.PENDING_HOD,
        )
        db.add(event)
        db.flush()
        entry = history_service.record_transition(
            db,
            event=event,
            old_status=None,
            action=EventAction.CREATE,
            actor=actor,
        )
        db.commit()
        return event, entry

    event, entry = run_with_retry(db, _create, action=EventAction.CREATE)
    logger.info(
        "Event created",
        extra={"event_id": event.id, "venue_id": event.venue_id, "actor_id": actor.actor_id},
    )
    notifications_service.notify_transition(db, event, entry)
    return event


def _apply_transition(
    db: Session,
    event_id: int,
    *,
    actor: Actor,
    action: EventAction,
    remarks: str | None,
    changes: EventResubmit | None,
) -> TransitionResult:
    rule = resolve_rule(actor.role, action)
    event = _get_event_for_update(db, event_id)

    if rule.owner_only and event.submitted_by != actor.actor_id:
        raise UnauthorizedRoleError(
            "Only the coordinator who submitted this event can do this.",
            event_id=event_id,
            action=action.value,
        )
    ensure_source(rule, event.status)
    ensure_remarks(rule, remarks)

    if changes is not None:
        for field in _EDITABLE_FIELDS:
            setattr(event, field, getattr(changes, field))

    if rule.admits_booking:
        reserve_slot(
            db,
            event.venue_id,
            ScheduleWindow.from_event(event),
            exclude_event_id=event.id,
            require_active=changes is not None,
        )

    old_status = event.status
    note = _clean(remarks)
    event.status = rule.target
    for stamp in rule.clears_stamps:
        setattr(event, stamp, None)
    if rule.sets_stamp:
        setattr(event, rule.sets_stamp, utcnow())
    event.remarks = None if rule.clears_remarks else note

    entry = history_service.record_transition(
        db,
        event=event,
        old_status=old_status,
        action=action,
        actor=actor,
        remarks=note,
    )
    db.commit()
    return event, entry


def transition_event(
    db: Session,
    event_id: int,
    *,
    actor: Actor,
    action: EventAction,
    remarks: str | None = None,
    changes: EventResubmit | None = None,
) -> Event:
    """Apply a table-driven transition (approve/reject/return/resubmit/cancel)."""

    event, entry = run_with_retry(
        db,
        lambda: _apply_transition(
            db,
            event_id,
            actor=actor,
            action=action,
            remarks=remarks,
            changes=changes,
        ),
        action=action,
        event_id=event_id,
    )
    logger.info(
        "Event transition applied",
        extra={
            "event_id": event.id,
            "action": action.value,
            "old_status": entry.old_status.value if entry.old_status else None,
            "new_status": event.status.value,
            "actor_id": actor.actor_id,
            "actor_role": actor.role.value,
        },
    )
    notifications_service.notify_transition(db, event, entry)
    return event


def resubmit_event(
    db: Session,
    event_id: int,
    payload: EventResubmit,
    *,
    actor: Actor,
    remarks: str | None = None,
) -> Event:
    """Save the coordinator's edits and restart the chain at the HOD."""

    return transition_event(
        db,
        event_id,
        actor=actor,
        action=EventAction.RESUBMIT,
        remarks=remarks,
        changes=payload,
    )


def cancel_event(db: Session, event_id: int, *, actor: Actor, reason: str | None = None) -> Event:
    return transition_event(
        db,
        event_id,
        actor=actor,
        action=EventAction.CANCEL,
        remarks=reason,
    )


def revoke_approval(
    db: Session,
    event_id: int,
    *,
    actor: Actor,
    today: date | None = None,
) -> Event:
    """Withdraw the caller's own sign-off, strictly before the event starts."""

    rule = resolve_revocation(actor.role)
    current_day = today or today_utc()

    def _revoke() -> TransitionResult:
        event = _get_event_for_update(db, event_id)
        if event.start_date <= current_day:
            raise RevocationWindowClosedError(
                event_id=event_id,
                start_date=event.start_date.isoformat(),
            )
        if event.status in RELEASED_STATUSES or getattr(event, rule.stamp) is None:
            raise InvalidTransitionError(
                f"There is no {actor.role.value} approval to revoke on this event.",
                event_id=event_id,
                status=event.status.value,
            )

        old_status = event.status
        note = revocation_remarks(rule)
        event.status = rule.target
        for stamp in rule.clears_stamps:
            setattr(event, stamp, None)
        event.remarks = note
        entry = history_service.record_transition(
            db,
            event=event,
            old_status=old_status,
            action=EventAction.REVOKE,
            actor=actor,
            remarks=note,
        )
        db.commit()
        return event, entry

    event, entry = run_with_retry(db, _revoke, action=EventAction.REVOKE, event_id=event_id)
    logger.info(
        "Approval revoked",
        extra={
            "event_id": event.id,
            "actor_role": actor.role.value,
            "reverted_to": status_label(event.status),
        },
    )
    notifications_service.notify_transition(db, event, entry)
    return event


def get_history(db: Session, event_id: int) -> list[EventHistory]:
    return history_service.get_history(db, event_id)


def list_events(
    db: Session,
    *,
    status: EventStatus | None = None,
    venue_id: int | None = None,
    submitted_by: int | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Event]:
    stmt = select(Event)
    if status is not None:
        stmt = stmt.where(Event.status == status)
    if venue_id is not None:
        stmt = stmt.where(Event.venue_id == venue_id)
    if submitted_by is not None:
        stmt = stmt.where(Event.submitted_by == submitted_by)
    stmt = stmt.order_by(Event.start_date, Event.start_time, Event.id).offset(offset).limit(limit)
    return list(db.scalars(stmt))


def pending_for_role(db: Session, role: UserRole, *, department: str | None = None) -> list[Event]:
    """Events waiting on ``role`` (the approver's work queue)."""

    sources = review_sources(role)
    if not sources:
        return []
    stmt = select(Event).where(Event.status.in_(list(sources)))
    if role == UserRole.HOD and department:
        stmt = stmt.where(Event.department == department)
    return list(db.scalars(stmt.order_by(Event.start_date, Event.id)))


__all__ = [
    "cancel_event",
    "create_event",
    "get_event",
    "get_history",
    "list_events",
    "pending_for_role",
    "resubmit_event",
    "revoke_approval",
    "run_with_retry",
    "transition_event",
]
