"""Venue registry services."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from eventflow.models.event import Event
from eventflow.models.venue import Venue
from eventflow.schemas.venue import VenueCreate, VenueUpdate
from eventflow.services.availability import ScheduleWindow, find_conflicts, get_venue_or_404
from eventflow.utils.audit import log_audit
from eventflow.utils.errors import AlreadyExistsError, ConcurrentModificationError

logger = logging.getLogger(__name__)


def create_venue(db: Session, payload: VenueCreate, *, actor: str) -> Venue:
    """Register a managed venue and audit the creation."""

    venue = Venue(**payload.model_dump())
    db.add(venue)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyExistsError("Venue name already exists.", name=payload.name) from exc

    log_audit(
        db,
        actor=actor,
        action="CREATE_VENUE",
        entity="Venue",
        entity_id=venue.id,
        data={"name": venue.name, "capacity": venue.capacity},
    )
    db.commit()
    db.refresh(venue)
    logger.info("Venue created", extra={"venue_id": venue.id, "venue_name": venue.name})
    return venue


def update_venue(db: Session, venue_id: int, payload: VenueUpdate, *, actor: str) -> Venue:
    """Apply the fields set on ``payload``; deactivated venues stop taking new bookings."""

    changes = payload.model_dump(exclude_unset=True)
    venue = get_venue_or_404(db, venue_id, for_update=True)
    if not changes:
        return venue

    for field, value in changes.items():
        setattr(venue, field, value)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyExistsError("Venue name already exists.", name=changes.get("name")) from exc
    except StaleDataError as exc:
        db.rollback()
        raise ConcurrentModificationError(
            "The venue was modified concurrently. Please retry.", venue_id=venue_id
        ) from exc

    log_audit(
        db,
        actor=actor,
        action="UPDATE_VENUE",
        entity="Venue",
        entity_id=venue.id,
        data=changes,
    )
    db.commit()
    db.refresh(venue)
    logger.info("Venue updated", extra={"venue_id": venue.id, "fields": sorted(changes)})
    return venue


def get_venue(db: Session, venue_id: int) -> Venue:
    return get_venue_or_404(db, venue_id)


def list_venues(db: Session, *, active_only: bool = False) -> list[Venue]:
    stmt = select(Venue)
    if active_only:
        stmt = stmt.where(Venue.is_active.is_(True))
    return list(db.scalars(stmt.order_by(Venue.name)))


def check_availability(
    db: Session, venue_id: int, window: ScheduleWindow
) -> tuple[bool, list[Event]]:
    """Read-only preview of whether ``window`` is free at ``venue_id``."""

    get_venue_or_404(db, venue_id)
    conflicts = find_conflicts(db, venue_id, window)
    return not conflicts, conflicts


__all__ = ["check_availability", "create_venue", "get_venue", "list_venues", "update_venue"]
