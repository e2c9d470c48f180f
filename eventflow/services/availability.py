"""Venue conflict checking.

A booking occupies the same daily time-of-day window on every date of its
inclusive date range. Two bookings of one managed venue conflict when both
their date ranges and their time windows overlap; touching boundaries
(10:00 end, 10:00 start) do not conflict. Events held at a free-text
"other venue" are never checked.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, time

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventflow.models.event import Event, RELEASED_STATUSES
from eventflow.models.venue import Venue
from eventflow.utils.errors import NotFoundError, VenueUnavailableError
from eventflow.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleWindow:
    """Inclusive date range crossed with a daily time-of-day window."""

    start_date: date
    end_date: date | None
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")

    @property
    def last_date(self) -> date:
        return self.end_date or self.start_date

    @classmethod
    def from_event(cls, event: Event) -> "ScheduleWindow":
        return cls(
            start_date=event.start_date,
            end_date=event.end_date,
            start_time=event.start_time,
            end_time=event.end_time,
        )

    def dates_overlap(self, other: "ScheduleWindow") -> bool:
        return max(self.start_date, other.start_date) <= min(self.last_date, other.last_date)

    def times_overlap(self, other: "ScheduleWindow") -> bool:
        return self.start_time < other.end_time and other.start_time < self.end_time

    def overlaps(self, other: "ScheduleWindow") -> bool:
        return self.dates_overlap(other) and self.times_overlap(other)


def _candidates(
    db: Session,
    venue_id: int,
    window: ScheduleWindow,
    exclude_event_id: int | None,
) -> Iterator[Event]:
    """Yield reservations of ``venue_id`` whose dates can touch ``window``."""

    stmt = (
        select(Event)
        .where(
            Event.venue_id == venue_id,
            Event.status.not_in(list(RELEASED_STATUSES)),
            Event.start_date <= window.last_date,
            func.coalesce(Event.end_date, Event.start_date) >= window.start_date,
        )
        .order_by(Event.start_date, Event.id)
    )
    if exclude_event_id is not None:
        stmt = stmt.where(Event.id != exclude_event_id)
    yield from db.scalars(stmt)


def is_venue_available(
    db: Session,
    venue_id: int | None,
    window: ScheduleWindow,
    *,
    exclude_event_id: int | None = None,
) -> bool:
    """Return ``False`` as soon as one existing reservation overlaps ``window``."""

    if venue_id is None:
        return True
    for candidate in _candidates(db, venue_id, window, exclude_event_id):
        if window.overlaps(ScheduleWindow.from_event(candidate)):
            return False
    return True


def find_conflicts(
    db: Session,
    venue_id: int,
    window: ScheduleWindow,
    *,
    exclude_event_id: int | None = None,
) -> list[Event]:
    """Return every reservation of ``venue_id`` overlapping ``window``."""

    return [
        candidate
        for candidate in _candidates(db, venue_id, window, exclude_event_id)
        if window.overlaps(ScheduleWindow.from_event(candidate))
    ]


def get_venue_or_404(db: Session, venue_id: int, *, for_update: bool = False) -> Venue:
    stmt = select(Venue).where(Venue.id == venue_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    venue = db.scalars(stmt).first()
    if venue is None:
        raise NotFoundError("Venue not found.", venue_id=venue_id)
    return venue


def reserve_slot(
    db: Session,
    venue_id: int | None,
    window: ScheduleWindow,
    *,
    exclude_event_id: int | None = None,
    require_active: bool = False,
) -> Venue | None:
    """Lock ``venue_id``, verify the window is free and mark the venue as booked.

    Must run inside the caller's transaction: the venue row lock (and the
    version bump flushed at commit) serialises admissions on the same venue.
    """

    if venue_id is None:
        return None

    venue = get_venue_or_404(db, venue_id, for_update=True)
    if require_active and not venue.is_active:
        raise VenueUnavailableError("Venue is not accepting bookings.", venue_id=venue_id)

    if not is_venue_available(db, venue_id, window, exclude_event_id=exclude_event_id):
        logger.info(
            "Venue conflict detected",
            extra={
                "venue_id": venue_id,
                "start_date": window.start_date.isoformat(),
                "end_date": window.last_date.isoformat(),
                "exclude_event_id": exclude_event_id,
            },
        )
        raise VenueUnavailableError(venue_id=venue_id)

    venue.last_booked_at = utcnow()
    return venue


__all__ = [
    "ScheduleWindow",
    "find_conflicts",
    "get_venue_or_404",
    "is_venue_available",
    "reserve_slot",
]
