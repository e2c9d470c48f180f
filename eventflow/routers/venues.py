"""Venue endpoints."""
from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from eventflow.db import get_db
from eventflow.models.user import User
from eventflow.models.venue import Venue
from eventflow.schemas.venue import AvailabilityRead, BookingRead, VenueCreate, VenueRead, VenueUpdate
from eventflow.security import require_actor, require_admin
from eventflow.services import venues as venues_service
from eventflow.services.availability import ScheduleWindow
from eventflow.services.state_machine import Actor
from eventflow.utils.errors import error_response

router = APIRouter(prefix="/venues", tags=["venues"])


@router.post("", response_model=VenueRead, status_code=status.HTTP_201_CREATED)
def create_venue(
    payload: VenueCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Venue:
    return venues_service.create_venue(db, payload, actor=f"user:{admin.id}")


@router.get("", response_model=list[VenueRead])
def list_venues(
    active_only: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Venue]:
    return venues_service.list_venues(db, active_only=active_only)


@router.get("/{venue_id}", response_model=VenueRead)
def get_venue(
    venue_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Venue:
    return venues_service.get_venue(db, venue_id)


@router.patch("/{venue_id}", response_model=VenueRead)
def update_venue(
    venue_id: int,
    payload: VenueUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Venue:
    return venues_service.update_venue(db, venue_id, payload, actor=f"user:{admin.id}")


@router.get("/{venue_id}/availability", response_model=AvailabilityRead)
def venue_availability(
    venue_id: int,
    start_date: date,
    start_time: time,
    end_time: time,
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> AvailabilityRead:
    """Preview whether a slot is free. Nothing is reserved."""

    try:
        window = ScheduleWindow(
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_response("INVALID_WINDOW", str(exc)),
        ) from exc

    available, conflicts = venues_service.check_availability(db, venue_id, window)
    return AvailabilityRead(
        venue_id=venue_id,
        available=available,
        conflicts=[BookingRead.model_validate(event) for event in conflicts],
    )
