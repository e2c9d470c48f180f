"""Venue schemas."""
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventflow.models.event import EventStatus


class VenueCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    capacity: int | None = Field(default=None, ge=1)
    location: str | None = Field(default=None, max_length=255)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()


class VenueUpdate(BaseModel):
    """Partial venue edit; only the fields sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    capacity: int | None = Field(default=None, ge=1)
    location: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str | None) -> str | None:
        # Defaults skip validation, so ``None`` here was sent explicitly.
        if value is None or not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()

    @field_validator("is_active")
    @classmethod
    def _is_active_not_null(cls, value: bool | None) -> bool | None:
        if value is None:
            raise ValueError("is_active cannot be null")
        return value


class VenueRead(BaseModel):
    id: int
    name: str
    capacity: int | None = None
    location: str | None = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingRead(BaseModel):
    """A reservation currently holding part of a venue's calendar."""

    id: int
    title: str
    status: EventStatus
    start_date: date
    end_date: date | None = None
    start_time: time
    end_time: time

    model_config = ConfigDict(from_attributes=True)


class AvailabilityRead(BaseModel):
    venue_id: int
    available: bool
    conflicts: list[BookingRead] = Field(default_factory=list)
