"""Event schemas."""
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from eventflow.models.event import EventStatus
from eventflow.models.history import EventAction
from eventflow.models.user import UserRole
from eventflow.services.availability import ScheduleWindow

REVIEW_ACTIONS = frozenset({EventAction.APPROVE, EventAction.REJECT, EventAction.RETURN})


class ScheduleFields(BaseModel):
    start_date: date
    end_date: date | None = None
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def window(self) -> ScheduleWindow:
        return ScheduleWindow(
            start_date=self.start_date,
            end_date=self.end_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class EventCreate(ScheduleFields):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    department: str | None = Field(default=None, max_length=120)
    expected_audience: int | None = Field(default=None, ge=1)
    venue_id: int | None = None
    other_venue: str | None = Field(default=None, max_length=255)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title cannot be blank")
        return value.strip()

    @field_validator("other_venue")
    @classmethod
    def _blank_other_venue_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _single_venue_ref(self):
        if (self.venue_id is None) == (self.other_venue is None):
            raise ValueError("Provide exactly one of venue_id or other_venue")
        return self


class EventResubmit(EventCreate):
    """Edited proposal sent back into the chain after a return."""

    remarks: str | None = Field(default=None, max_length=1000)


class TransitionPayload(BaseModel):
    action: EventAction
    remarks: str | None = None

    @field_validator("action")
    @classmethod
    def _review_actions_only(cls, value: EventAction) -> EventAction:
        if value not in REVIEW_ACTIONS:
            raise ValueError("action must be one of: approve, reject, return")
        return value


class CancelPayload(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class EventRead(BaseModel):
    id: int
    title: str
    description: str | None = None
    department: str | None = None
    expected_audience: int | None = None
    venue_id: int | None = None
    other_venue: str | None = None
    start_date: date
    end_date: date | None = None
    start_time: time
    end_time: time
    submitted_by: int
    status: EventStatus
    hod_approval_at: datetime | None = None
    dean_approval_at: datetime | None = None
    principal_approval_at: datetime | None = None
    remarks: str | None = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventHistoryRead(BaseModel):
    id: int
    event_id: int
    old_status: EventStatus | None = None
    new_status: EventStatus
    action: EventAction
    actor_id: int
    actor_role: UserRole
    remarks: str | None = None
    summary: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
