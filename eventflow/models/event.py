"""Event proposal model definitions."""
from datetime import date, datetime, time
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class EventStatus(str, PyEnum):
    """Closed set of lifecycle states for an event proposal."""

    PENDING_HOD = "pending_hod"
    RETURNED_TO_COORDINATOR = "returned_to_coordinator"
    RESUBMITTED = "resubmitted"
    PENDING_DEAN = "pending_dean"
    RETURNED_TO_HOD = "returned_to_hod"
    PENDING_PRINCIPAL = "pending_principal"
    RETURNED_TO_DEAN = "returned_to_dean"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {EventStatus.APPROVED, EventStatus.REJECTED, EventStatus.CANCELLED}
)
# Statuses that free the venue; everything else blocks overlapping bookings.
RELEASED_STATUSES = frozenset({EventStatus.REJECTED, EventStatus.CANCELLED})


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Event(Base):
    """An event proposal routed through the approval chain."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_event_time_window"),
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_event_date_range",
        ),
        CheckConstraint(
            "(venue_id IS NOT NULL AND other_venue IS NULL) "
            "OR (venue_id IS NULL AND other_venue IS NOT NULL)",
            name="ck_event_single_venue_ref",
        ),
        Index("ix_events_status", "status"),
        Index("ix_events_venue_dates", "venue_id", "start_date", "end_date"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(String(120), nullable=True)
    expected_audience: Mapped[int | None] = mapped_column(Integer, nullable=True)

    venue_id: Mapped[int | None] = mapped_column(ForeignKey("venues.id"), nullable=True)
    other_venue: Mapped[str | None] = mapped_column(String(255), nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    submitted_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[EventStatus] = mapped_column(
        SqlEnum(
            EventStatus,
            name="event_status",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=EventStatus.PENDING_HOD,
    )

    hod_approval_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    dean_approval_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    principal_approval_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    venue = relationship("Venue", back_populates="events")
    submitter = relationship("User", foreign_keys=[submitted_by])
    history = relationship(
        "EventHistory",
        order_by="EventHistory.id",
        viewonly=True,
    )

    __mapper_args__ = {"version_id_col": version}
