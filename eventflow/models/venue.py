"""Venue model."""
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Venue(Base):
    """A managed, bookable location referenced by events."""

    __tablename__ = "venues"
    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_venue_positive_capacity"),
    )

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Touched whenever a booking is admitted so concurrent admissions on the
    # same venue collide on ``version``.
    last_booked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    events = relationship("Event", back_populates="venue")

    __mapper_args__ = {"version_id_col": version}
