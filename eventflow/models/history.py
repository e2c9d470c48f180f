"""Event history (audit trail) model."""
from enum import Enum as PyEnum

from sqlalchemy import Enum as SqlEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .event import EventStatus, _enum_values
from .user import UserRole


class EventAction(str, PyEnum):
    """Actions an actor can request against an event."""

    CREATE = "create"
    APPROVE = "approve"
    REJECT = "reject"
    RETURN = "return"
    RESUBMIT = "resubmit"
    CANCEL = "cancel"
    REVOKE = "revoke"


class EventHistory(Base):
    """One immutable row per accepted transition.

    ``old_status`` is null only for the creation entry.
    """

    __tablename__ = "event_history"

    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    old_status: Mapped[EventStatus | None] = mapped_column(
        SqlEnum(EventStatus, name="event_status", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    new_status: Mapped[EventStatus] = mapped_column(
        SqlEnum(EventStatus, name="event_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    action: Mapped[EventAction] = mapped_column(
        SqlEnum(EventAction, name="event_action", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    actor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    actor_role: Mapped[UserRole] = mapped_column(
        SqlEnum(UserRole, name="user_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Free-form label kept for dashboards ("Returned by DEAN").
    summary: Mapped[str] = mapped_column(String(255), nullable=False)

    event = relationship("Event")
