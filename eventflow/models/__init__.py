"""ORM models package."""
from .api_key import ApiKey
from .audit import AuditLog
from .base import Base
from .event import Event, EventStatus, RELEASED_STATUSES, TERMINAL_STATUSES
from .history import EventAction, EventHistory
from .notification import Notification
from .user import User, UserRole
from .venue import Venue

__all__ = [
    "ApiKey",
    "AuditLog",
    "Base",
    "Event",
    "EventAction",
    "EventHistory",
    "EventStatus",
    "Notification",
    "RELEASED_STATUSES",
    "TERMINAL_STATUSES",
    "User",
    "UserRole",
    "Venue",
]
