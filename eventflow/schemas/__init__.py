"""Schema package exports."""
from .apikey import ApiKeyCreate, ApiKeyCreateOut, ApiKeyRead
from .event import (
    CancelPayload,
    EventCreate,
    EventHistoryRead,
    EventRead,
    EventResubmit,
    TransitionPayload,
)
from .notification import MarkReadResult, NotificationRead
from .user import UserCreate, UserRead
from .venue import AvailabilityRead, BookingRead, VenueCreate, VenueRead, VenueUpdate

__all__ = [
    "ApiKeyCreate",
    "ApiKeyCreateOut",
    "ApiKeyRead",
    "AvailabilityRead",
    "BookingRead",
    "CancelPayload",
    "EventCreate",
    "EventHistoryRead",
    "EventRead",
    "EventResubmit",
    "MarkReadResult",
    "NotificationRead",
    "TransitionPayload",
    "UserCreate",
    "UserRead",
    "VenueCreate",
    "VenueRead",
    "VenueUpdate",
]
