"""API routers for the event approval backend."""
from fastapi import APIRouter

from . import apikeys, events, health, notifications, users, venues


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(users.router)
    api_router.include_router(apikeys.router)
    api_router.include_router(venues.router)
    api_router.include_router(events.router)
    api_router.include_router(notifications.router)
    return api_router
