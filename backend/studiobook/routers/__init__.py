"""API routers."""
from .appointments import router as appointments_router
from .clients import router as clients_router
from .devices import router as devices_router
from .notifications import router as notifications_router
from .photo_requests import router as photo_requests_router
from .scenarios import router as scenarios_router

__all__ = [
    "appointments_router",
    "clients_router",
    "devices_router",
    "notifications_router",
    "photo_requests_router",
    "scenarios_router",
]
