"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db, close_db
from .errors import register_error_handlers
from .routers import (
    appointments_router,
    clients_router,
    devices_router,
    notifications_router,
    photo_requests_router,
    scenarios_router,
)
from .services.events import event_bus
from .services.push_sender import PushConfig, push_gateway
from .services.reactions import register_reactions
from .services.scheduler import scheduler_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_push():
    push_gateway.configure(PushConfig(
        enabled=settings.push_enabled,
        key_path=settings.apns_key_path,
        key_id=settings.apns_key_id,
        team_id=settings.apns_team_id,
        bundle_id=settings.apns_bundle_id,
        use_sandbox=settings.apns_use_sandbox,
    ))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting StudioBook")

    await init_db()
    logger.info("Database initialized")

    configure_push()
    register_reactions(event_bus)

    scheduler_service.start()

    yield

    scheduler_service.stop()
    # Let in-flight notifications finish before closing the pool
    await event_bus.drain()
    event_bus.clear()

    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="StudioBook",
        description="Bookings, moderation and notifications for photo studio scenarios",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to your domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(scenarios_router)
    app.include_router(appointments_router)
    app.include_router(clients_router)
    app.include_router(photo_requests_router)
    app.include_router(devices_router)
    app.include_router(notifications_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)
