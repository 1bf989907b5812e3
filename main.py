import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alertsync.config import Settings, get_settings
from alertsync.infrastructure.bootstrap import NotificationRuntime, build_runtime
from alertsync.infrastructure.notifications import (
    NotificationListPublisher,
    ObserverConnectionManager,
)
from alertsync.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    runtime_factory: Callable[[Settings], NotificationRuntime] = build_runtime,
) -> FastAPI:
    """Create the FastAPI host that owns the notification session."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Restore the store on startup and release the channel on shutdown."""

        logging.basicConfig(level=settings.log_level.upper())
        runtime = runtime_factory(settings)
        observers = ObserverConnectionManager()
        unsubscribe = runtime.session.store.subscribe(NotificationListPublisher(observers))
        app.state.notification_runtime = runtime
        app.state.observers = observers

        if settings.default_role:
            runtime.session.activate_role(settings.default_role)
        try:
            yield
        finally:
            unsubscribe()
            await runtime.aclose()
            app.state.notification_runtime = None
            logger.info("Notification engine stopped")

    app = FastAPI(lifespan=lifespan, title="alertsync")

    # Allows the Angular client served on localhost:4200 to observe the list.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:4200"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
