import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from tableside.core.config import Settings, settings as default_settings
from tableside.core.logger import setup_logging

# 1. Infrastructure & Application Imports
from tableside.infrastructure.database import connect_database, engine as default_engine, make_session_factory
from tableside.infrastructure.event_relay import EventRelay
from tableside.infrastructure.state_manager import StateManager
from tableside.infrastructure.repositories.menu_repository import SqlMenuRepository
from tableside.infrastructure.repositories.notification_repository import SqlNotificationRepository
from tableside.infrastructure.repositories.order_repository import SqlOrderRepository
from tableside.application.admin_console import AdminConsole
from tableside.application.cart_service import CartService
from tableside.application.checkout_service import CheckoutService
from tableside.application.menu_service import MenuService
from tableside.application.notification_service import NotificationService
from tableside.interfaces import cart_routes, live_sockets, menu_routes, notification_routes, order_routes
from tableside.interfaces.error_handlers import register_error_handlers
from tableside.interfaces.ISessionStore import ISessionStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    session_store: Optional[ISessionStore] = None,
) -> FastAPI:
    settings = settings or default_settings
    engine = engine if engine is not None else default_engine
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------------------------------------------------------
        # DATABASE CONNECTION (With Retry Logic)
        # ---------------------------------------------------------
        app.state.db_ready = connect_database(
            engine,
            retries=settings.DB_CONNECT_RETRIES,
            wait_seconds=settings.DB_CONNECT_WAIT_SECONDS,
        )
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ---------------------------------------------------------
    # COMPOSITION ROOT
    # ---------------------------------------------------------
    session_factory = make_session_factory(engine)
    read_retry = {
        "read_attempts": settings.READ_RETRY_ATTEMPTS,
        "read_base_delay": settings.READ_RETRY_BASE_DELAY,
    }
    store = session_store or StateManager(
        redis_url=settings.REDIS_URL,
        ttl=settings.SESSION_TTL_SECONDS,
        **read_retry,
    )
    menu_repo = SqlMenuRepository(session_factory, **read_retry)
    order_repo = SqlOrderRepository(session_factory, **read_retry)
    notification_repo = SqlNotificationRepository(session_factory, **read_retry)
    relay = EventRelay()

    cart_service = CartService(store, menu_repo)
    app.state.settings = settings
    app.state.session_store = store
    app.state.relay = relay
    app.state.db_ready = False
    app.state.menu_service = MenuService(menu_repo)
    app.state.cart_service = cart_service
    app.state.checkout_service = CheckoutService(
        cart_service,
        order_repo,
        relay,
        timezone=settings.TIMEZONE,
        reclear_attempts=settings.RECLEAR_ATTEMPTS,
        reclear_base_delay=settings.RECLEAR_BASE_DELAY,
    )
    app.state.admin_console = AdminConsole(order_repo, relay)
    app.state.notification_service = NotificationService(
        notification_repo, retention_days=settings.NOTIFICATION_RETENTION_DAYS
    )

    if not settings.ADMIN_API_TOKEN:
        logger.warning("⚠️ ADMIN_API_TOKEN not set. Admin routes are unauthenticated.")

    # Include Routers
    register_error_handlers(app)
    app.include_router(menu_routes.router)
    app.include_router(cart_routes.router)
    app.include_router(order_routes.router)
    app.include_router(notification_routes.router)
    app.include_router(live_sockets.router)

    @app.get("/")
    def health_check():
        status = "active" if app.state.db_ready else "degraded"
        return {
            "status": status,
            "system": settings.PROJECT_NAME,
            "sessionStore": getattr(store, "backend", "custom"),
        }

    return app


app = create_app()
