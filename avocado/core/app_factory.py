from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.marketplace_service import MarketplaceService
from ..application.services.message_service import MessageService
from ..application.services.reminder_service import ReminderService
from ..application.services.rental_service import RentalService
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.item_repository import ItemRepository
from ..infrastructure.repositories.message_repository import MessageRepository
from ..infrastructure.repositories.rental_repository import RentalRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..presentation.api.dispatch import QueryDispatchMiddleware
from ..presentation.api.error_handlers import setup_exception_handlers
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import cron as cron_router
from ..presentation.api.routers import marketplace as marketplace_router
from ..presentation.api.routers import messages as messages_router
from ..presentation.api.routers import rentals as rentals_router
from ..services.email_service import EmailService
from ..services.user_service import UserService

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Avocado Campus Marketplace", lifespan=_create_lifespan(settings))

    # Added first so it runs inside CORS: preflights are answered before any rewrite
    app.add_middleware(QueryDispatchMiddleware, prefix="/api")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(marketplace_router.router)
    app.include_router(messages_router.router)
    app.include_router(rentals_router.router)
    app.include_router(cron_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def build_container(settings: Settings) -> ApplicationContainer:
    database = SQLiteDatabase(settings.database_path, timeout=settings.database_timeout)
    database.initialize()

    users = UserRepository(database)
    items = ItemRepository(database)
    messages = MessageRepository(database)
    rentals = RentalRepository(database)

    email_service = EmailService(
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.smtp_password,
        from_email=settings.smtp_from_email,
    )
    user_service = UserService(
        users,
        jwt_secret=settings.jwt_secret,
        jwt_algorithm=settings.jwt_algorithm,
        jwt_expiration_hours=settings.jwt_expiration_hours,
        verification_expiration_hours=settings.verification_expiration_hours,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    if not settings.cron_api_key:
        logger.warning("CRON_API_KEY is not set; the reminder sweep will reject every call.")

    return ApplicationContainer(
        settings=settings,
        database=database,
        user_service=user_service,
        email_service=email_service,
        marketplace_service=MarketplaceService(items),
        message_service=MessageService(messages),
        rental_service=RentalService(rentals, items),
        reminder_service=ReminderService(rentals, email_service, settings.cron_api_key),
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        app.state.container = build_container(settings)  # type: ignore[attr-defined]
        try:
            yield
        finally:
            logger.info("Shutting down marketplace API")

    return lifespan
