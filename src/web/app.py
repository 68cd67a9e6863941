"""
FastAPI application for the Pollution Report backend.

Routes:
- POST /api/triggers/documents : document-change events (report/announcement writes)
- POST /api/reports/rejection-notice : admin rejection warning email
- POST /api/admin/users/delete : administrative account deletion
- POST /api/verification/{email,password-change}/{send,verify} : one-time codes
- POST /api/auth/password-reset : custom password reset email
- /api/notifications : the caller's in-app inbox
- /health : liveness and readiness probes
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.database import get_database_settings
from config.settings import Settings, get_settings
from database.document_store import DocumentStore, InMemoryDocumentStore
from database.sql_document_store import SQLDocumentStore
from notifications.email_triggers import EmailTriggerService
from rbac.identity import IdentityProvider, InMemoryIdentityProvider
from security.api_errors import RequestIDMiddleware, register_exception_handlers
from services.logging_config import configure_logging

from .dependencies import ServiceContainer
from .routers import callables_router, health_router, notifications_router, triggers_router

logger = logging.getLogger(__name__)


def build_store() -> DocumentStore:
    """Pick the document store from DB_* settings."""
    db_settings = get_database_settings()
    if db_settings.is_memory:
        logger.warning("Using in-memory document store; data is lost on restart")
        return InMemoryDocumentStore()
    return SQLDocumentStore.from_settings(db_settings)


def create_app(
    store: Optional[DocumentStore] = None,
    identity: Optional[IdentityProvider] = None,
    email_triggers: Optional[EmailTriggerService] = None,
    settings: Optional[Settings] = None,
    configure_logs: bool = True,
) -> FastAPI:
    """
    Build the application.

    Every collaborator can be injected; anything omitted is built from
    configuration.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings.log_level, json_output=settings.log_json)

    for problem in settings.validate_production_security():
        logger.warning(f"Configuration: {problem}")

    if identity is None:
        if settings.is_production:
            raise RuntimeError(
                "An identity provider must be injected in production; "
                "in-memory accounts cannot delete users or send reset links"
            )
        logger.warning("No identity provider configured; using in-memory accounts")
        identity = InMemoryIdentityProvider()

    container = ServiceContainer(
        settings=settings,
        store=store or build_store(),
        identity=identity,
        email_triggers=email_triggers or EmailTriggerService(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(container.store, SQLDocumentStore):
            await container.store.create_schema()
        logger.info(f"{settings.name} started ({settings.environment})")
        yield
        if isinstance(container.store, SQLDocumentStore):
            await container.store.dispose()

    app = FastAPI(title=settings.name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.services = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(triggers_router)
    app.include_router(callables_router)
    app.include_router(notifications_router)
    app.include_router(health_router)

    return app


app = create_app()
