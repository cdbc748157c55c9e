# opsadmin/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import RedirectResponse

from opsadmin.adapters.configuration.config import Settings, get_settings
from opsadmin.adapters.configuration.logging_config import configure_logging
from opsadmin.adapters.inbound.api.v1.router import api_router as api_v1_router, register_resources
from opsadmin.adapters.outbound.persistence.database import (
    create_engine_from_settings,
    create_session_factory,
    get_db_context,
)
from opsadmin.adapters.outbound.persistence.models import Base
from opsadmin.adapters.outbound.persistence.seeds import run_all_seeds
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager
from opsadmin.application.use_cases.audit_log_use_cases import AsyncAuditRecorder
from opsadmin.domain.services.audit_classifier import AuditClassifier, ResourceRegistry
from opsadmin.shared.middleware import (
    AsyncExceptionMiddleware,
    AsyncRequestLoggingMiddleware,
    AuditMiddleware,
    request_validation_handler,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup creates missing tables and optionally seeds bootstrap data;
    shutdown disposes the engine.
    """
    logger: logging.Logger = app.state.logger
    settings: Settings = app.state.settings
    logger.info("Application starting up...")

    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_ON_STARTUP:
        async with get_db_context(app.state.session_factory) as db:
            await run_all_seeds(db, settings, logger)

    yield

    logger.info("Application shutting down...")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and its collaborators from ``settings``.

    Everything request handlers need (session factory, logger, token
    manager) lives on ``app.state``.
    """
    settings = settings or get_settings()
    logger = configure_logging(settings)

    app = FastAPI(
        title="OpsAdmin",
        description="Operations admin API: users, roles, permissions and audit trail",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    engine = create_engine_from_settings(settings, logger)
    session_factory = create_session_factory(engine)

    app.state.settings = settings
    app.state.logger = logger
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.auth_manager = UserAuthManager.from_settings(settings)

    registry = register_resources(ResourceRegistry.with_defaults())
    classifier = AuditClassifier(
        registry=registry,
        skip_prefixes=settings.AUDIT_SKIP_PREFIXES,
        audit_read_requests=settings.AUDIT_READ_REQUESTS,
        logger=logger.getChild("audit.classifier"),
    )
    recorder = AsyncAuditRecorder(session_factory, logger)
    app.state.audit_classifier = classifier
    app.state.audit_recorder = recorder

    # Last added runs first: exceptions -> request logging -> audit -> routes
    app.add_middleware(
        AuditMiddleware,
        classifier=classifier,
        recorder=recorder,
        logger=logger,
        trust_proxy_headers=settings.TRUST_PROXY_HEADERS,
    )
    app.add_middleware(AsyncRequestLoggingMiddleware, logger=logger, environment=settings.ENVIRONMENT)
    app.add_middleware(AsyncExceptionMiddleware, logger=logger, environment=settings.ENVIRONMENT)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def redirect_to_docs():
        return RedirectResponse(url="/docs")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        spec = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )

        # Remove unwanted schemas and 422 responses
        for schema in ("HTTPValidationError", "ValidationError"):
            spec.get("components", {}).get("schemas", {}).pop(schema, None)

        for path in spec.get("paths", {}).values():
            for op in path.values():
                op.get("responses", {}).pop("422", None)

        app.openapi_schema = spec
        return spec

    app.openapi = custom_openapi

    return app
