from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .audit.logger import AuditLogger
from .audit.store import AuditStore, InMemoryAuditStore, SqlAlchemyAuditStore
from .auth.credentials import CredentialVerifier, build_credential_verifier
from .auth.exceptions import AuthenticationError, MathAPIError
from .auth.router import router as auth_router
from .auth.tokens import TokenService
from .config import Settings, get_settings
from .database import build_engine, build_session_factory, create_tables
from .log import configure_logging
from .metrics.collector import MetricsCollector
from .metrics.router import router as metrics_router
from .operations.exceptions import InvalidRequestError
from .operations.router import router as operations_router
from .pipeline import build_middleware

logger = structlog.get_logger("main")


# Exception handlers
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    return JSONResponse(status_code=400, content={"error": exc.message})


async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"error": exc.message})


async def math_api_exception_handler(request: Request, exc: MathAPIError):
    return JSONResponse(status_code=500, content={"error": exc.message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Settings | None = None,
    *,
    audit_store: AuditStore | None = None,
    credential_verifier: CredentialVerifier | None = None,
    token_service: TokenService | None = None,
    metrics: MetricsCollector | None = None,
) -> FastAPI:
    """Build the application with every shared service wired in.

    Services that need the database are created in the lifespan; everything
    else is ready as soon as this returns, so tests can pass in-memory
    collaborators and skip the lifespan entirely.

    Args:
        settings: Immutable configuration; loaded from the environment if omitted.
        audit_store: Sink for operation records; overrides AUDIT_BACKEND.
        credential_verifier: Login policy; overrides CREDENTIAL_BACKEND.
        token_service: Token issuer/verifier; built from settings if omitted.
        metrics: Metrics collector; a fresh registry if omitted.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    metrics = metrics or MetricsCollector()

    if audit_store is None and settings.AUDIT_BACKEND == "memory":
        audit_store = InMemoryAuditStore()
    if credential_verifier is None and settings.CREDENTIAL_BACKEND == "static":
        credential_verifier = build_credential_verifier(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if app.state.audit_logger is None or app.state.credential_verifier is None:
            # Startup: Create tables (simplistic migration)
            engine = build_engine(settings)
            await create_tables(engine)
            session_factory = build_session_factory(engine)
            if app.state.audit_logger is None:
                app.state.audit_logger = AuditLogger(
                    SqlAlchemyAuditStore(session_factory),
                    timeout=settings.AUDIT_WRITE_TIMEOUT_SECONDS,
                    metrics=metrics,
                )
            if app.state.credential_verifier is None:
                app.state.credential_verifier = build_credential_verifier(settings, session_factory)

        logger.info(
            "server_starting",
            app=settings.APP_NAME,
            audit_backend=settings.AUDIT_BACKEND,
            credential_backend=settings.CREDENTIAL_BACKEND,
        )
        yield

        # Shutdown: Close database connections
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG,
        middleware=build_middleware(metrics),
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.token_service = token_service or TokenService.from_settings(settings)
    app.state.credential_verifier = credential_verifier
    app.state.audit_logger = (
        AuditLogger(audit_store, timeout=settings.AUDIT_WRITE_TIMEOUT_SECONDS, metrics=metrics)
        if audit_store is not None
        else None
    )

    # Global exception handlers
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(AuthenticationError, authentication_exception_handler)
    app.add_exception_handler(MathAPIError, math_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": settings.APP_NAME}

    # Include routers
    app.include_router(auth_router)
    app.include_router(operations_router)
    app.include_router(metrics_router)

    return app


app = create_app()
