"""
BookingDesk Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the collaborators (document
       store, object store, identity verifier), wires one Repository per
       resource plus the ImageManager onto app.state, and mounts the routers.
Who:   Called by uvicorn (uvicorn bookingdesk.main:app), by
       `python -m bookingdesk`, and by the tests with injected collaborators.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌───────┐ ┌──────────┐   │
    │  │  Req ID  │→│ Logging  │→│ GZip  │→│   CORS   │   │
    │  └──────────┘ └──────────┘ └───────┘ └──────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  /businesses  /clients  /appointments  /health      │
    │                                                     │
    │  app.state:                                         │
    │  settings, document_store, object_store,            │
    │  identity_verifier, businesses, clients,            │
    │  appointments, image_manager                        │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config validation → optional schema creation
    Shutdown: close the document store (dispose the engine)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookingdesk import __version__
from bookingdesk.config import Settings, settings as default_settings
from bookingdesk.database import create_engine
from bookingdesk.exceptions import BookingDeskError
from bookingdesk.middleware.logging import RequestLoggingMiddleware
from bookingdesk.middleware.request_id import RequestIDMiddleware, request_id_var
from bookingdesk.routes import appointments, businesses, clients, health
from bookingdesk.schemas.appointment import Appointment
from bookingdesk.schemas.business import Business
from bookingdesk.schemas.client import Client
from bookingdesk.services.document_store import DocumentStore, SQLDocumentStore
from bookingdesk.services.identity import HMACTokenVerifier, IdentityVerifier
from bookingdesk.services.image_manager import ImageManager
from bookingdesk.services.object_store import (
    FilesystemObjectStore,
    MinioObjectStore,
    ObjectStore,
)
from bookingdesk.services.repository import Repository

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Set up logging
        2. Validate critical configuration (logged, not fatal: /health keeps
           answering and every authenticated call is rejected)
        3. Create the documents table when DB_AUTO_CREATE is set

    Shutdown:
        1. Close the document store
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("BookingDesk Backend %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if config.db_auto_create:
        await app.state.document_store.create_schema()

    logger.info("Object store backend: %s (bucket %s)", config.object_store_backend, config.image_bucket)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("BookingDesk Backend shutting down...")
    await app.state.document_store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "invalid request: malformed JSON body"
    # Integer loc parts are list indexes or decoder offsets, not field names
    location = ".".join(
        part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"
    )
    detail = first.get("msg", "invalid value")
    return f"invalid request: {location}: {detail}" if location else f"invalid request: {detail}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": <message>}` responses.

    Handler hierarchy:
        BookingDeskError (and subclasses) → exc.status_code
        RequestValidationError            → 400 (malformed JSON, wrong types)
        StarletteHTTPException            → its own status (404 no route, 405)
        Exception (fallback)              → 500, generic message

    Internal details (context, stack traces) are logged, never returned.
    """

    @app.exception_handler(BookingDeskError)
    async def handle_bookingdesk_error(request: Request, exc: BookingDeskError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error(500, "An unexpected error occurred. Please try again later.")


# ══════════════════════════════════════════════════════════════════════════
# Collaborators
# ══════════════════════════════════════════════════════════════════════════

def build_object_store(config: Settings) -> ObjectStore:
    if config.object_store_backend == "minio":
        return MinioObjectStore.from_settings(config)
    return FilesystemObjectStore(config.storage_root)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    document_store: Optional[DocumentStore] = None,
    object_store: Optional[ObjectStore] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Every collaborator not passed in is built from `settings` (the module
    singleton by default). They are built exactly once here and shared by
    all requests for the life of the app.
    """
    config = settings or default_settings

    if document_store is None:
        document_store = SQLDocumentStore(create_engine(config.database_url, config=config))
    if object_store is None:
        object_store = build_object_store(config)
    if identity_verifier is None:
        identity_verifier = HMACTokenVerifier(config.auth_secret_key)

    app = FastAPI(
        title="BookingDesk API",
        description=(
            "Register businesses and clients, book appointments between them, "
            "and attach photos to businesses and clients."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    app.state.settings = config
    app.state.document_store = document_store
    app.state.object_store = object_store
    app.state.identity_verifier = identity_verifier
    app.state.businesses = Repository(
        document_store, config.business_collection, Business, "business"
    )
    app.state.clients = Repository(document_store, config.client_collection, Client, "client")
    app.state.appointments = Repository(
        document_store, config.appointment_collection, Appointment, "appointment"
    )
    app.state.image_manager = ImageManager(object_store, config.image_bucket)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(businesses.router)
    app.include_router(clients.router)
    app.include_router(appointments.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `bookingdesk.main:app` to be importable
app = create_app()
