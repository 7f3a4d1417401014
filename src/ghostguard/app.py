"""FastAPI application factory for GhostGuard."""

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from ghostguard.common.config import get_settings
from ghostguard.common.exceptions import GhostGuardError
from ghostguard.common.logging import get_logger, setup_logging
from ghostguard.common.schemas import HealthResponse, VersionResponse

logger = get_logger("app")


def _error(status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": code})


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves as ``{"success": false, "error": <code>}``."""

    @app.exception_handler(GhostGuardError)
    async def ghostguard_error(request: Request, exc: GhostGuardError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(400, "MISSING_FIELDS")

    @app.exception_handler(SQLAlchemyError)
    async def store_error(request: Request, exc: SQLAlchemyError):
        logger.error("store error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "DB_ERROR")

    @app.exception_handler(TimeoutError)
    async def store_timeout(request: Request, exc: TimeoutError):
        logger.error("store timeout on %s %s", request.method, request.url.path)
        return _error(500, "DB_ERROR")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "SERVER_ERROR")


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings.log_level)
        from ghostguard.deps import get_blob_store, get_db
        db = get_db()
        await db.init()
        await db.create_all()
        logger.info("GhostGuard backend %s started", settings.api_version)
        yield
        # Shutdown
        await get_blob_store().close()
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "GhostGuard Backend OK"

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(ts=int(time.time() * 1000))

    @app.get("/version", response_model=VersionResponse)
    async def version():
        return VersionResponse(
            version=settings.agent_version,
            download=settings.agent_download_url,
            notes=settings.agent_release_notes,
        )

    # Mount routers
    from ghostguard.licensing.router import router as licensing_router
    from ghostguard.identity.router import router as identity_router
    from ghostguard.telemetry.router import router as telemetry_router
    from ghostguard.bans.router import router as bans_router
    from ghostguard.detections.router import router as detections_router

    prefix = settings.api_prefix
    app.include_router(licensing_router, prefix=prefix, tags=["licensing"])
    app.include_router(identity_router, prefix=prefix, tags=["identity"])
    app.include_router(telemetry_router, prefix=prefix, tags=["telemetry"])
    app.include_router(bans_router, prefix=prefix, tags=["bans"])
    app.include_router(detections_router, prefix=prefix, tags=["detections"])

    # Evidence served from disk when the local blob backend is active
    if settings.blob_backend == "local":
        blob_root = Path(settings.blob_root)
        blob_root.mkdir(parents=True, exist_ok=True)
        app.mount("/blobs", StaticFiles(directory=blob_root, check_dir=False), name="blobs")

    return app
