"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from contentops.api.v1 import router as api_v1_router
from contentops.config import Settings, get_settings
from contentops.errors import ContentOpsError
from contentops.repositories.base import StoreFactory
from contentops.repositories.memory import MemoryStoreFactory, seed_demo_data
from contentops.services.scheduling import schedule_now

logger = logging.getLogger(__name__)


def build_store_factory(settings: Settings) -> StoreFactory:
    """Pick the storage backend. The memory store is demo mode."""
    if settings.storage_backend == "memory":
        factory = MemoryStoreFactory()
        if settings.seed_demo_data:
            seed_demo_data(factory.db, schedule_now(settings.schedule_timezone))
        logger.info("Using in-memory store (demo data: %s)", settings.seed_demo_data)
        return factory

    from contentops.models.base import get_session_maker
    from contentops.repositories.sql import sql_store_factory

    return sql_store_factory(get_session_maker(settings.database_url, settings.debug))


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves as ``{"error": message, ...}``."""

    @app.exception_handler(ContentOpsError)
    async def contentops_error_handler(request: Request, exc: ContentOpsError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Passing ``settings`` also overrides ``get_settings`` for routes."""
    explicit_settings = settings is not None
    settings = settings or get_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        logger.info("Starting %s (%s store)...", settings.app_name, settings.storage_backend)
        if settings.storage_backend == "postgres":
            from contentops.models.base import Base, get_engine

            async with get_engine(settings.database_url, settings.debug).begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables verified")
        yield
        logger.info("Shutting down...")
        if settings.storage_backend == "postgres":
            from contentops.models.base import get_engine

            await get_engine(settings.database_url, settings.debug).dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-site content operations: keywords, schedules and n8n article jobs",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store_factory = build_store_factory(settings)
    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_v1_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "app": settings.app_name}

    @app.get("/health/detailed")
    async def detailed_health_check():
        checks = {}

        try:
            async with app.state.store_factory() as store:
                await store.ping()
            checks["store"] = {"ok": True, "backend": settings.storage_backend}
        except Exception as e:
            checks["store"] = {"ok": False, "backend": settings.storage_backend, "message": str(e)}

        checks["n8n_api_key"] = {"ok": bool(settings.n8n_api_key)}
        checks["n8n_webhook_base_url"] = {"ok": bool(settings.n8n_webhook_base_url)}

        status = "healthy" if checks["store"]["ok"] else "degraded"
        return {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        }

    return app


app = create_app()
