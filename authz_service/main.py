"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz_service.core.config import settings
from authz_service.core.exceptions import AuthzError
from authz_service.core.logging import configure_logging
from authz_service.api.dependencies.database import get_session_factory
from authz_service.api.dependencies.services import close_directories
from authz_service.api.routes import router as api_router, rpc_router
from authz_service.api.middleware.logging import LoggingMiddleware
from authz_service.api.middleware.request_id import RequestIdMiddleware
from authz_service.models.database import close_db

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    configure_logging(settings.log_level, settings.log_format)
    logger.info(
        "Authorization service starting",
        version=settings.app_version,
        environment=settings.environment,
    )

    yield

    await close_directories()
    await close_db()
    logger.info("Authorization service stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (order matters - last added is outermost)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Routes
    app.include_router(api_router, prefix="/api")
    app.include_router(rpc_router, tags=["rpc"])

    # Exception handlers
    @app.exception_handler(AuthzError)
    async def authz_exception_handler(request: Request, exc: AuthzError):
        """Render taxonomy errors as {"error": code, "message": ...}."""
        if exc.status_code >= 500:
            logger.error("Request failed", error=exc.code, path=request.url.path, **exc.context)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    # Health checks
    @app.get("/health")
    async def health_check():
        """Quick health check endpoint (for load balancers)."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get("/health/detailed")
    async def health_check_detailed(
        session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    ):
        """Health check with database status."""
        from authz_service.utils.health import HealthChecker, check_database

        checker = HealthChecker(
            version=settings.app_version,
            environment=settings.environment,
        )

        async def db_check():
            async with session_factory() as session:
                return await check_database(session)

        checker.add_check("database", db_check)

        health = await checker.run()
        status_code = 200 if health.status.value == "healthy" else 503
        return JSONResponse(content=health.to_dict(), status_code=status_code)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "authz_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers,
    )


if __name__ == "__main__":
    main()
