import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import (
    GZipMiddleware,
)
from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.api.routes import router as products_router
from app.core.config import settings
from app.core.logger import configure_logging
from app.db.session import build_engine

logger = structlog.get_logger(__name__)


def create_app(engine: Engine | None = None) -> FastAPI:
    """
    Build the API. Pass ``engine`` to share an existing pool (tests); otherwise
    one is created from settings at startup and disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_engine = engine is None
        app.state.engine = build_engine() if owns_engine else engine
        logger.info("app.startup", database=app.state.engine.url.render_as_string())
        try:
            yield
        finally:
            if owns_engine:
                app.state.engine.dispose()
            logger.info("app.shutdown")

    app = FastAPI(
        title="PriceWatch API",
        description="Watchlists and lowest current prices across platforms",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http.request",
            status=response.status_code,
            method=request.method,
            path=request.url.path,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    app.include_router(products_router, prefix="/api/v1")

    @app.api_route("/health", methods=["GET", "HEAD"])
    def health_check(request: Request):
        try:
            with request.app.state.engine.connect() as connection:
                connection.execute(text("SELECT 1"))

            return {
                "status": "healthy",
                "service": "pricewatch-api",
                "database": "connected",
            }
        except Exception as e:
            logger.warning("health.database_unreachable", error=str(e))
            return {
                "status": "degraded",
                "service": "pricewatch-api",
                "database": "disconnected",
                "error": str(e),
            }

    return app


configure_logging()
app = create_app()
