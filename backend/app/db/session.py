from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool

from app.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str | None = None) -> Engine:
    """
    Build the shared connection pool.

    The returned engine is the only shared mutable resource of the data layer;
    callers own it and pass it explicitly to every data-access function.
    """
    database_url = make_url(url or settings.DATABASE_URL)

    if database_url.get_backend_name() == "sqlite":
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,  # server-side idle timeouts
        connect_args={
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "keepalives": 1,
            "keepalives_idle": 30,
        },
    )


def get_engine(request: Request) -> Engine:
    return request.app.state.engine
