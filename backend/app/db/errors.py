"""
Classification of data-store failures.

Service functions translate SQLAlchemy errors into :class:`StoreError` at their
boundary so callers match on :class:`DBErrorKind` instead of driver-specific
codes. The original exception stays reachable through ``.orig`` and
``__cause__``.
"""

from __future__ import annotations

import enum

from sqlalchemy import exc as sa_exc


class DBErrorKind(str, enum.Enum):
    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    UNDEFINED_TABLE = "undefined_table"
    CONNECTION = "connection"
    OTHER = "other"


# Postgres SQLSTATE codes
_PG_CODES = {
    "23505": DBErrorKind.UNIQUE_VIOLATION,
    "23503": DBErrorKind.FOREIGN_KEY_VIOLATION,
    "42P01": DBErrorKind.UNDEFINED_TABLE,
}

# sqlite3 extended result codes (Python 3.11+)
_SQLITE_ERROR_NAMES = {
    "SQLITE_CONSTRAINT_UNIQUE": DBErrorKind.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": DBErrorKind.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": DBErrorKind.FOREIGN_KEY_VIOLATION,
}

_SQLITE_MESSAGES = (
    ("unique constraint failed", DBErrorKind.UNIQUE_VIOLATION),
    ("foreign key constraint failed", DBErrorKind.FOREIGN_KEY_VIOLATION),
    ("no such table", DBErrorKind.UNDEFINED_TABLE),
)


class PriceWatchError(Exception):
    """Base class for errors raised by the data-access layer."""


class StoreError(PriceWatchError):
    def __init__(self, kind: DBErrorKind, message: str, orig: BaseException | None = None):
        super().__init__(message)
        self.kind = kind
        self.orig = orig

    @classmethod
    def from_exception(cls, exc: BaseException) -> "StoreError":
        orig = getattr(exc, "orig", None) or exc
        return cls(classify_db_error(exc), str(orig).strip(), orig=orig)


class WatchNotFoundError(PriceWatchError):
    """Raised when a targeted watchlist delete matched no rows."""


class UnsupportedDialectError(PriceWatchError):
    """The engine's dialect has no atomic insert-or-update construct."""


def classify_db_error(exc: BaseException) -> DBErrorKind:
    if isinstance(exc, sa_exc.TimeoutError):
        # pool exhausted
        return DBErrorKind.CONNECTION

    orig = getattr(exc, "orig", None) or exc

    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode in _PG_CODES:
        return _PG_CODES[pgcode]

    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname in _SQLITE_ERROR_NAMES:
        return _SQLITE_ERROR_NAMES[errorname]

    message = str(orig).lower()
    for needle, kind in _SQLITE_MESSAGES:
        if needle in message:
            return kind

    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return DBErrorKind.CONNECTION
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError)):
        return DBErrorKind.CONNECTION

    return DBErrorKind.OTHER
