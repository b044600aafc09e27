from fastapi import HTTPException

from app.db.errors import DBErrorKind, StoreError, WatchNotFoundError

_STORE_ERROR_STATUS = {
    DBErrorKind.UNIQUE_VIOLATION: (409, "Duplicate entry"),
    DBErrorKind.FOREIGN_KEY_VIOLATION: (400, "Referenced record not found"),
    DBErrorKind.UNDEFINED_TABLE: (500, "Table not found"),
    DBErrorKind.CONNECTION: (503, "Database unavailable"),
    DBErrorKind.OTHER: (500, "Database error"),
}


def store_error_to_http(err: StoreError) -> HTTPException:
    status_code, detail = _STORE_ERROR_STATUS[err.kind]
    return HTTPException(status_code=status_code, detail=detail)


def not_found_to_http(err: WatchNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(err))
