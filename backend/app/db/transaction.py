from contextlib import suppress
from typing import Callable, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

T = TypeVar("T")


def run_in_transaction(engine: Engine, unit_of_work: Callable[[Session], T]) -> T:
    """
    Run ``unit_of_work`` inside a single transaction.

    Commits when it returns, re-raises whatever it raised after rolling back,
    and propagates a failed commit. The rollback in ``finally`` runs on every
    exit path; after a successful commit it is a no-op.
    """
    session = Session(bind=engine, autoflush=False)
    try:
        result = unit_of_work(session)
        session.commit()
        return result
    finally:
        # a failed rollback must not replace the error (or result) already
        # leaving this frame; close() hands the connection back regardless
        with suppress(SQLAlchemyError):
            session.rollback()
        session.close()
