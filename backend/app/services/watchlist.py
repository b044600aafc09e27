from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.errors import StoreError, UnsupportedDialectError, WatchNotFoundError
from app.db.models import Product, WatchlistEntry
from app.db.transaction import run_in_transaction
from app.services.pricing import PricePoint

logger = structlog.get_logger(__name__)


@dataclass
class RegisteredProduct:
    id: int
    name: str
    created_at: datetime
    prices: list[PricePoint] = field(default_factory=list)


_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_product(session: Session, product_name: str, now: datetime):
    dialect = session.get_bind().dialect.name
    try:
        dialect_insert = _UPSERT_DIALECTS[dialect]
    except KeyError:
        raise UnsupportedDialectError(
            f"product upsert not supported on {dialect}"
        ) from None

    products = Product.__table__
    stmt = dialect_insert(products).values(
        product_name=product_name,
        created_at=now,
        last_checked_at=None,
    )
    # no-op rewrite so RETURNING also yields the existing row on conflict
    stmt = stmt.on_conflict_do_update(
        index_elements=["product_name"],
        set_={"product_name": stmt.excluded.product_name},
    ).returning(products.c.id, products.c.product_name, products.c.created_at)

    return session.execute(stmt).one()


def register_product(engine: Engine, user_id: int, product_name: str) -> RegisteredProduct:
    """
    Find-or-create a product by name and add it to the user's watchlist.

    Both statements share one transaction: if the watchlist insert fails
    (duplicate pair, unknown user) a product created by this call is rolled
    back with it.
    """
    now = datetime.now(timezone.utc)

    def _work(session: Session):
        row = _upsert_product(session, product_name, now)
        session.execute(
            insert(WatchlistEntry).values(
                user_id=user_id,
                product_id=row.id,
                added_at=now,
            )
        )
        return row

    try:
        row = run_in_transaction(engine, _work)
    except SQLAlchemyError as e:
        err = StoreError.from_exception(e)
        logger.warning(
            "watchlist.register_failed",
            user_id=user_id,
            product_name=product_name,
            kind=err.kind.value,
        )
        raise err from e

    logger.info(
        "watchlist.product_registered",
        user_id=user_id,
        product_id=row.id,
        product_name=row.product_name,
    )

    # prices stay empty until the ingestion pipeline has primed the product
    return RegisteredProduct(
        id=row.id, name=row.product_name, created_at=row.created_at, prices=[]
    )


def remove_watch(engine: Engine, user_id: int, product_id: int) -> None:
    def _work(session: Session) -> None:
        result = session.execute(
            delete(WatchlistEntry)
            .where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.product_id == product_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise WatchNotFoundError("product not found in user's watchlist")

    try:
        run_in_transaction(engine, _work)
    except SQLAlchemyError as e:
        err = StoreError.from_exception(e)
        logger.warning(
            "watchlist.remove_failed",
            user_id=user_id,
            product_id=product_id,
            kind=err.kind.value,
        )
        raise err from e

    logger.info("watchlist.product_removed", user_id=user_id, product_id=product_id)
