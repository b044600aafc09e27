from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.errors import StoreError
from app.db.models import PriceSnapshot, Product, ProductSource, WatchlistEntry
from app.db.transaction import run_in_transaction

logger = structlog.get_logger(__name__)


@dataclass
class PricePoint:
    source: str
    price: float
    in_stock: bool
    timestamp: datetime


@dataclass
class WatchedProduct:
    product_id: int
    product_name: str
    image_url: str
    added_at: datetime
    last_checked_at: datetime | None

    # 0 / "" / False when no source has been observed yet
    lowest_price: float = 0.0
    lowest_source: str = ""
    in_stock: bool = False


def _watched_products_query(user_id: int):
    watched_ids = select(WatchlistEntry.product_id).where(
        WatchlistEntry.user_id == user_id
    )

    # latest snapshot per source; sources without snapshots drop out here
    latest_subq = (
        select(
            ProductSource.product_id.label("product_id"),
            ProductSource.platform.label("platform"),
            PriceSnapshot.price.label("price"),
            PriceSnapshot.in_stock.label("in_stock"),
            func.row_number()
            .over(
                partition_by=ProductSource.id,
                order_by=(desc(PriceSnapshot.checked_at), desc(PriceSnapshot.id)),
            )
            .label("rn"),
        )
        .join(PriceSnapshot, PriceSnapshot.product_source_id == ProductSource.id)
        .where(ProductSource.product_id.in_(watched_ids))
        .subquery()
    )

    # cheapest of those per product; price ties go to the first platform by name.
    # prices are compared as raw numbers, currency is not considered.
    ranked_subq = (
        select(
            latest_subq.c.product_id,
            latest_subq.c.platform,
            latest_subq.c.price,
            latest_subq.c.in_stock,
            func.row_number()
            .over(
                partition_by=latest_subq.c.product_id,
                order_by=(latest_subq.c.price.asc(), latest_subq.c.platform.asc()),
            )
            .label("price_rank"),
        )
        .where(latest_subq.c.rn == 1)
        .subquery()
    )

    lowest_subq = (
        select(
            ranked_subq.c.product_id,
            ranked_subq.c.platform,
            ranked_subq.c.price,
            ranked_subq.c.in_stock,
        )
        .where(ranked_subq.c.price_rank == 1)
        .subquery()
    )

    return (
        select(
            Product.id,
            Product.name,
            Product.image_url,
            Product.last_checked_at,
            WatchlistEntry.added_at,
            lowest_subq.c.price,
            lowest_subq.c.platform,
            lowest_subq.c.in_stock,
        )
        .select_from(WatchlistEntry)
        .join(Product, Product.id == WatchlistEntry.product_id)
        .outerjoin(lowest_subq, lowest_subq.c.product_id == Product.id)
        .where(WatchlistEntry.user_id == user_id)
        .order_by(desc(WatchlistEntry.added_at), desc(WatchlistEntry.product_id))
    )


def fetch_watched_products(engine: Engine, user_id: int) -> list[WatchedProduct]:
    """
    List the user's watched products, newest watch first, each with the
    lowest price among the latest snapshot of every source.

    Products nobody has priced yet come back with price 0 and an empty source.
    """
    query = _watched_products_query(user_id)

    def _work(session: Session):
        return session.execute(query).all()

    try:
        rows = run_in_transaction(engine, _work)
    except SQLAlchemyError as e:
        err = StoreError.from_exception(e)
        logger.warning("pricing.fetch_failed", user_id=user_id, kind=err.kind.value)
        raise err from e

    out: list[WatchedProduct] = []
    for product_id, name, image_url, last_checked_at, added_at, price, platform, in_stock in rows:
        out.append(
            WatchedProduct(
                product_id=product_id,
                product_name=name,
                image_url=image_url or "",
                added_at=added_at,
                last_checked_at=last_checked_at,
                lowest_price=float(price) if price is not None else 0.0,
                lowest_source=platform or "",
                in_stock=bool(in_stock) if in_stock is not None else False,
            )
        )

    logger.debug("pricing.fetched", user_id=user_id, count=len(out))
    return out
