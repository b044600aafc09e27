"""Shared pytest fixtures: a throwaway SQLite database and seed helpers."""

from collections.abc import Generator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.db.models import (
    Base,
    PriceSnapshot,
    Product,
    ProductSource,
    User,
    WatchlistEntry,
)
from app.db.session import build_engine
from app.main import create_app


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed so several threads can share it through the pool."""
    db_engine = build_engine(f"sqlite:///{tmp_path / 'pricewatch.db'}")
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@dataclass
class Seeder:
    """Inserts fixture rows directly, bypassing the services under test."""

    engine: Engine

    def _add(self, row):
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            return row.id

    def user(self, email: str) -> int:
        return self._add(User(email=email, password_hash="hashed_password_placeholder"))

    def product(self, name: str, image_url: str | None = None) -> int:
        return self._add(
            Product(
                name=name,
                image_url=image_url,
                created_at=datetime.now(timezone.utc),
                last_checked_at=datetime.now(timezone.utc),
                check_priority=0,
            )
        )

    def watch(self, user_id: int, product_id: int, added_at: datetime | None = None) -> None:
        with Session(self.engine) as session:
            session.add(
                WatchlistEntry(
                    user_id=user_id,
                    product_id=product_id,
                    added_at=added_at or datetime.now(timezone.utc),
                )
            )
            session.commit()

    def source(
        self,
        product_id: int,
        platform: str,
        platform_product_id: str = "",
        url: str = "",
    ) -> int:
        return self._add(
            ProductSource(
                product_id=product_id,
                platform=platform,
                platform_product_id=platform_product_id or f"{platform}-{product_id}",
                url=url or f"https://{platform}.example.com/p/{product_id}",
            )
        )

    def snapshot(
        self,
        source_id: int,
        price: float,
        currency: str = "USD",
        in_stock: bool = True,
        checked_at: datetime | None = None,
    ) -> int:
        return self._add(
            PriceSnapshot(
                product_source_id=source_id,
                price=price,
                currency=currency,
                in_stock=in_stock,
                checked_at=checked_at or datetime.now(timezone.utc),
            )
        )

    def count(self, model, *criteria) -> int:
        with Session(self.engine) as session:
            return session.scalar(select(func.count()).select_from(model).where(*criteria))


@pytest.fixture
def seed(engine: Engine) -> Seeder:
    return Seeder(engine)


@pytest.fixture
def hours_ago():
    now = datetime.now(timezone.utc)

    def _at(hours: float) -> datetime:
        return now - timedelta(hours=hours)

    return _at


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    with TestClient(create_app(engine=engine)) as test_client:
        yield test_client
