"""Tests for product registration and watch removal."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import is_dataclass
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from app.db.errors import (
    DBErrorKind,
    PriceWatchError,
    StoreError,
    UnsupportedDialectError,
    WatchNotFoundError,
)
from app.db.models import Product, WatchlistEntry
from app.services.pricing import fetch_watched_products
from app.services.watchlist import (
    RegisteredProduct,
    _upsert_product,
    register_product,
    remove_watch,
)


class TestRegisterProduct:

    def test_returns_registered_product(self, engine, seed):
        user_id = seed.user("buyer@example.com")

        product = register_product(engine, user_id, "product")

        assert product.id > 0
        assert product.name == "product"
        assert product.created_at is not None
        assert product.prices == []
        assert isinstance(product, RegisteredProduct)
        assert is_dataclass(product)
        assert seed.count(WatchlistEntry, WatchlistEntry.user_id == user_id) == 1

    def test_existing_product_is_reused_for_new_user(self, engine, seed):
        first_user = seed.user("first@example.com")
        second_user = seed.user("second@example.com")

        first = register_product(engine, first_user, "Mechanical Keyboard")
        second = register_product(engine, second_user, "Mechanical Keyboard")

        assert first.id == second.id
        assert first.created_at == second.created_at
        assert seed.count(Product, Product.name == "Mechanical Keyboard") == 1
        assert seed.count(WatchlistEntry, WatchlistEntry.product_id == first.id) == 2

    def test_concurrent_registration_converges_on_one_row(self, engine, seed):
        user_ids = [seed.user(f"user{i}@example.com") for i in range(4)]

        with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
            products = list(
                pool.map(lambda uid: register_product(engine, uid, "Race Condition"), user_ids)
            )

        assert len({p.id for p in products}) == 1
        assert seed.count(Product, Product.name == "Race Condition") == 1
        assert seed.count(WatchlistEntry, WatchlistEntry.product_id == products[0].id) == 4

    def test_duplicate_watch_fails_with_unique_violation(self, engine, seed):
        user_id = seed.user("dup@example.com")
        product = register_product(engine, user_id, "Headphones")

        with pytest.raises(StoreError) as exc_info:
            register_product(engine, user_id, "Headphones")

        assert exc_info.value.kind is DBErrorKind.UNIQUE_VIOLATION
        assert "user_watchlist" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None
        assert seed.count(
            WatchlistEntry,
            WatchlistEntry.user_id == user_id,
            WatchlistEntry.product_id == product.id,
        ) == 1

    def test_unknown_user_rolls_back_new_product(self, engine, seed):
        with pytest.raises(StoreError) as exc_info:
            register_product(engine, 99999, "Orphan Product")

        assert exc_info.value.kind is DBErrorKind.FOREIGN_KEY_VIOLATION
        assert seed.count(Product, Product.name == "Orphan Product") == 0

    def test_unknown_user_leaves_existing_product_untouched(self, engine, seed):
        product_id = seed.product("Existing", image_url="https://example.com/e.jpg")

        with pytest.raises(StoreError):
            register_product(engine, 99999, "Existing")

        assert seed.count(Product, Product.id == product_id) == 1
        assert seed.count(WatchlistEntry) == 0


    def test_unsupported_dialect_stays_in_error_hierarchy(self):
        session = SimpleNamespace(
            get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name="mysql"))
        )

        with pytest.raises(UnsupportedDialectError, match="mysql") as exc_info:
            _upsert_product(session, "Any Product", datetime.now(timezone.utc))

        assert isinstance(exc_info.value, PriceWatchError)
        assert not isinstance(exc_info.value, StoreError)


class TestRemoveWatch:

    def test_missing_pair_raises_not_found(self, engine, seed):
        user_id = seed.user("nobody@example.com")

        with pytest.raises(WatchNotFoundError, match="not found in user's watchlist"):
            remove_watch(engine, user_id, 12345)

    def test_unknown_ids_raise_not_found(self, engine):
        with pytest.raises(WatchNotFoundError):
            remove_watch(engine, 424242, 424242)

    def test_removes_only_the_matching_pair(self, engine, seed):
        alice = seed.user("alice@example.com")
        bob = seed.user("bob@example.com")
        shared = register_product(engine, alice, "Shared Monitor")
        register_product(engine, bob, "Shared Monitor")
        other = register_product(engine, alice, "Desk Lamp")

        remove_watch(engine, alice, shared.id)

        alice_ids = [p.product_id for p in fetch_watched_products(engine, alice)]
        bob_ids = [p.product_id for p in fetch_watched_products(engine, bob)]
        assert alice_ids == [other.id]
        assert bob_ids == [shared.id]
        # the product row itself is never deleted
        assert seed.count(Product, Product.id == shared.id) == 1

    def test_second_removal_is_not_found(self, engine, seed):
        user_id = seed.user("twice@example.com")
        product = register_product(engine, user_id, "Webcam")

        remove_watch(engine, user_id, product.id)

        with pytest.raises(WatchNotFoundError):
            remove_watch(engine, user_id, product.id)
