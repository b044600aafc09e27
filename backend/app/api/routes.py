from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from app.api.errors import not_found_to_http, store_error_to_http
from app.api.v1.schemas import (
    AddProductRequest,
    DeleteProductRequest,
    ProductOut,
    ProductSummary,
)
from app.db.errors import StoreError, WatchNotFoundError
from app.db.session import get_engine
from app.services.pricing import fetch_watched_products
from app.services.watchlist import register_product, remove_watch

router = APIRouter(prefix="/products", tags=["products"])


@router.post("/add/name", response_model=ProductOut)
def add_product_by_name(
    payload: AddProductRequest,
    engine: Engine = Depends(get_engine),
):
    try:
        product = register_product(engine, payload.user_id, payload.product_name)
    except StoreError as e:
        raise store_error_to_http(e) from e

    return ProductOut.model_validate(product)


@router.get("/get/{user_id}", response_model=list[ProductSummary])
def get_user_tracked_products(
    user_id: int,
    engine: Engine = Depends(get_engine),
):
    try:
        products = fetch_watched_products(engine, user_id)
    except StoreError as e:
        raise store_error_to_http(e) from e

    return [ProductSummary.model_validate(p) for p in products]


@router.delete("/delete")
def delete_product(
    payload: DeleteProductRequest,
    engine: Engine = Depends(get_engine),
):
    try:
        remove_watch(engine, payload.user_id, payload.product_id)
    except WatchNotFoundError as e:
        raise not_found_to_http(e) from e
    except StoreError as e:
        raise store_error_to_http(e) from e

    return "Successfully deleted product"
