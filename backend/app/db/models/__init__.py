from app.db.base import Base
from app.db.models.user import User
from app.db.models.product import Product
from app.db.models.watchlist import WatchlistEntry
from app.db.models.product_source import ProductSource
from app.db.models.price_snapshot import PriceSnapshot

__all__ = [
    "Base",
    "User",
    "Product",
    "WatchlistEntry",
    "ProductSource",
    "PriceSnapshot",
]
