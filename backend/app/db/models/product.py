from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)

    # shared by every user watching it; one row per distinct name
    name: Mapped[str] = mapped_column(
        "product_name", String(255), unique=True, nullable=False
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    # NULL until the ingestion pipeline has visited the product
    last_checked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    check_priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    watchers = relationship(
        "WatchlistEntry", back_populates="product", cascade="all, delete-orphan"
    )
    sources = relationship(
        "ProductSource", back_populates="product", cascade="all, delete-orphan"
    )
