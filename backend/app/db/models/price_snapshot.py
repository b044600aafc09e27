from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, func, true
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base


class PriceSnapshot(Base):
    """Append-only price observation written by the ingestion pipeline."""

    __tablename__ = "price_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True)

    product_source_id: Mapped[int] = mapped_column(
        ForeignKey("product_sources.id", ondelete="CASCADE"),
        nullable=False,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(
        String(8), nullable=False, default="USD", server_default="USD"
    )
    in_stock: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    source = relationship("ProductSource", back_populates="snapshots")


Index(
    "ix_price_snapshots_source_checked",
    PriceSnapshot.product_source_id,
    PriceSnapshot.checked_at.desc(),
)
