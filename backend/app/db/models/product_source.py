from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base


class ProductSource(Base):
    __tablename__ = "product_sources"
    __table_args__ = (
        UniqueConstraint("product_id", "platform", name="uq_product_sources_platform"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    platform: Mapped[str] = mapped_column(String(32), nullable=False)  # amazon|bestbuy|...
    platform_product_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )  # ASIN or SKU
    url: Mapped[str | None] = mapped_column("product_url", Text, nullable=True)

    product = relationship("Product", back_populates="sources")
    snapshots = relationship(
        "PriceSnapshot", back_populates="source", cascade="all, delete-orphan"
    )
